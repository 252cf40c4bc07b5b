"""Credential provisioning entry point.

Resolves the signing identity (required) and, when TLS_HOST is configured,
the TLS identity (optional) before the reseed tool starts serving.
"""

import logging
import sys
from dataclasses import dataclass
from pathlib import Path

from opentelemetry import trace
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

from credentials.domain.models import LoadedSigningIdentity, ResolvedPaths
from credentials.errors import CredentialError, MissingInputError
from credentials.pki.issuer import IdentityIssuer
from credentials.pki.roles import signing_role, tls_role
from credentials.services.prompt import stdin_confirm
from credentials.services.store import IdentityStore
from shared.config import Settings, settings
from shared.logging import setup_logging
from shared.metrics import setup_metrics

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProvisionResult:
    signing: LoadedSigningIdentity
    tls: ResolvedPaths


def setup_tracing(app_name: str) -> TracerProvider:
    resource = Resource.create({"service.name": app_name})
    provider = TracerProvider(resource=resource)

    processor = BatchSpanProcessor(ConsoleSpanExporter(out=sys.stderr))
    provider.add_span_processor(processor)

    trace.set_tracer_provider(provider)
    return provider


def build_store(config: Settings) -> IdentityStore:
    return IdentityStore(
        directory=Path(config.OUTPUT_DIR),
        confirm=None if config.NON_INTERACTIVE else stdin_confirm,
        signing_issuer=IdentityIssuer(
            signing_role(
                key_size=config.SIGNING_KEY_SIZE,
                validity_days=config.SIGNING_VALIDITY_DAYS,
            )
        ),
        tls_issuer=IdentityIssuer(tls_role(validity_days=config.TLS_VALIDITY_DAYS)),
    )


def provision(config: Settings, store: IdentityStore | None = None) -> ProvisionResult:
    """Resolve every identity the reseed tool needs.

    Raises:
        CredentialError: The signing identity could not be resolved, or the
            TLS identity failed in a way other than a missing decision.
    """
    if not config.SIGNER_ID:
        raise MissingInputError("signing (set SIGNER_ID)")

    store = store or build_store(config)
    signing = store.resolve_signing_identity(config.SIGNER_ID, config.SIGNER_KEY)

    tls = ResolvedPaths()
    if config.TLS_HOST:
        try:
            tls = store.resolve_tls_identity(config.TLS_HOST, config.TLS_CERT, config.TLS_KEY)
        except MissingInputError as e:
            logger.warning("tls_disabled", extra={"identity": config.TLS_HOST, "error": str(e)})

    logger.info(
        "provisioning_completed",
        extra={
            "signing_key": str(signing.paths.key_path),
            "tls_enabled": tls.available,
        },
    )
    return ProvisionResult(signing=signing, tls=tls)


def run() -> int:
    setup_logging()
    tracer_provider = setup_tracing(settings.APP_NAME)
    meter_provider = setup_metrics(settings.APP_NAME)
    LoggingInstrumentor().instrument(set_logging_format=False)

    try:
        result = provision(settings)
    except CredentialError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        tracer_provider.shutdown()
        meter_provider.shutdown()

    print(f"Signing key: {result.signing.paths.key_path}")
    if result.tls.available:
        print(f"TLS certificate: {result.tls.cert_path}")
        print(f"TLS key: {result.tls.key_path}")
    return 0


if __name__ == "__main__":
    sys.exit(run())
