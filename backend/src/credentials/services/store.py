"""Load-or-create gate for signing and TLS identities.

The store checks for existing key material and, when it is missing, asks the
operator whether to generate it. Callers receive the paths to use as a return
value; nothing they own is mutated.

A declined signing identity is fatal (UserDeclinedError). A declined TLS
identity is not: the caller gets empty paths and runs without TLS.
"""

import logging
import os
from pathlib import Path

from cryptography.hazmat.primitives.asymmetric import ec, rsa
from opentelemetry import trace

from credentials.domain.models import (
    IdentityResolution,
    LoadedSigningIdentity,
    ResolvedPaths,
    file_stem,
)
from credentials.domain.state_machines import IdentityResolutionStateMachine
from credentials.domain.states import IdentityEvent, IdentityKind, IdentityStatus
from credentials.errors import (
    CredentialError,
    KeyDecodeError,
    MissingInputError,
    UserDeclinedError,
)
from credentials.metrics import credential_metrics
from credentials.pki.issuer import IdentityIssuer
from credentials.pki.keys import load_private_key
from credentials.pki.roles import signing_role, tls_role
from credentials.services.prompt import Confirm

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


def is_usable(path: Path | None) -> bool:
    """True if ``path`` names an existing, readable regular file."""
    return path is not None and path.is_file() and os.access(path, os.R_OK)


class IdentityStore:
    """Resolves identities from disk, generating them on operator consent.

    Args:
        directory: Where generated artifacts are written and default paths point.
        confirm: Yes/no question capability; None means non-interactive, in
            which case missing material raises MissingInputError.
        signing_issuer: Issuer for signing identities (RSA 4096 by default).
        tls_issuer: Issuer for TLS identities (ECDSA P-384).
    """

    def __init__(
        self,
        directory: Path | str = ".",
        confirm: Confirm | None = None,
        signing_issuer: IdentityIssuer | None = None,
        tls_issuer: IdentityIssuer | None = None,
    ) -> None:
        self._directory = Path(directory)
        self._confirm = confirm
        self._signing_issuer = signing_issuer or IdentityIssuer(signing_role())
        self._tls_issuer = tls_issuer or IdentityIssuer(tls_role())

    def resolve_signing_identity(
        self, signer_id: str, key_path: Path | str | None = None
    ) -> LoadedSigningIdentity:
        """Return the signing key for ``signer_id``, generating it if allowed.

        Args:
            signer_id: Publisher identifier, e.g. "alice@example.com".
            key_path: Existing key artifact; defaults to <directory>/<stem>.pem.

        Raises:
            MissingInputError: Key missing and no confirm capability.
            UserDeclinedError: Operator refused to generate a key.
            KeyDecodeError: Key file exists but cannot be parsed.
            IssuanceError: Generation failed.
        """
        key_path = Path(key_path) if key_path else self._default_path(signer_id, ".pem")
        resolution = IdentityResolution(name=signer_id, kind=IdentityKind.SIGNING)
        machine = IdentityResolutionStateMachine(resolution)

        with tracer.start_as_current_span("IdentityStore.resolve_signing_identity") as span:
            span.set_attribute("identity", signer_id)

            if machine.record_check(is_usable(key_path)) == IdentityStatus.PRESENT:
                private_key = self._load(machine, key_path, rsa.RSAPrivateKey)
                machine.transition(IdentityEvent.KEY_LOADED)
                credential_metrics.record_identity_loaded(IdentityKind.SIGNING.value, "existing")
                span.set_attribute("source", "existing")
                return LoadedSigningIdentity(
                    private_key=private_key,  # type: ignore[arg-type]
                    paths=ResolvedPaths(key_path=key_path),
                )

            print(f"Unable to read signing key '{key_path}'")
            question = f"Would you like to generate a new signing key for {signer_id}? (y or n): "
            if not self._ask(machine, resolution, question, [key_path]):
                raise UserDeclinedError(signer_id)

            try:
                issued = self._signing_issuer.issue(signer_id, self._directory)
                private_key = load_private_key(issued.key_path, rsa.RSAPrivateKey)
            except CredentialError:
                machine.transition(IdentityEvent.ISSUANCE_FAILED)
                raise
            machine.transition(IdentityEvent.ISSUANCE_COMPLETED)

            credential_metrics.record_identity_loaded(IdentityKind.SIGNING.value, "generated")
            span.set_attribute("source", "generated")
            logger.info(
                "signing_identity_generated",
                extra={"identity": signer_id, "key_path": str(issued.key_path)},
            )
            return LoadedSigningIdentity(
                private_key=private_key,  # type: ignore[arg-type]
                paths=ResolvedPaths(
                    key_path=issued.key_path,
                    cert_path=issued.cert_path,
                    crl_path=issued.crl_path,
                ),
                generated=True,
            )

    def resolve_tls_identity(
        self,
        host: str,
        cert_path: Path | str | None = None,
        key_path: Path | str | None = None,
    ) -> ResolvedPaths:
        """Return the TLS certificate and key paths for ``host``.

        Both files are checked independently; if either is missing the
        operator is asked once and both are regenerated together.

        Returns:
            ResolvedPaths; all paths are None if the operator declined.

        Raises:
            MissingInputError: Files missing and no confirm capability.
            KeyDecodeError: Key file exists but is not an EC private key.
            IssuanceError: Generation failed.
        """
        cert_path = Path(cert_path) if cert_path else self._default_path(host, ".crt")
        key_path = Path(key_path) if key_path else self._default_path(host, ".pem")
        resolution = IdentityResolution(name=host, kind=IdentityKind.TLS)
        machine = IdentityResolutionStateMachine(resolution)

        with tracer.start_as_current_span("IdentityStore.resolve_tls_identity") as span:
            span.set_attribute("identity", host)

            missing = [path for path in (cert_path, key_path) if not is_usable(path)]
            if machine.record_check(not missing) == IdentityStatus.PRESENT:
                self._load(machine, key_path, ec.EllipticCurvePrivateKey)
                machine.transition(IdentityEvent.KEY_LOADED)
                credential_metrics.record_identity_loaded(IdentityKind.TLS.value, "existing")
                span.set_attribute("source", "existing")
                return ResolvedPaths(key_path=key_path, cert_path=cert_path)

            if cert_path in missing:
                print(f"Unable to read TLS certificate '{cert_path}'")
            if key_path in missing:
                print(f"Unable to read TLS key '{key_path}'")

            question = (
                f"Would you like to generate a new self-signed certificate for '{host}'? (y or n): "
            )
            if not self._ask(machine, resolution, question, missing):
                print("Continuing without TLS")
                logger.warning("tls_disabled", extra={"identity": host, "reason": "declined"})
                span.set_attribute("source", "declined")
                return ResolvedPaths()

            try:
                issued = self._tls_issuer.issue(host, self._directory)
            except CredentialError:
                machine.transition(IdentityEvent.ISSUANCE_FAILED)
                raise
            machine.transition(IdentityEvent.ISSUANCE_COMPLETED)

            credential_metrics.record_identity_loaded(IdentityKind.TLS.value, "generated")
            span.set_attribute("source", "generated")
            return ResolvedPaths(
                key_path=issued.key_path,
                cert_path=issued.cert_path,
                crl_path=issued.crl_path,
            )

    def _default_path(self, name: str, suffix: str) -> Path:
        return self._directory / f"{file_stem(name)}{suffix}"

    def _load(self, machine: IdentityResolutionStateMachine, path: Path, expected_type: type):
        try:
            return load_private_key(path, expected_type)
        except KeyDecodeError:
            machine.transition(IdentityEvent.KEY_REJECTED)
            raise

    def _ask(
        self,
        machine: IdentityResolutionStateMachine,
        resolution: IdentityResolution,
        question: str,
        missing: list[Path],
    ) -> bool:
        """Prompt the operator; returns their answer and records it."""
        if self._confirm is None:
            machine.transition(IdentityEvent.CONFIRMATION_UNAVAILABLE)
            raise MissingInputError(resolution.name, missing)

        machine.transition(IdentityEvent.OPERATOR_PROMPTED)
        confirmed = self._confirm(question)
        machine.record_answer(confirmed)
        credential_metrics.record_prompt_answered(
            resolution.kind.value, "confirmed" if confirmed else "declined"
        )
        if not confirmed:
            logger.info(
                "identity_generation_declined",
                extra={"identity": resolution.name, "role": resolution.kind.value},
            )
        return confirmed
