"""Self-signed identity issuance.

One pipeline serves both roles:
generate key -> self-sign -> write certificate -> write key artifact ->
re-parse certificate -> build, verify and write the initial CRL.

Artifacts are named from the identity's file stem S:
    S.crt  CERTIFICATE
    S.pem  role-specific key blocks followed by CERTIFICATE
    S.crl  X509 CRL
Existing files are overwritten. Writes are not transactional; an interrupted
issuance can leave a partial artifact set behind.
"""

import logging
import os
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.types import CertificateIssuerPrivateKeyTypes
from cryptography.x509.oid import NameOID
from opentelemetry import trace

from credentials.domain.models import file_stem
from credentials.errors import (
    ArtifactIOError,
    EncodingError,
    GenerationError,
    IssuanceError,
    RoundTripValidationError,
)
from credentials.metrics import credential_metrics
from credentials.pki.pem import CERTIFICATE, X509_CRL, PemBlock, encode_blocks
from credentials.pki.revocation import build_self_revocation
from credentials.pki.roles import (
    MAX_COMMON_NAME_LENGTH,
    IssuanceRole,
    signing_role,
    subject_for,
    tls_role,
)

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

PRIVATE_FILE_MODE = 0o600
PUBLIC_FILE_MODE = 0o644


@dataclass(frozen=True)
class IssuedIdentity:
    """Paths and serial of a freshly issued identity."""

    key_path: Path
    cert_path: Path
    crl_path: Path
    serial_number: int


def write_artifact(path: Path, data: bytes, mode: int) -> None:
    """Create or truncate ``path`` and write ``data`` with permission ``mode``.

    The mode is applied even when the file already existed.

    Raises:
        ArtifactIOError: If the file cannot be opened or written.
    """
    try:
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
        with os.fdopen(fd, "wb") as out:
            os.fchmod(out.fileno(), mode)
            out.write(data)
    except OSError as e:
        raise ArtifactIOError(
            f"failed to open {path} for writing: {e}", step="write", path=path
        ) from e


class IdentityIssuer:
    """Issues self-signed identities for a single role."""

    def __init__(self, role: IssuanceRole) -> None:
        self._role = role

    @property
    def role(self) -> IssuanceRole:
        return self._role

    def issue(self, name: str, directory: Path | str = ".") -> IssuedIdentity:
        """Generate and persist a new identity for ``name``.

        Args:
            name: Publisher identifier or host name, used as subject CN.
            directory: Where the artifact set is written.

        Returns:
            IssuedIdentity with the three artifact paths.

        Raises:
            IssuanceError: Any failure; nothing is retried.
        """
        role = self._role
        directory = Path(directory)
        stem = file_stem(name)
        cert_path = directory / f"{stem}.crt"
        key_path = directory / f"{stem}.pem"
        crl_path = directory / f"{stem}.crl"

        with tracer.start_as_current_span("IdentityIssuer.issue") as span:
            span.set_attribute("identity", name)
            span.set_attribute("role", role.kind.value)
            start_time = time.time()

            try:
                self._check_name(name)
                print(f"Generating {role.noun} keys. This may take a minute...")
                private_key = self._generate_key()

                now = datetime.now(timezone.utc)
                certificate = self._self_sign(name, private_key, now)
                certificate_der = self._encode_certificate(certificate)

                write_artifact(
                    cert_path,
                    encode_blocks([PemBlock(CERTIFICATE, certificate_der)]),
                    PUBLIC_FILE_MODE,
                )
                print(f"\t{role.display_name} certificate saved to: {cert_path}")

                try:
                    key_artifact = encode_blocks(
                        role.key_artifact_blocks(private_key, certificate_der)
                    )
                except (ValueError, TypeError) as e:
                    raise EncodingError(
                        f"failed to encode private key: {e}", step="encode_key", path=key_path
                    ) from e
                write_artifact(key_path, key_artifact, PRIVATE_FILE_MODE)
                print(f"\t{role.display_name} private key saved to: {key_path}")

                reparsed = self._reparse_certificate(
                    certificate_der, name, certificate.serial_number
                )
                span.set_attribute("serial", format(reparsed.serial_number, "x"))

                crl = build_self_revocation(reparsed, private_key, role.signature_hash, now)
                write_artifact(
                    crl_path,
                    encode_blocks(
                        [PemBlock(X509_CRL, crl.public_bytes(serialization.Encoding.DER))]
                    ),
                    PRIVATE_FILE_MODE,
                )
                print(f"\t{role.display_name} CRL saved to: {crl_path}")

            except IssuanceError as e:
                if e.path is None:
                    e.path = {
                        "generate_key": key_path,
                        "encode_key": key_path,
                        "crl_sign": crl_path,
                        "crl_reparse": crl_path,
                    }.get(e.step, cert_path)
                logger.error(
                    "identity_issuance_failed",
                    extra={
                        "identity": name,
                        "role": role.kind.value,
                        "step": e.step,
                        "path": str(e.path) if e.path else None,
                        "error": str(e),
                    },
                )
                credential_metrics.record_issuance_failed(role.kind.value, e.step)
                raise

            duration = time.time() - start_time
            credential_metrics.record_identity_issued(role.kind.value, duration)
            logger.info(
                "identity_issued",
                extra={
                    "identity": name,
                    "role": role.kind.value,
                    "serial": format(reparsed.serial_number, "x"),
                    "key_path": str(key_path),
                    "not_after": reparsed.not_valid_after_utc.isoformat(),
                    "duration_seconds": duration,
                },
            )

            return IssuedIdentity(
                key_path=key_path,
                cert_path=cert_path,
                crl_path=crl_path,
                serial_number=reparsed.serial_number,
            )

    def _check_name(self, name: str) -> None:
        length = len(name.encode("utf-8"))
        if not 1 <= length <= MAX_COMMON_NAME_LENGTH:
            raise GenerationError(
                f"{self._role.noun} identity {name!r} is {length} bytes; a certificate common "
                f"name must be 1 to {MAX_COMMON_NAME_LENGTH} bytes",
                step="validate_name",
            )

    def _generate_key(self) -> CertificateIssuerPrivateKeyTypes:
        try:
            return self._role.generate_key()
        except (ValueError, TypeError, MemoryError) as e:
            raise GenerationError(f"key generation failed: {e}", step="generate_key") from e

    def _self_sign(
        self, name: str, private_key: CertificateIssuerPrivateKeyTypes, now: datetime
    ) -> x509.Certificate:
        role = self._role
        try:
            subject = issuer = subject_for(name)
            builder = (
                x509.CertificateBuilder()
                .subject_name(subject)
                .issuer_name(issuer)
                .public_key(private_key.public_key())  # type: ignore[arg-type]
                .serial_number(x509.random_serial_number())
                .not_valid_before(now)
                .not_valid_after(now + role.validity)
            )
            builder = role.apply_extensions(builder, name, private_key)
            return builder.sign(private_key, role.signature_hash)
        except (ValueError, TypeError) as e:
            raise GenerationError(
                f"failed to sign certificate: {e}", step="sign_certificate"
            ) from e

    def _encode_certificate(self, certificate: x509.Certificate) -> bytes:
        try:
            return certificate.public_bytes(serialization.Encoding.DER)
        except ValueError as e:
            raise EncodingError(
                f"failed to encode certificate: {e}", step="encode_certificate"
            ) from e

    def _reparse_certificate(
        self, certificate_der: bytes, name: str, serial_number: int
    ) -> x509.Certificate:
        try:
            certificate = x509.load_der_x509_certificate(certificate_der)
        except ValueError as e:
            raise RoundTripValidationError(
                f"certificate was not parsed: {e}", step="certificate_reparse"
            ) from e

        common_names = certificate.subject.get_attributes_for_oid(NameOID.COMMON_NAME)
        if not common_names or common_names[0].value != name:
            raise RoundTripValidationError(
                f"certificate subject does not match {name!r}", step="certificate_reparse"
            )
        if certificate.serial_number != serial_number:
            raise RoundTripValidationError(
                f"certificate serial {certificate.serial_number:x} "
                f"does not match {serial_number:x}",
                step="certificate_reparse",
            )
        return certificate


def issue_signing_identity(
    identifier: str,
    directory: Path | str = ".",
    key_size: int | None = None,
) -> IssuedIdentity:
    """Issue a signing identity for a publisher ``identifier``."""
    role = signing_role() if key_size is None else signing_role(key_size=key_size)
    return IdentityIssuer(role).issue(identifier, directory)


def issue_tls_identity(host: str, directory: Path | str = ".") -> IssuedIdentity:
    """Issue a TLS identity for ``host``."""
    return IdentityIssuer(tls_role()).issue(host, directory)
