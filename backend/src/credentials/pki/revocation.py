"""Initial revocation list issued alongside every new certificate.

The list names the freshly issued certificate itself, revoked as of the
moment of issuance, with lastUpdate and nextUpdate both set to that moment.
"""

import logging
from datetime import datetime

from cryptography import x509
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric.types import CertificateIssuerPrivateKeyTypes

from credentials.errors import GenerationError, RoundTripValidationError

logger = logging.getLogger(__name__)


def build_self_revocation(
    certificate: x509.Certificate,
    private_key: CertificateIssuerPrivateKeyTypes,
    algorithm: hashes.HashAlgorithm,
    now: datetime,
) -> x509.CertificateRevocationList:
    """Sign a CRL revoking ``certificate`` and verify it parses back.

    Args:
        certificate: The certificate just issued; its subject is the CRL issuer.
        private_key: Key that signed ``certificate``.
        algorithm: Signature hash, matching the certificate's.
        now: Revocation time, lastUpdate and nextUpdate.

    Returns:
        The CRL as re-parsed from its DER encoding.

    Raises:
        GenerationError: If building or signing the CRL fails.
        RoundTripValidationError: If the DER does not parse back, lists the
            wrong serial, or its signature does not verify.
    """
    try:
        revoked = (
            x509.RevokedCertificateBuilder()
            .serial_number(certificate.serial_number)
            .revocation_date(now)
            .build()
        )
        crl = (
            x509.CertificateRevocationListBuilder()
            .issuer_name(certificate.subject)
            .last_update(now)
            .next_update(now)
            .add_revoked_certificate(revoked)
            .sign(private_key, algorithm)
        )
        crl_der = crl.public_bytes(serialization.Encoding.DER)
    except (ValueError, TypeError) as e:
        raise GenerationError(f"error creating CRL: {e}", step="crl_sign") from e

    try:
        reparsed = x509.load_der_x509_crl(crl_der)
    except ValueError as e:
        raise RoundTripValidationError(f"error reparsing CRL: {e}", step="crl_reparse") from e

    serials = [entry.serial_number for entry in reparsed]
    if serials != [certificate.serial_number]:
        raise RoundTripValidationError(
            f"CRL lists serials {serials}, expected [{certificate.serial_number}]",
            step="crl_reparse",
        )

    try:
        valid = reparsed.is_signature_valid(certificate.public_key())  # type: ignore[arg-type]
    except (InvalidSignature, TypeError) as e:
        raise RoundTripValidationError(
            f"CRL signature check failed: {e}", step="crl_reparse"
        ) from e
    if not valid:
        raise RoundTripValidationError("CRL signature does not verify", step="crl_reparse")

    logger.debug(
        "self_revocation_built",
        extra={
            "serial": format(certificate.serial_number, "x"),
            "issuer": certificate.subject.rfc4514_string(),
        },
    )
    return reparsed
