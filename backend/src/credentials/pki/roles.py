"""Role descriptors for the two kinds of self-signed identity.

A role bundles everything that differs between a publisher signing identity
and a server TLS identity: key algorithm, certificate subject and
extensions, validity, and the block layout of the key artifact. The
issuance pipeline itself is shared.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.hazmat.primitives.asymmetric.types import CertificateIssuerPrivateKeyTypes
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID

from credentials.domain.states import IdentityKind
from credentials.pki.pem import (
    CERTIFICATE,
    EC_PRIVATE_KEY,
    RSA_PRIVATE_KEY,
    PemBlock,
    ec_parameters_block,
)

ORGANIZATION = "I2P Anonymous Network"
ORGANIZATIONAL_UNIT = "I2P"
PLACEHOLDER = "XX"

DEFAULT_SIGNING_KEY_SIZE = 4096
DEFAULT_SIGNING_VALIDITY_DAYS = 10 * 365
DEFAULT_TLS_VALIDITY_DAYS = 5 * 365
TLS_CURVE = ec.SECP384R1()

# X.520 upper bound for commonName
MAX_COMMON_NAME_LENGTH = 64

KeyGenerator = Callable[[], CertificateIssuerPrivateKeyTypes]
ExtensionPolicy = Callable[
    [x509.CertificateBuilder, str, CertificateIssuerPrivateKeyTypes], x509.CertificateBuilder
]
KeyArtifactLayout = Callable[[CertificateIssuerPrivateKeyTypes, bytes], list[PemBlock]]


@dataclass(frozen=True)
class IssuanceRole:
    """Everything the issuance pipeline needs to know about one role."""

    kind: IdentityKind
    noun: str  # progress message: "Generating <noun> keys"
    display_name: str  # save messages: "<display_name> certificate saved to"
    key_type: type
    generate_key: KeyGenerator
    apply_extensions: ExtensionPolicy
    key_artifact_blocks: KeyArtifactLayout
    signature_hash: hashes.HashAlgorithm
    validity: timedelta


def subject_for(name: str) -> x509.Name:
    return x509.Name(
        [
            x509.NameAttribute(NameOID.COUNTRY_NAME, PLACEHOLDER),
            x509.NameAttribute(NameOID.STREET_ADDRESS, PLACEHOLDER),
            x509.NameAttribute(NameOID.LOCALITY_NAME, PLACEHOLDER),
            x509.NameAttribute(NameOID.ORGANIZATION_NAME, ORGANIZATION),
            x509.NameAttribute(NameOID.ORGANIZATIONAL_UNIT_NAME, ORGANIZATIONAL_UNIT),
            x509.NameAttribute(NameOID.COMMON_NAME, name),
        ]
    )


def _traditional_der(private_key: CertificateIssuerPrivateKeyTypes) -> bytes:
    # PKCS#1 for RSA, SEC1 for EC
    return private_key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )


# ============================================================================
# Signing identity
# ============================================================================


def _signing_extensions(
    builder: x509.CertificateBuilder, name: str, private_key: CertificateIssuerPrivateKeyTypes
) -> x509.CertificateBuilder:
    return (
        builder.add_extension(
            x509.BasicConstraints(ca=True, path_length=None),
            critical=True,
        )
        .add_extension(
            x509.KeyUsage(
                digital_signature=True,
                key_cert_sign=True,
                crl_sign=True,
                key_encipherment=False,
                content_commitment=False,
                data_encipherment=False,
                key_agreement=False,
                encipher_only=False,
                decipher_only=False,
            ),
            critical=True,
        )
        .add_extension(
            x509.ExtendedKeyUsage(
                [ExtendedKeyUsageOID.CLIENT_AUTH, ExtendedKeyUsageOID.SERVER_AUTH]
            ),
            critical=False,
        )
        # Signer id bytes as key identifier, as existing su3 tooling expects
        .add_extension(
            x509.SubjectKeyIdentifier(name.encode("utf-8")),
            critical=False,
        )
    )


def _signing_key_blocks(
    private_key: CertificateIssuerPrivateKeyTypes, certificate_der: bytes
) -> list[PemBlock]:
    return [
        PemBlock(RSA_PRIVATE_KEY, _traditional_der(private_key)),
        PemBlock(CERTIFICATE, certificate_der),
    ]


def signing_role(
    key_size: int = DEFAULT_SIGNING_KEY_SIZE,
    validity_days: int = DEFAULT_SIGNING_VALIDITY_DAYS,
) -> IssuanceRole:
    """Role for a long-lived RSA publisher signing identity."""
    return IssuanceRole(
        kind=IdentityKind.SIGNING,
        noun="signing",
        display_name="Signing",
        key_type=rsa.RSAPrivateKey,
        generate_key=lambda: rsa.generate_private_key(public_exponent=65537, key_size=key_size),
        apply_extensions=_signing_extensions,
        key_artifact_blocks=_signing_key_blocks,
        signature_hash=hashes.SHA512(),
        validity=timedelta(days=validity_days),
    )


# ============================================================================
# TLS identity
# ============================================================================


def _tls_extensions(
    builder: x509.CertificateBuilder, host: str, private_key: CertificateIssuerPrivateKeyTypes
) -> x509.CertificateBuilder:
    return (
        builder.add_extension(
            x509.BasicConstraints(ca=True, path_length=None),
            critical=True,
        )
        .add_extension(
            x509.KeyUsage(
                digital_signature=True,
                key_encipherment=True,
                key_cert_sign=True,
                crl_sign=True,
                content_commitment=False,
                data_encipherment=False,
                key_agreement=False,
                encipher_only=False,
                decipher_only=False,
            ),
            critical=True,
        )
        .add_extension(
            x509.ExtendedKeyUsage([ExtendedKeyUsageOID.SERVER_AUTH]),
            critical=False,
        )
        .add_extension(
            x509.SubjectAlternativeName([x509.DNSName(host)]),
            critical=False,
        )
        .add_extension(
            x509.SubjectKeyIdentifier.from_public_key(
                private_key.public_key()  # type: ignore[arg-type]
            ),
            critical=False,
        )
    )


def _tls_key_blocks(
    private_key: CertificateIssuerPrivateKeyTypes, certificate_der: bytes
) -> list[PemBlock]:
    return [
        ec_parameters_block(TLS_CURVE),
        PemBlock(EC_PRIVATE_KEY, _traditional_der(private_key)),
        PemBlock(CERTIFICATE, certificate_der),
    ]


def tls_role(validity_days: int = DEFAULT_TLS_VALIDITY_DAYS) -> IssuanceRole:
    """Role for a host-bound ECDSA P-384 server identity."""
    return IssuanceRole(
        kind=IdentityKind.TLS,
        noun="TLS",
        display_name="TLS",
        key_type=ec.EllipticCurvePrivateKey,
        generate_key=lambda: ec.generate_private_key(TLS_CURVE),
        apply_extensions=_tls_extensions,
        key_artifact_blocks=_tls_key_blocks,
        signature_hash=hashes.SHA512(),
        validity=timedelta(days=validity_days),
    )
