"""Self-signed identity issuance for the reseed tool.

This package provides:
- Role descriptors for signing (RSA) and TLS (ECDSA P-384) identities
- The shared issuance pipeline: key, certificate, key artifact, CRL
- Multi-block PEM encoding and private-key loading
"""

from credentials.pki.issuer import (
    IdentityIssuer,
    IssuedIdentity,
    issue_signing_identity,
    issue_tls_identity,
)
from credentials.pki.keys import load_private_key
from credentials.pki.roles import IssuanceRole, signing_role, tls_role

__all__ = [
    "IdentityIssuer",
    "IssuanceRole",
    "IssuedIdentity",
    "issue_signing_identity",
    "issue_tls_identity",
    "load_private_key",
    "signing_role",
    "tls_role",
]
