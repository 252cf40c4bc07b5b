"""Value objects for identity resolution."""

from dataclasses import dataclass, field
from pathlib import Path

from cryptography.hazmat.primitives.asymmetric import rsa

from credentials.domain.states import IdentityKind, IdentityStatus

AT_SIGN_TOKEN = "_at_"


def file_stem(identifier: str) -> str:
    """Return the filesystem-safe stem for a publisher id or hostname.

    Every "@" becomes "_at_", so "alice@example.com" maps to
    "alice_at_example.com". Applying it twice gives the same result.
    """
    return identifier.replace("@", AT_SIGN_TOKEN)


@dataclass
class IdentityResolution:
    """Tracks one identity through a single resolution attempt."""

    name: str
    kind: IdentityKind
    status: IdentityStatus = IdentityStatus.UNCHECKED


@dataclass(frozen=True)
class ResolvedPaths:
    """Paths the caller should use after resolution.

    For a TLS identity that the operator chose not to generate, all paths
    are None and the caller runs without transport security.
    """

    key_path: Path | None = None
    cert_path: Path | None = None
    crl_path: Path | None = None

    @property
    def available(self) -> bool:
        return self.key_path is not None and self.cert_path is not None


@dataclass(frozen=True)
class LoadedSigningIdentity:
    """A signing key ready for use together with where it came from."""

    private_key: rsa.RSAPrivateKey
    paths: ResolvedPaths
    generated: bool = field(default=False)
