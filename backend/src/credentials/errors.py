"""Exception taxonomy for credential provisioning.

Errors raised during issuance carry the pipeline step and the file path
involved so an operator can tell which artifact failed and why.
"""

from pathlib import Path


class CredentialError(Exception):
    """Base class for all credential provisioning failures."""

    pass


class MissingInputError(CredentialError):
    """Raised when key material is missing and nobody can be asked about it."""

    def __init__(self, identity: str, missing: list[Path] | None = None):
        self.identity = identity
        self.missing = missing or []
        if self.missing:
            paths = ", ".join(f"'{p}'" for p in self.missing)
            message = f"No usable key material for {identity}: missing {paths}"
        else:
            message = f"No identity configured for {identity}"
        super().__init__(message)


class UserDeclinedError(CredentialError):
    """Raised when the operator refuses to generate a new identity."""

    def __init__(self, identity: str, reason: str = "A signing key is required"):
        self.identity = identity
        super().__init__(f"{reason} ({identity})")


class KeyDecodeError(CredentialError):
    """Raised when an existing key file cannot be parsed."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        super().__init__(f"Unable to decode private key '{path}': {reason}")


class IssuanceError(CredentialError):
    """Raised when generating an identity fails at some step."""

    def __init__(self, message: str, step: str, path: Path | None = None):
        self.step = step
        self.path = path
        super().__init__(message)


class GenerationError(IssuanceError):
    """Key generation or signing failed."""

    pass


class EncodingError(IssuanceError):
    """DER/PEM marshalling failed."""

    pass


class ArtifactIOError(IssuanceError):
    """An artifact file could not be opened or written."""

    pass


class RoundTripValidationError(IssuanceError):
    """A freshly produced certificate or CRL did not parse back."""

    pass
