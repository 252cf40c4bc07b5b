"""Loading private keys from multi-block key artifacts."""

import logging
from pathlib import Path

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.types import PrivateKeyTypes

from credentials.errors import KeyDecodeError
from credentials.pki.pem import PRIVATE_KEY_LABELS, PemDecodeError, decode_blocks, find_block

logger = logging.getLogger(__name__)


def load_private_key(path: Path, expected_type: type) -> PrivateKeyTypes:
    """Load the private key stored in ``path``.

    The file may hold other blocks (EC parameters, certificate); the first
    private-key block is used whatever its position.

    Raises:
        KeyDecodeError: If the file has no private-key block, the block does
            not decode, or the key is not an ``expected_type``.
    """
    try:
        data = Path(path).read_bytes()
        block = find_block(decode_blocks(data), *PRIVATE_KEY_LABELS)
        if block is None:
            raise KeyDecodeError(path, "no private key block found")
        private_key = serialization.load_der_private_key(block.data, password=None)
    except KeyDecodeError:
        raise
    except (OSError, PemDecodeError, ValueError, TypeError, UnsupportedAlgorithm) as e:
        logger.error("private_key_load_failed", extra={"path": str(path), "error": str(e)})
        raise KeyDecodeError(path, str(e)) from e

    if not isinstance(private_key, expected_type):
        raise KeyDecodeError(
            path, f"expected {expected_type.__name__}, found {type(private_key).__name__}"
        )
    return private_key
