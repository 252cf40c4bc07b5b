"""Multi-block PEM encoding and decoding.

Key artifacts hold several blocks in one file (for example EC parameters,
private key and certificate). Blocks are written in the order given and
read back as an ordered list, so callers select them by label rather than
by position.
"""

import base64
import binascii
import re
from collections.abc import Iterable
from dataclasses import dataclass

from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.ec import EllipticCurveOID
from pyasn1.codec.der import encoder as der_encoder
from pyasn1.type import univ

# Labels used by the artifacts this package writes
CERTIFICATE = "CERTIFICATE"
X509_CRL = "X509 CRL"
RSA_PRIVATE_KEY = "RSA PRIVATE KEY"
EC_PRIVATE_KEY = "EC PRIVATE KEY"
EC_PARAMETERS = "EC PARAMETERS"
PRIVATE_KEY = "PRIVATE KEY"

PRIVATE_KEY_LABELS = (RSA_PRIVATE_KEY, EC_PRIVATE_KEY, PRIVATE_KEY)

LINE_LENGTH = 64

_BLOCK_RE = re.compile(
    rb"-----BEGIN (?P<label>[A-Z0-9 ]+)-----\r?\n"
    rb"(?P<body>.*?)"
    rb"-----END (?P=label)-----",
    re.DOTALL,
)

_CURVE_OIDS = {
    ec.SECP256R1.name: EllipticCurveOID.SECP256R1,
    ec.SECP384R1.name: EllipticCurveOID.SECP384R1,
    ec.SECP521R1.name: EllipticCurveOID.SECP521R1,
}


class PemDecodeError(ValueError):
    """Raised when PEM armor is present but cannot be decoded."""

    pass


@dataclass(frozen=True)
class PemBlock:
    """A single labelled PEM block holding DER bytes."""

    label: str
    data: bytes


def encode_block(block: PemBlock) -> bytes:
    body = base64.b64encode(block.data)
    lines = [body[i : i + LINE_LENGTH] for i in range(0, len(body), LINE_LENGTH)]
    return (
        f"-----BEGIN {block.label}-----\n".encode("ascii")
        + b"".join(line + b"\n" for line in lines)
        + f"-----END {block.label}-----\n".encode("ascii")
    )


def encode_blocks(blocks: Iterable[PemBlock]) -> bytes:
    """Concatenate blocks into one PEM document, preserving order."""
    return b"".join(encode_block(block) for block in blocks)


def decode_blocks(data: bytes) -> list[PemBlock]:
    """Decode every PEM block in ``data`` in file order.

    Text outside the armor is ignored. Headers (RFC 1421 style) are not
    supported; a block carrying them fails to decode.

    Raises:
        PemDecodeError: If a block's body is not valid base64.
    """
    blocks = []
    for match in _BLOCK_RE.finditer(data):
        label = match.group("label").decode("ascii")
        body = b"".join(match.group("body").split())
        try:
            decoded = base64.b64decode(body, validate=True)
        except (binascii.Error, ValueError) as e:
            raise PemDecodeError(f"Invalid base64 in {label} block: {e}") from e
        blocks.append(PemBlock(label=label, data=decoded))
    return blocks


def find_block(blocks: Iterable[PemBlock], *labels: str) -> PemBlock | None:
    """Return the first block whose label is one of ``labels``."""
    for block in blocks:
        if block.label in labels:
            return block
    return None


def ec_parameters_block(curve: ec.EllipticCurve) -> PemBlock:
    """Build the EC PARAMETERS block naming ``curve`` by object identifier.

    The body is the DER encoding of the named-curve OID (RFC 5480), which
    strict parsers need to interpret a bare SEC1 private key.
    """
    oid = _CURVE_OIDS.get(curve.name)
    if oid is None:
        raise ValueError(f"Unsupported curve for EC PARAMETERS: {curve.name}")
    der = der_encoder.encode(univ.ObjectIdentifier(oid.dotted_string))
    return PemBlock(label=EC_PARAMETERS, data=bytes(der))
