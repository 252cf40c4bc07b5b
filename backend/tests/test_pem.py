"""Tests for the multi-block PEM codec."""

import base64

import pytest
from cryptography.hazmat.primitives.asymmetric import ec

from credentials.pki.pem import (
    CERTIFICATE,
    EC_PARAMETERS,
    EC_PRIVATE_KEY,
    PemBlock,
    PemDecodeError,
    decode_blocks,
    ec_parameters_block,
    encode_block,
    encode_blocks,
    find_block,
)


class TestEncoding:
    def test_block_framing(self):
        encoded = encode_block(PemBlock(CERTIFICATE, b"\x01\x02\x03"))
        assert encoded == (
            b"-----BEGIN CERTIFICATE-----\n"
            + base64.b64encode(b"\x01\x02\x03")
            + b"\n-----END CERTIFICATE-----\n"
        )

    def test_body_lines_wrap_at_64_columns(self):
        encoded = encode_block(PemBlock("X509 CRL", bytes(range(256)) * 2))
        body_lines = encoded.splitlines()[1:-1]
        assert all(len(line) == 64 for line in body_lines[:-1])
        assert 0 < len(body_lines[-1]) <= 64

    def test_blocks_keep_given_order(self):
        blocks = [
            PemBlock(EC_PARAMETERS, b"params"),
            PemBlock(EC_PRIVATE_KEY, b"key"),
            PemBlock(CERTIFICATE, b"cert"),
        ]
        assert decode_blocks(encode_blocks(blocks)) == blocks


class TestDecoding:
    def test_text_outside_armor_is_ignored(self):
        data = b"leading text\n" + encode_block(PemBlock(CERTIFICATE, b"abc")) + b"trailer\n"
        assert decode_blocks(data) == [PemBlock(CERTIFICATE, b"abc")]

    def test_crlf_line_endings(self):
        data = encode_block(PemBlock(CERTIFICATE, b"abcdef")).replace(b"\n", b"\r\n")
        assert decode_blocks(data) == [PemBlock(CERTIFICATE, b"abcdef")]

    def test_no_blocks(self):
        assert decode_blocks(b"nothing here") == []

    def test_invalid_base64_raises(self):
        data = b"-----BEGIN CERTIFICATE-----\n!!!notbase64\n-----END CERTIFICATE-----\n"
        with pytest.raises(PemDecodeError, match="CERTIFICATE"):
            decode_blocks(data)

    def test_mismatched_end_label_is_not_a_block(self):
        data = b"-----BEGIN CERTIFICATE-----\nAAAA\n-----END X509 CRL-----\n"
        assert decode_blocks(data) == []

    def test_find_block_by_label_regardless_of_position(self):
        blocks = [PemBlock(EC_PARAMETERS, b"p"), PemBlock(CERTIFICATE, b"c")]
        assert find_block(blocks, CERTIFICATE) == PemBlock(CERTIFICATE, b"c")
        assert find_block(blocks, "RSA PRIVATE KEY", EC_PARAMETERS).label == EC_PARAMETERS
        assert find_block(blocks, EC_PRIVATE_KEY) is None


class TestEcParameters:
    def test_secp384r1_oid(self):
        block = ec_parameters_block(ec.SECP384R1())
        assert block.label == EC_PARAMETERS
        # OBJECT IDENTIFIER 1.3.132.0.34
        assert block.data == bytes.fromhex("06052b81040022")

    def test_prime256v1_oid(self):
        block = ec_parameters_block(ec.SECP256R1())
        # OBJECT IDENTIFIER 1.2.840.10045.3.1.7
        assert block.data == bytes.fromhex("06082a8648ce3d030107")

    def test_unsupported_curve_raises(self):
        with pytest.raises(ValueError, match="secp256k1"):
            ec_parameters_block(ec.SECP256K1())
