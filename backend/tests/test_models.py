"""Tests for identity naming and resolution value objects."""

from pathlib import Path

import pytest

from credentials.domain.models import ResolvedPaths, file_stem


class TestFileStem:
    def test_publisher_id_is_escaped(self):
        assert file_stem("alice@example.com") == "alice_at_example.com"

    def test_hostname_is_unchanged(self):
        assert file_stem("reseed.example.org") == "reseed.example.org"

    def test_every_at_sign_is_replaced(self):
        assert file_stem("a@b@c") == "a_at_b_at_c"

    @pytest.mark.parametrize(
        "identifier",
        ["alice@example.com", "@", "@@leading", "plain", "", "x_at_y@z"],
    )
    def test_stem_contains_no_at_sign_and_is_idempotent(self, identifier):
        stem = file_stem(identifier)
        assert "@" not in stem
        assert file_stem(stem) == stem
        assert file_stem(identifier) == stem


class TestResolvedPaths:
    def test_empty_paths_are_not_available(self):
        assert ResolvedPaths().available is False

    def test_key_and_cert_make_paths_available(self):
        paths = ResolvedPaths(key_path=Path("k.pem"), cert_path=Path("k.crt"))
        assert paths.available is True
        assert paths.crl_path is None
