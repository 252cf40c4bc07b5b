"""Tests for the provisioning entry point."""

import logging
from unittest.mock import MagicMock, patch

import pytest

import main
from conftest import ScriptedConfirm, TEST_SIGNING_KEY_SIZE
from credentials.domain.models import ResolvedPaths
from credentials.errors import GenerationError, MissingInputError, UserDeclinedError
from credentials.pki.issuer import IdentityIssuer
from credentials.pki.roles import signing_role, tls_role
from credentials.services.store import IdentityStore
from shared.config import Settings


@pytest.fixture
def config(tmp_path):
    return Settings(
        _env_file=None,
        OUTPUT_DIR=str(tmp_path),
        SIGNER_ID="alice@example.com",
        SIGNING_KEY_SIZE=TEST_SIGNING_KEY_SIZE,
    )


def _store(tmp_path, *answers):
    return IdentityStore(
        directory=tmp_path,
        confirm=ScriptedConfirm(*answers),
        signing_issuer=IdentityIssuer(signing_role(key_size=TEST_SIGNING_KEY_SIZE)),
        tls_issuer=IdentityIssuer(tls_role()),
    )


class TestProvision:
    def test_signing_only_when_no_tls_host(self, config, tmp_path):
        result = main.provision(config, _store(tmp_path, True))

        assert result.signing.generated is True
        assert result.tls == ResolvedPaths()

    def test_signing_and_tls(self, config, tmp_path):
        config.TLS_HOST = "reseed.example.org"

        result = main.provision(config, _store(tmp_path, True, True))

        assert result.tls.cert_path == tmp_path / "reseed.example.org.crt"
        assert result.tls.key_path == tmp_path / "reseed.example.org.pem"

    def test_declined_tls_is_not_fatal(self, config, tmp_path):
        config.TLS_HOST = "reseed.example.org"

        result = main.provision(config, _store(tmp_path, True, False))

        assert result.signing.private_key is not None
        assert result.tls.available is False

    def test_declined_signing_is_fatal(self, config, tmp_path):
        with pytest.raises(UserDeclinedError):
            main.provision(config, _store(tmp_path, False))

    def test_missing_signer_id(self, config, tmp_path):
        config.SIGNER_ID = None
        with pytest.raises(MissingInputError, match="SIGNER_ID"):
            main.provision(config, _store(tmp_path))

    def test_non_interactive_tls_degrades(self, config, tmp_path, caplog):
        main.provision(config, _store(tmp_path, True))
        config.NON_INTERACTIVE = True
        config.TLS_HOST = "reseed.example.org"

        with caplog.at_level(logging.WARNING):
            result = main.provision(config)

        assert result.signing.generated is False
        assert result.tls.available is False
        assert any(r.message == "tls_disabled" for r in caplog.records)

    def test_build_store_uses_settings(self, config):
        config.NON_INTERACTIVE = True
        with patch("main.IdentityStore") as mock_store:
            main.build_store(config)

        kwargs = mock_store.call_args.kwargs
        assert kwargs["confirm"] is None
        assert kwargs["signing_issuer"].role.validity.days == config.SIGNING_VALIDITY_DAYS
        assert kwargs["tls_issuer"].role.validity.days == config.TLS_VALIDITY_DAYS


    def test_overlong_signer_id_is_a_credential_error(self, config, tmp_path):
        config.SIGNER_ID = "p" * 70 + "@example.com"

        with pytest.raises(GenerationError, match="1 to 64 bytes"):
            main.provision(config, _store(tmp_path, True))


class TestRun:
    @pytest.fixture
    def telemetry(self):
        with (
            patch("main.setup_logging"),
            patch("main.setup_tracing") as mock_tracing,
            patch("main.setup_metrics") as mock_metrics,
            patch("main.LoggingInstrumentor"),
        ):
            yield mock_tracing.return_value, mock_metrics.return_value

    def test_credential_error_exits_nonzero(self, telemetry, capsys):
        with patch("main.provision", side_effect=UserDeclinedError("alice@example.com")):
            assert main.run() == 1

        assert "A signing key is required" in capsys.readouterr().err
        for provider in telemetry:
            provider.shutdown.assert_called_once()

    def test_success_prints_paths(self, telemetry, capsys, tmp_path):
        result = MagicMock()
        result.signing.paths.key_path = tmp_path / "alice_at_example.com.pem"
        result.tls = ResolvedPaths()
        with patch("main.provision", return_value=result):
            assert main.run() == 0

        out = capsys.readouterr().out
        assert f"Signing key: {tmp_path / 'alice_at_example.com.pem'}" in out
        assert "TLS" not in out
