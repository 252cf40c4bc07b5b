"""Tests for logging, tracing and metrics setup."""

import logging
from unittest.mock import patch

import pytest

import main
from shared.config import Settings
from shared.logging import setup_logging
from shared.metrics import setup_metrics


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_setup_logging(restore_root_logger):
    """setup_logging configures the OTel provider and a stream handler."""
    with (
        patch("shared.logging.set_logger_provider") as mock_set_provider,
        patch("shared.logging.LoggerProvider") as mock_provider_cls,
        patch("shared.logging.BatchLogRecordProcessor"),
        patch("shared.logging.ConsoleLogRecordExporter"),
    ):
        before = len(logging.getLogger().handlers)
        setup_logging()

        mock_provider_cls.assert_called_once()
        mock_set_provider.assert_called_once()
        assert len(logging.getLogger().handlers) == before + 2


def test_setup_metrics():
    with (
        patch("shared.metrics.MeterProvider") as mock_provider_cls,
        patch("shared.metrics.metrics.set_meter_provider") as mock_set_provider,
        patch("shared.metrics.PrometheusMetricReader"),
        patch("shared.metrics.PeriodicExportingMetricReader"),
        patch("shared.metrics.ConsoleMetricExporter"),
    ):
        provider = setup_metrics("test-app")

        mock_provider_cls.assert_called_once()
        mock_set_provider.assert_called_once()
        assert provider is mock_provider_cls.return_value


def test_setup_tracing():
    with (
        patch("main.TracerProvider") as mock_provider_cls,
        patch("main.BatchSpanProcessor"),
        patch("main.ConsoleSpanExporter"),
        patch("main.trace") as mock_trace,
    ):
        provider = main.setup_tracing("test-app")

        mock_provider_cls.return_value.add_span_processor.assert_called_once()
        mock_trace.set_tracer_provider.assert_called_once_with(provider)


def test_settings_defaults():
    config = Settings(_env_file=None)
    assert config.SIGNING_KEY_SIZE == 4096
    assert config.OUTPUT_DIR == "."
    assert config.NON_INTERACTIVE is False
    assert config.TLS_HOST is None


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("SIGNER_ID", "alice@example.com")
    monkeypatch.setenv("NON_INTERACTIVE", "true")
    config = Settings(_env_file=None)
    assert config.SIGNER_ID == "alice@example.com"
    assert config.NON_INTERACTIVE is True
