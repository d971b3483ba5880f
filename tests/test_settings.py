from __future__ import annotations

import logging

import pytest

from pveclient import settings as settings_mod
from pveclient.settings import configure_logging, load_settings

ENV_VARS = [
    "PVE_HOST",
    "PVE_USER",
    "PVE_PASS",
    "PVE_VERIFY_TLS",
    "PVE_CA_BUNDLE",
    "PVE_REQUEST_TIMEOUT",
    "PVECLIENT_LOGLEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_without_environment():
    settings = load_settings(dotenv=False)

    assert settings.host is None
    assert settings.verify_tls is True
    assert settings.tls_verify is True
    assert settings.request_timeout == 30.0
    assert settings.log_level == "INFO"
    assert settings.missing_envs == ["PVE_HOST", "PVE_USER", "PVE_PASS"]
    assert not settings.configured


def test_full_environment(monkeypatch):
    monkeypatch.setenv("PVE_HOST", "https://pve.example:8006/")
    monkeypatch.setenv("PVE_USER", "root@pam")
    monkeypatch.setenv("PVE_PASS", "secret")
    monkeypatch.setenv("PVE_VERIFY_TLS", "off")
    monkeypatch.setenv("PVE_REQUEST_TIMEOUT", "12.5")
    monkeypatch.setenv("PVECLIENT_LOGLEVEL", "debug")

    settings = load_settings(dotenv=False)

    assert settings.configured
    assert settings.host == "https://pve.example:8006"
    assert settings.verify_tls is False
    assert settings.tls_verify is False
    assert settings.request_timeout == 12.5
    assert settings.log_level == "DEBUG"
    assert "secret" not in repr(settings)


def test_ca_bundle_is_used_when_verifying(monkeypatch):
    monkeypatch.setenv("PVE_CA_BUNDLE", "/etc/pve/pve-root-ca.pem")
    settings = load_settings(dotenv=False)
    assert settings.tls_verify == "/etc/pve/pve-root-ca.pem"


def test_invalid_values_fall_back_with_warning(monkeypatch, caplog):
    monkeypatch.setenv("PVE_VERIFY_TLS", "maybe")
    monkeypatch.setenv("PVE_REQUEST_TIMEOUT", "soon")

    with caplog.at_level(logging.WARNING, logger=settings_mod.__name__):
        settings = load_settings(dotenv=False)

    assert settings.verify_tls is True
    assert settings.request_timeout == 30.0
    assert "PVE_VERIFY_TLS" in caplog.text
    assert "PVE_REQUEST_TIMEOUT" in caplog.text


def test_timeout_is_clamped_to_minimum(monkeypatch):
    monkeypatch.setenv("PVE_REQUEST_TIMEOUT", "0.1")
    assert load_settings(dotenv=False).request_timeout == 1.0


def test_load_settings_reads_dotenv(monkeypatch):
    calls = []
    monkeypatch.setattr(settings_mod, "load_dotenv", lambda: calls.append(True))

    load_settings()

    assert calls == [True]


def test_configure_logging_adds_a_single_handler():
    logger = logging.getLogger("pveclient")
    before = list(logger.handlers)
    try:
        configure_logging("debug")
        configure_logging("warning")

        added = [handler for handler in logger.handlers if handler not in before]
        assert len(added) == 1
        assert logger.level == logging.WARNING
    finally:
        for handler in logger.handlers[:]:
            if handler not in before:
                logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)


def test_configure_logging_rejects_unknown_level():
    logger = logging.getLogger("pveclient")
    before = list(logger.handlers)
    try:
        assert configure_logging("chatty").level == logging.INFO
    finally:
        for handler in logger.handlers[:]:
            if handler not in before:
                logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)


def test_configure_logging_defaults_to_configured_level(monkeypatch):
    monkeypatch.setattr(settings_mod, "load_dotenv", lambda: None)
    monkeypatch.setenv("PVECLIENT_LOGLEVEL", "warning")
    logger = logging.getLogger("pveclient")
    before = list(logger.handlers)
    try:
        assert configure_logging().level == logging.WARNING
    finally:
        for handler in logger.handlers[:]:
            if handler not in before:
                logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)
