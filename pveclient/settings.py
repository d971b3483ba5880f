from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from typing import List, Optional, Union

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 30.0
_MIN_TIMEOUT = 1.0
_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _as_bool(value: Optional[str], default: bool, *, name: str) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    logger.warning("Invalid %s=%r, defaulting to %s", name, value, default)
    return default


def _as_float(value: Optional[str], default: float, *, name: str) -> float:
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        logger.warning("Invalid float for %s=%r, using default=%s", name, value, default)
        return default


def _ensure_min(name: str, value: float, minimum: float) -> float:
    if value < minimum:
        logger.warning(
            "%s (%s) is lower than minimum %s; using %s",
            name,
            value,
            minimum,
            minimum,
        )
        return minimum
    return value


def _optional(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None


@dataclass(frozen=True)
class Settings:
    host: Optional[str]
    username: Optional[str]
    password: Optional[str]
    verify_tls: bool
    ca_bundle: Optional[str]
    request_timeout: float
    log_level: str
    missing_envs: List[str]

    @property
    def configured(self) -> bool:
        return not self.missing_envs

    @property
    def tls_verify(self) -> Union[bool, str]:
        # requests takes either a flag or a CA bundle path
        if not self.verify_tls:
            return False
        return self.ca_bundle or True

    def __repr__(self) -> str:
        return (
            f"Settings(host={self.host!r}, username={self.username!r}, "
            f"verify_tls={self.verify_tls!r}, request_timeout={self.request_timeout!r})"
        )


def load_settings(*, dotenv: bool = True) -> Settings:
    """Build settings from ``PVE_*`` environment variables (and ``.env``)."""
    if dotenv:
        load_dotenv()

    host = _optional(os.getenv("PVE_HOST"))
    username = _optional(os.getenv("PVE_USER"))
    password = os.getenv("PVE_PASS") or None
    verify_tls = _as_bool(os.getenv("PVE_VERIFY_TLS"), True, name="PVE_VERIFY_TLS")
    ca_bundle = _optional(os.getenv("PVE_CA_BUNDLE"))
    request_timeout = _ensure_min(
        "PVE_REQUEST_TIMEOUT",
        _as_float(os.getenv("PVE_REQUEST_TIMEOUT"), _DEFAULT_TIMEOUT, name="PVE_REQUEST_TIMEOUT"),
        _MIN_TIMEOUT,
    )
    log_level = (os.getenv("PVECLIENT_LOGLEVEL") or "INFO").strip().upper() or "INFO"

    missing_envs = []
    if not host:
        missing_envs.append("PVE_HOST")
    if not username:
        missing_envs.append("PVE_USER")
    if not password:
        missing_envs.append("PVE_PASS")

    return Settings(
        host=host.rstrip("/") if host else None,
        username=username,
        password=password,
        verify_tls=verify_tls,
        ca_bundle=ca_bundle,
        request_timeout=request_timeout,
        log_level=log_level,
        missing_envs=missing_envs,
    )


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """Send pveclient logs to stderr at ``level``. Meant for applications.

    Without ``level`` the ``PVECLIENT_LOGLEVEL`` setting applies.
    """
    if level is None:
        level = load_settings().log_level
    root = logging.getLogger("pveclient")
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        logger.warning("Invalid log level %r, defaulting to INFO", level)
        resolved = logging.INFO
    root.setLevel(resolved)
    if not any(getattr(handler, "_pveclient", False) for handler in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        handler._pveclient = True
        root.addHandler(handler)
    return root
