"""Exceptions raised by the Proxmox VE client."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


class PVEError(Exception):
    """Base class for every error raised by pveclient."""


class AuthError(PVEError):
    """Raised when a ticket cannot be acquired or refreshed."""

    def __init__(
        self,
        message: str,
        *,
        endpoint: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        self.endpoint = endpoint
        self.status_code = status_code
        detail = message
        if status_code is not None:
            detail = f"{detail} (status {status_code})"
        if endpoint:
            detail = f"{detail} [{endpoint}]"
        super().__init__(detail)


class ArgError(PVEError):
    """An input value violates its validation rule."""

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(f"{field} is invalid because {reason}")


class ProtocolError(PVEError):
    """The API answered with a body that cannot be decoded."""


class APIError(PVEError):
    """Non-2xx answer from the API."""

    def __init__(
        self,
        status_code: int,
        *,
        errors: Optional[Dict[str, str]] = None,
        message: Optional[str] = None,
        result_code: Optional[int] = None,
    ) -> None:
        self.status_code = status_code
        self.errors = dict(errors or {})
        self.message = message
        self.result_code = result_code
        super().__init__(self._render())

    def _render(self) -> str:
        detail = f"API error ({self.status_code})"
        if self.message:
            detail = f"{detail}: {self.message}"
        if self.errors:
            fields = "; ".join(f"{key}: {value}" for key, value in sorted(self.errors.items()))
            detail = f"{detail} [{fields}]"
        return detail


class NodeDoesNotExistError(APIError):
    def __init__(self, node: str, status_code: int = 500, **kwargs: Any) -> None:
        self.node = node
        super().__init__(status_code, message=f"Node {node} doesn't exist", **kwargs)


class VMDoesNotExistError(APIError):
    def __init__(self, vmid: str, status_code: int = 500, **kwargs: Any) -> None:
        self.vmid = vmid
        super().__init__(status_code, message=f"VM with id {vmid} doesn't exist", **kwargs)


@dataclass(frozen=True)
class DecodeWarning:
    """Non-fatal problem found while decoding a wire value.

    Never raised: collected and handed back to the caller next to the
    decoded object.
    """

    field: str
    value: Any
    reason: str

    def __str__(self) -> str:
        return f"{self.field}={self.value!r}: {self.reason}"
