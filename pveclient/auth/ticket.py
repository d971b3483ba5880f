from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

import requests

from pveclient.errors import AuthError

logger = logging.getLogger(__name__)

TICKET_COOKIE_NAME = "PVEAuthCookie"
CSRF_HEADER = "CSRFPreventionToken"

# The backend keeps a ticket for 2h; tickets are renewed after 1h.
TICKET_VALIDITY_SECONDS = 3600
TICKET_SKEW_MARGIN_SECONDS = 10

_READ_METHODS = {"GET", "HEAD"}
_AUTH_BODY_MAX_LEN = 200


def _now() -> float:
    return time.time()


@dataclass(frozen=True)
class Ticket:
    """Session credential issued by ``/access/ticket``."""

    ticket: str
    csrf_token: str
    username: str
    issued_at: float = field(default_factory=lambda: _now())

    @property
    def expires_at(self) -> float:
        return self.issued_at + TICKET_VALIDITY_SECONDS - TICKET_SKEW_MARGIN_SECONDS

    def is_valid(self, now: Optional[float] = None) -> bool:
        if not self.ticket:
            return False
        current = _now() if now is None else now
        return current < self.expires_at

    def auth_headers(self, method: str) -> Dict[str, str]:
        headers = {"Cookie": f"{TICKET_COOKIE_NAME}={self.ticket}"}
        if method.upper() not in _READ_METHODS:
            headers[CSRF_HEADER] = self.csrf_token
        return headers

    def __repr__(self) -> str:
        return f"Ticket(username={self.username!r}, issued_at={self.issued_at!r})"

    @classmethod
    def from_payload(
        cls,
        payload: Any,
        *,
        endpoint: Optional[str] = None,
        issued_at: Optional[float] = None,
    ) -> "Ticket":
        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, dict):
            raise AuthError("Ticket response without data object", endpoint=endpoint)
        ticket = data.get("ticket")
        if not isinstance(ticket, str) or not ticket:
            raise AuthError("Ticket response without ticket", endpoint=endpoint)
        csrf_token = data.get("CSRFPreventionToken")
        username = data.get("username")
        return cls(
            ticket=ticket,
            csrf_token=csrf_token if isinstance(csrf_token, str) else "",
            username=username if isinstance(username, str) else "",
            issued_at=_now() if issued_at is None else issued_at,
        )


def ticket_valid(ticket: Optional[Ticket], now: Optional[float] = None) -> bool:
    if ticket is None:
        return False
    return ticket.is_valid(now)


def _safe_error_text(response: requests.Response) -> str:
    text = (response.text or "").strip()
    if len(text) > _AUTH_BODY_MAX_LEN:
        return f"{text[:_AUTH_BODY_MAX_LEN]}..."
    return text


def acquire_ticket(
    session: requests.Session,
    username: str,
    password: str,
    ticket_url: str,
    *,
    verify: Union[bool, str] = True,
    timeout: Optional[float] = None,
) -> Ticket:
    """Exchange a username/password pair for a fresh ticket.

    ``password`` may also be a still valid ticket, which is how the backend
    renews sessions without the account password.
    """
    data = {"username": username, "password": password}
    try:
        response = session.post(ticket_url, data=data, verify=verify, timeout=timeout)
    except requests.RequestException as exc:
        raise AuthError(f"Ticket request failed: {exc}", endpoint=ticket_url) from exc

    if not 200 <= response.status_code <= 299:
        text = _safe_error_text(response)
        message = "Cannot fetch ticket"
        if text:
            message = f"{message}: {text}"
        raise AuthError(message, endpoint=ticket_url, status_code=response.status_code)

    try:
        payload = response.json()
    except ValueError as exc:
        raise AuthError(
            "Ticket response is not valid JSON",
            endpoint=ticket_url,
            status_code=response.status_code,
        ) from exc

    ticket = Ticket.from_payload(payload, endpoint=ticket_url)
    logger.info("Acquired ticket for %s", ticket.username or username)
    return ticket
