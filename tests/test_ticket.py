from __future__ import annotations

import pytest
import requests

from pveclient.auth import ticket as ticket_mod
from pveclient.auth.ticket import (
    TICKET_SKEW_MARGIN_SECONDS,
    TICKET_VALIDITY_SECONDS,
    Ticket,
    acquire_ticket,
    ticket_valid,
)
from pveclient.errors import AuthError

NOW = 1_700_000_000.0
TICKET_URL = "https://pve.example:8006/api2/json/access/ticket"


class DummyResponse:
    def __init__(self, status_code: int, *, json_data=None, text: str = ""):
        self.status_code = status_code
        self._json_data = json_data
        self.text = text

    def json(self):
        if self._json_data is None or isinstance(self._json_data, Exception):
            raise ValueError("invalid json")
        return self._json_data


class DummySession:
    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.calls = []

    def post(self, url, data=None, verify=True, timeout=None):
        self.calls.append({"url": url, "data": data, "verify": verify, "timeout": timeout})
        if self.exc is not None:
            raise self.exc
        return self.response


def _payload(ticket="PVE:root@pam:ABC", csrf="csrf-1", username="root@pam"):
    return {"data": {"ticket": ticket, "CSRFPreventionToken": csrf, "username": username}}


def test_ticket_valid_just_inside_window():
    issued = NOW - TICKET_VALIDITY_SECONDS + TICKET_SKEW_MARGIN_SECONDS + 1
    assert Ticket("t", "c", "u", issued_at=issued).is_valid(now=NOW)


def test_ticket_invalid_just_outside_window():
    issued = NOW - TICKET_VALIDITY_SECONDS + TICKET_SKEW_MARGIN_SECONDS - 1
    assert not Ticket("t", "c", "u", issued_at=issued).is_valid(now=NOW)


def test_ticket_invalid_exactly_at_expiry():
    issued = NOW - TICKET_VALIDITY_SECONDS + TICKET_SKEW_MARGIN_SECONDS
    assert not Ticket("t", "c", "u", issued_at=issued).is_valid(now=NOW)


def test_empty_or_missing_ticket_is_invalid():
    assert not Ticket("", "c", "u", issued_at=NOW).is_valid(now=NOW)
    assert not ticket_valid(None, now=NOW)


def test_fresh_ticket_uses_current_time(monkeypatch):
    monkeypatch.setattr(ticket_mod, "_now", lambda: NOW)
    ticket = Ticket("t", "c", "u")
    assert ticket.issued_at == NOW
    assert ticket.is_valid()


def test_default_issue_time_and_validity_share_one_clock(monkeypatch):
    clock = {"now": NOW}
    monkeypatch.setattr(ticket_mod, "_now", lambda: clock["now"])
    ticket = Ticket("t", "c", "u")

    clock["now"] = NOW + TICKET_VALIDITY_SECONDS
    assert not ticket.is_valid()


def test_auth_headers_for_reads_skip_csrf():
    ticket = Ticket("PVE:abc", "csrf-1", "root@pam", issued_at=NOW)
    assert ticket.auth_headers("GET") == {"Cookie": "PVEAuthCookie=PVE:abc"}
    assert "CSRFPreventionToken" not in ticket.auth_headers("head")


@pytest.mark.parametrize("method", ["POST", "PUT", "DELETE", "post"])
def test_auth_headers_for_writes_carry_csrf(method):
    ticket = Ticket("PVE:abc", "csrf-1", "root@pam", issued_at=NOW)
    headers = ticket.auth_headers(method)
    assert headers["Cookie"] == "PVEAuthCookie=PVE:abc"
    assert headers["CSRFPreventionToken"] == "csrf-1"


def test_repr_hides_secrets():
    ticket = Ticket("PVE:secret", "csrf-secret", "root@pam", issued_at=NOW)
    assert "secret" not in repr(ticket)


def test_acquire_ticket_posts_form_and_parses(monkeypatch):
    monkeypatch.setattr(ticket_mod, "_now", lambda: NOW)
    session = DummySession(DummyResponse(200, json_data=_payload()))

    ticket = acquire_ticket(session, "root@pam", "pw", TICKET_URL, verify=False, timeout=5)

    assert ticket == Ticket("PVE:root@pam:ABC", "csrf-1", "root@pam", issued_at=NOW)
    assert session.calls == [
        {
            "url": TICKET_URL,
            "data": {"username": "root@pam", "password": "pw"},
            "verify": False,
            "timeout": 5,
        }
    ]


def test_acquire_ticket_non_2xx_raises_with_status_and_endpoint():
    session = DummySession(DummyResponse(401, text="authentication failure"))

    with pytest.raises(AuthError) as exc:
        acquire_ticket(session, "root@pam", "bad", TICKET_URL)

    assert exc.value.status_code == 401
    assert exc.value.endpoint == TICKET_URL
    assert "authentication failure" in str(exc.value)


def test_acquire_ticket_network_error_becomes_auth_error():
    session = DummySession(exc=requests.ConnectionError("refused"))

    with pytest.raises(AuthError) as exc:
        acquire_ticket(session, "root@pam", "pw", TICKET_URL)

    assert isinstance(exc.value.__cause__, requests.ConnectionError)
    assert exc.value.status_code is None


def test_acquire_ticket_rejects_non_json_body():
    session = DummySession(DummyResponse(200, json_data=ValueError("x")))

    with pytest.raises(AuthError):
        acquire_ticket(session, "root@pam", "pw", TICKET_URL)


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"data": None},
        {"data": {"CSRFPreventionToken": "c"}},
        {"data": {"ticket": ""}},
        ["not", "an", "object"],
    ],
)
def test_acquire_ticket_rejects_malformed_payload(payload):
    session = DummySession(DummyResponse(200, json_data=payload))

    with pytest.raises(AuthError):
        acquire_ticket(session, "root@pam", "pw", TICKET_URL)
