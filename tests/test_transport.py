from __future__ import annotations

from urllib.parse import parse_qs

import pytest
import requests

from pveclient.auth.cache import ReuseTicketSource
from pveclient.auth.ticket import Ticket
from pveclient.auth.transport import AuthenticatedTransport
from pveclient.errors import AuthError

BASE_URL = "https://pve.example:8006/api2/json/"


class StaticSource:
    def __init__(self, ticket=None, exc=None):
        self._ticket = ticket
        self.exc = exc

    def ticket(self):
        if self.exc is not None:
            raise self.exc
        return self._ticket


def _transport(**kwargs) -> AuthenticatedTransport:
    cache = ReuseTicketSource(StaticSource(Ticket("PVE:abc", "csrf-1", "root@pam")))
    return AuthenticatedTransport(BASE_URL, cache, **kwargs)


def test_get_carries_cookie_only():
    prepared = _transport().prepare("GET", "nodes")

    assert prepared.url == f"{BASE_URL}nodes"
    assert prepared.headers["Cookie"] == "PVEAuthCookie=PVE:abc"
    assert prepared.headers["Accept"] == "application/json"
    assert "CSRFPreventionToken" not in prepared.headers


def test_post_is_form_encoded_and_carries_csrf():
    prepared = _transport().prepare("post", "/nodes/pve1/qemu", data={"vmid": "101", "cores": "4"})

    assert prepared.method == "POST"
    assert prepared.url == f"{BASE_URL}nodes/pve1/qemu"
    assert prepared.headers["CSRFPreventionToken"] == "csrf-1"
    assert prepared.headers["Content-Type"] == "application/x-www-form-urlencoded"
    assert parse_qs(prepared.body) == {"vmid": ["101"], "cores": ["4"]}


def test_delete_carries_csrf():
    prepared = _transport().prepare("DELETE", "nodes/pve1/qemu/101")

    assert prepared.headers["CSRFPreventionToken"] == "csrf-1"
    assert prepared.body is None


def test_get_data_goes_to_query_string():
    prepared = _transport().prepare("GET", "nodes/pve1/qemu", data={"full": "1"})

    assert prepared.url == f"{BASE_URL}nodes/pve1/qemu?full=1"
    assert prepared.body is None


def test_auth_failure_fails_closed():
    cache = ReuseTicketSource(StaticSource(exc=AuthError("denied", status_code=401)))
    transport = AuthenticatedTransport(BASE_URL, cache)

    with pytest.raises(AuthError):
        transport.prepare("GET", "nodes")


def test_send_dispatches_prepared_request_with_verify_and_timeout(monkeypatch):
    transport = _transport(verify="/etc/ssl/pve.pem", timeout=12.5)
    captured = {}

    def fake_send(prepared, **kwargs):
        captured["prepared"] = prepared
        captured["kwargs"] = kwargs
        return "response"

    monkeypatch.setattr(transport.session, "send", fake_send)

    assert transport.send("PUT", "nodes/pve1/qemu/101/config", data={"memory": "2048"}) == "response"
    assert captured["prepared"].headers["CSRFPreventionToken"] == "csrf-1"
    assert captured["kwargs"] == {"verify": "/etc/ssl/pve.pem", "timeout": 12.5}


def test_session_defaults_to_requests_session():
    assert isinstance(_transport().session, requests.Session)
