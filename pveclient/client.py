from __future__ import annotations

import logging
import re
from typing import Any, Callable, Dict, Mapping, Optional, Union

import requests

from pveclient.auth import AuthenticatedTransport, TicketConfig, TicketRefresher, reuse_ticket_source
from pveclient.errors import APIError, ArgError, NodeDoesNotExistError, ProtocolError, VMDoesNotExistError
from pveclient.nodes import NodesService
from pveclient.qemu.service import QemuService
from pveclient.settings import Settings, load_settings
from pveclient.storage import StorageService

logger = logging.getLogger(__name__)

API_BASE_PATH = "/api2/json/"
DEFAULT_TIMEOUT = 30.0

_VM_MISSING_RE = re.compile(r"Configuration file \S+/(\d+)\.conf' does not exist")
_NODE_MISSING_RE = re.compile(r"hostname lookup '(\S+)' failed")
_DEBUG_BODY_MAX_LEN = 500

RequestCompletionCallback = Callable[[requests.PreparedRequest, requests.Response], None]


def _json_or_none(response: requests.Response) -> Optional[Any]:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


def check_response(response: requests.Response) -> None:
    """Raise for any status outside 200-299.

    The backend reports errors either as ``{"errors": {field: msg}}`` or as
    ``{"ResultMessage": ..., "ResultCode": ...}``; missing VMs and nodes only
    show up in the status reason.
    """
    status = response.status_code
    if 200 <= status <= 299:
        return

    payload = _json_or_none(response)
    if not isinstance(payload, dict):
        payload = {}
    errors = payload.get("errors")
    if not isinstance(errors, dict):
        errors = {}
    errors = {str(key): str(value) for key, value in errors.items()}
    message = payload.get("ResultMessage") or payload.get("message") or response.reason
    result_code = payload.get("ResultCode")
    if not isinstance(result_code, int):
        result_code = None
    logger.debug("Check response: %s %s", status, (response.text or "")[:_DEBUG_BODY_MAX_LEN])

    haystack = f"{response.reason or ''} {message or ''}"
    vm_match = _VM_MISSING_RE.search(haystack)
    if vm_match:
        raise VMDoesNotExistError(vm_match.group(1), status, errors=errors, result_code=result_code)
    node_match = _NODE_MISSING_RE.search(haystack)
    if node_match:
        raise NodeDoesNotExistError(node_match.group(1), status, errors=errors, result_code=result_code)
    raise APIError(status, errors=errors, message=message, result_code=result_code)


class Client:
    """Proxmox VE API client.

    Authenticates on construction and keeps the ticket fresh for every
    later call. Services are exposed as ``nodes``, ``vms`` and ``storage``.
    """

    def __init__(
        self,
        host: str,
        username: str,
        password: str,
        *,
        verify: Union[bool, str] = True,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not host:
            raise ArgError("host", "it must not be empty")
        self.base_url = f"{host.rstrip('/')}{API_BASE_PATH}"
        self.session = session or requests.Session()
        self.ticket_config = TicketConfig(
            username=username,
            ticket_url=f"{self.base_url}access/ticket",
            password=password,
            verify=verify,
            timeout=timeout,
        )
        self.tickets = reuse_ticket_source(None, TicketRefresher(self.ticket_config, session=self.session))
        self.tickets.current()
        self.transport = AuthenticatedTransport(
            self.base_url,
            self.tickets,
            session=self.session,
            verify=verify,
            timeout=timeout,
        )
        self._on_request_completed: Optional[RequestCompletionCallback] = None

        self.nodes = NodesService(self)
        self.vms = QemuService(self)
        self.storage = StorageService(self)
        logger.debug("Base URL: %s", self.base_url)

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        *,
        session: Optional[requests.Session] = None,
    ) -> "Client":
        settings = settings or load_settings()
        if settings.missing_envs:
            raise ArgError("settings", f"missing {', '.join(settings.missing_envs)}")
        return cls(
            settings.host,
            settings.username,
            settings.password,
            verify=settings.tls_verify,
            timeout=settings.request_timeout,
            session=session,
        )

    def on_request_completed(self, callback: Optional[RequestCompletionCallback]) -> None:
        """Call ``callback(request, response)`` after every API response."""
        self._on_request_completed = callback

    def request(
        self,
        method: str,
        path: str,
        *,
        data: Optional[Mapping[str, Any]] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """Send a request and return the ``data`` member of the answer."""
        response = self.transport.send(method, path, data=data, params=params)
        if self._on_request_completed is not None:
            self._on_request_completed(response.request, response)
        check_response(response)

        if not response.content:
            return None
        try:
            payload = response.json()
        except ValueError as exc:
            raise ProtocolError(f"Response from {path} is not valid JSON") from exc
        if not isinstance(payload, dict):
            raise ProtocolError(f"Response from {path} is not a JSON object")
        logger.debug("Response %s %s: %s", method.upper(), path, str(payload)[:_DEBUG_BODY_MAX_LEN])
        return payload.get("data")

    def get(self, path: str, *, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, *, data: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("POST", path, data=data)

    def put(self, path: str, *, data: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("PUT", path, data=data)

    def delete(self, path: str, *, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("DELETE", path, params=params)

    def close(self) -> None:
        self.transport.close()
