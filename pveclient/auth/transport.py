from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Union
from urllib.parse import urljoin

import requests
from requests.auth import AuthBase

from pveclient.auth.cache import ReuseTicketSource

logger = logging.getLogger(__name__)

MEDIA_TYPE = "application/json"
_FORM_METHODS = {"POST", "PUT"}


class TicketAuth(AuthBase):
    """Sign each outgoing request with the cache's current ticket.

    ``AuthError`` from the cache propagates, so nothing leaves unsigned.
    """

    def __init__(self, cache: ReuseTicketSource) -> None:
        self.cache = cache

    def __call__(self, request: requests.PreparedRequest) -> requests.PreparedRequest:
        ticket = self.cache.current()
        request.headers.update(ticket.auth_headers(request.method or "GET"))
        return request


class AuthenticatedTransport:
    def __init__(
        self,
        base_url: str,
        cache: ReuseTicketSource,
        *,
        session: Optional[requests.Session] = None,
        verify: Union[bool, str] = True,
        timeout: Optional[float] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/") + "/"
        self.cache = cache
        self.session = session or requests.Session()
        self.auth = TicketAuth(cache)
        self.verify = verify
        self.timeout = timeout

    def url_for(self, path: str) -> str:
        return urljoin(self.base_url, path.lstrip("/"))

    def prepare(
        self,
        method: str,
        path: str,
        *,
        data: Optional[Mapping[str, Any]] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> requests.PreparedRequest:
        method = method.upper()
        headers: Dict[str, str] = {"Accept": MEDIA_TYPE}
        body = None
        if data:
            if method in _FORM_METHODS:
                body = dict(data)
            else:
                params = {**(params or {}), **data}
        request = requests.Request(
            method=method,
            url=self.url_for(path),
            headers=headers,
            data=body,
            params=dict(params) if params else None,
            auth=self.auth,
        )
        if method in _FORM_METHODS and body is None:
            request.headers["Content-Type"] = "application/x-www-form-urlencoded"
        return self.session.prepare_request(request)

    def send(
        self,
        method: str,
        path: str,
        *,
        data: Optional[Mapping[str, Any]] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> requests.Response:
        prepared = self.prepare(method, path, data=data, params=params)
        logger.debug("%s %s", prepared.method, prepared.url)
        return self.session.send(prepared, verify=self.verify, timeout=self.timeout)

    def close(self) -> None:
        self.session.close()
