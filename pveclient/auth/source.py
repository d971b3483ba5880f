from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Union

import requests

from pveclient.auth.ticket import Ticket, acquire_ticket
from pveclient.errors import AuthError

logger = logging.getLogger(__name__)


class TicketSource(Protocol):
    """Anything able to hand out a ticket.

    Implementations used from several threads must be safe for concurrent
    use; the returned ``Ticket`` is immutable.
    """

    def ticket(self) -> Ticket:
        ...


@dataclass(frozen=True)
class TicketConfig:
    username: str
    ticket_url: str
    password: Optional[str] = None
    verify: Union[bool, str] = True
    timeout: Optional[float] = None

    def __repr__(self) -> str:
        return f"TicketConfig(username={self.username!r}, ticket_url={self.ticket_url!r})"


class PasswordTicketSource:
    """Acquires every ticket with the configured password."""

    def __init__(self, config: TicketConfig, *, session: Optional[requests.Session] = None) -> None:
        if not config.password:
            raise AuthError("a password is required", endpoint=config.ticket_url)
        self.config = config
        self.session = session or requests.Session()

    def ticket(self) -> Ticket:
        return acquire_ticket(
            self.session,
            self.config.username,
            self.config.password,
            self.config.ticket_url,
            verify=self.config.verify,
            timeout=self.config.timeout,
        )


class TicketRefresher:
    """Mints tickets over the network.

    Uses the configured password when there is one, otherwise renews with the
    last ticket it handed out. Not safe for concurrent use on its own since it
    remembers that ticket; wrap it in ``ReuseTicketSource``.
    """

    def __init__(
        self,
        config: TicketConfig,
        *,
        refresh_ticket: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.config = config
        self.session = session or requests.Session()
        self._refresh_ticket = refresh_ticket

    def ticket(self) -> Ticket:
        secret = self.config.password or self._refresh_ticket
        if not secret:
            raise AuthError(
                "ticket expired and no way to re-authenticate",
                endpoint=self.config.ticket_url,
            )
        reason = "password" if self.config.password else "renewal"
        logger.debug("Requesting ticket for %s (%s)", self.config.username, reason)
        ticket = acquire_ticket(
            self.session,
            self.config.username,
            secret,
            self.config.ticket_url,
            verify=self.config.verify,
            timeout=self.config.timeout,
        )
        self._refresh_ticket = ticket.ticket
        return ticket
