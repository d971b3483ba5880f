from __future__ import annotations

import logging
from threading import Lock
from typing import Optional

from pveclient.auth.source import TicketSource
from pveclient.auth.ticket import Ticket, ticket_valid

logger = logging.getLogger(__name__)


class ReuseTicketSource:
    """Hands out the same ticket until it expires, then mints one new one.

    The lock is held across the refresh round trip. That serializes
    refreshes: callers racing an expiry wait for the single request in
    flight and then all receive its ticket.
    """

    def __init__(self, source: TicketSource, ticket: Optional[Ticket] = None) -> None:
        self.source = source
        self._ticket = ticket
        self._lock = Lock()

    def current(self) -> Ticket:
        with self._lock:
            if ticket_valid(self._ticket):
                return self._ticket
            logger.debug("Ticket missing or expired, refreshing")
            ticket = self.source.ticket()
            self._ticket = ticket
            return ticket

    def ticket(self) -> Ticket:
        return self.current()

    def peek(self) -> Optional[Ticket]:
        with self._lock:
            return self._ticket


def reuse_ticket_source(ticket: Optional[Ticket], source: TicketSource) -> ReuseTicketSource:
    """Wrap ``source`` in a caching source seeded with ``ticket``.

    An existing ``ReuseTicketSource`` is returned as is when no seed is
    given, and re-seeded around its own source otherwise, so caches never
    nest.
    """
    if isinstance(source, ReuseTicketSource):
        if ticket is None:
            return source
        source = source.source
    return ReuseTicketSource(source, ticket)
