from pveclient.auth.cache import ReuseTicketSource, reuse_ticket_source
from pveclient.auth.source import PasswordTicketSource, TicketConfig, TicketRefresher, TicketSource
from pveclient.auth.ticket import (
    TICKET_SKEW_MARGIN_SECONDS,
    TICKET_VALIDITY_SECONDS,
    Ticket,
    acquire_ticket,
    ticket_valid,
)
from pveclient.auth.transport import AuthenticatedTransport, TicketAuth

__all__ = [
    "AuthenticatedTransport",
    "PasswordTicketSource",
    "ReuseTicketSource",
    "TICKET_SKEW_MARGIN_SECONDS",
    "TICKET_VALIDITY_SECONDS",
    "Ticket",
    "TicketAuth",
    "TicketConfig",
    "TicketRefresher",
    "TicketSource",
    "acquire_ticket",
    "reuse_ticket_source",
    "ticket_valid",
]
