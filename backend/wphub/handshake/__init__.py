"""Delegated-credential handshake with WordPress sites."""

from wphub.handshake.controller import (
    AUTHORIZATION_PATH,
    CallbackResult,
    ConnectRedirect,
    HandshakeController,
)
from wphub.handshake.tickets import HandshakeTicket, TicketStore

__all__ = [
    "AUTHORIZATION_PATH",
    "CallbackResult",
    "ConnectRedirect",
    "HandshakeController",
    "HandshakeTicket",
    "TicketStore",
]
