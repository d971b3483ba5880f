"""Typed client for the Proxmox VE REST API."""
from pveclient.client import Client, check_response
from pveclient.errors import (
    APIError,
    ArgError,
    AuthError,
    DecodeWarning,
    NodeDoesNotExistError,
    ProtocolError,
    PVEError,
    VMDoesNotExistError,
)
from pveclient.qemu import VMConfig, from_wire_map, to_wire_map
from pveclient.settings import Settings, configure_logging, load_settings

__version__ = "0.2.0"

__all__ = [
    "APIError",
    "ArgError",
    "AuthError",
    "Client",
    "DecodeWarning",
    "NodeDoesNotExistError",
    "PVEError",
    "ProtocolError",
    "Settings",
    "VMConfig",
    "VMDoesNotExistError",
    "check_response",
    "configure_logging",
    "from_wire_map",
    "load_settings",
    "to_wire_map",
]
