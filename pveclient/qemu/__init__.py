from pveclient.qemu.config import DecodeResult, VMConfig, from_wire_map, to_wire_map
from pveclient.qemu.devices import (
    Device,
    IDEDevice,
    NetworkDevice,
    RawDevice,
    SATADevice,
    SCSIDevice,
    VirtIODevice,
    decode_device,
    encode_device,
)

__all__ = [
    "DecodeResult",
    "Device",
    "IDEDevice",
    "NetworkDevice",
    "RawDevice",
    "SATADevice",
    "SCSIDevice",
    "VMConfig",
    "VirtIODevice",
    "decode_device",
    "encode_device",
    "from_wire_map",
    "to_wire_map",
]
