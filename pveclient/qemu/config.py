"""VM configuration <-> flat wire map.

The backend takes and returns a VM configuration as a flat mapping of
string keys. Scalar options map one key to one field; device families use
indexed keys (``net0``, ``ide2``, ``scsi13``) whose values are handled by
the codecs in ``pveclient.qemu.devices``. Which key maps to which field is
spelled out in ``_FIELDS`` and ``_FAMILIES`` below.

Encoding fails fast with ``ArgError`` on the first invalid value. Decoding
never raises for bad values: they are skipped and reported as
``DecodeWarning`` entries in the result.
"""
from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Pattern, Tuple, Type

from pveclient.enums import (
    Bios,
    BootDevice,
    CPUType,
    HugePages,
    KeyboardLayout,
    Lock,
    OSType,
    SCSIControllerType,
    VGAType,
    WireEnum,
)
from pveclient.errors import ArgError, DecodeWarning
from pveclient.qemu.devices import (
    Device,
    IDEDevice,
    NetworkDevice,
    RawDevice,
    SATADevice,
    SCSIDevice,
    VirtIODevice,
)
from pveclient.qemu.wire import bool_to_wire, format_number, parse_bool, parse_float, parse_int

logger = logging.getLogger(__name__)

_MAX_BOOT_DEVICES = 4
_FAMILY_KEY_RE = re.compile(r"^([a-z]+)(\d+)$")


@dataclass
class VMConfig:
    # Every field defaults to None, meaning "not specified": it produces no
    # wire key at all, which the backend treats differently from a value.
    acpi: Optional[bool] = None
    qemu_agent: Optional[bool] = None
    archive: Optional[str] = None
    args: Optional[str] = None
    autostart: Optional[bool] = None
    balloon: Optional[int] = None
    bios: Optional[Bios] = None
    boot_order: Optional[List[BootDevice]] = None
    boot_disk: Optional[str] = None
    cdrom: Optional[str] = None
    cores: Optional[int] = None
    cpu_type: Optional[CPUType] = None
    cpu_limit: Optional[int] = None
    cpu_units: Optional[int] = None
    description: Optional[str] = None
    force: Optional[bool] = None
    freeze: Optional[bool] = None
    hotplug: Optional[str] = None
    hugepages: Optional[HugePages] = None
    keyboard_layout: Optional[KeyboardLayout] = None
    kvm: Optional[bool] = None
    localtime: Optional[bool] = None
    lock: Optional[Lock] = None
    machine_type: Optional[str] = None
    memory: Optional[int] = None
    migrate_downtime: Optional[float] = None
    migrate_speed: Optional[int] = None
    name: Optional[str] = None
    numa: Optional[bool] = None
    start_at_boot: Optional[bool] = None
    os_type: Optional[OSType] = None
    pool: Optional[str] = None
    protection: Optional[bool] = None
    reboot: Optional[bool] = None
    scsi_controller: Optional[SCSIControllerType] = None
    memory_shares: Optional[int] = None
    smbios1: Optional[str] = None
    smp: Optional[int] = None
    sockets: Optional[int] = None
    start_date: Optional[str] = None
    startup: Optional[str] = None
    storage: Optional[str] = None
    tablet: Optional[bool] = None
    tdf: Optional[bool] = None
    template: Optional[bool] = None
    unique: Optional[bool] = None
    vcpus: Optional[int] = None
    vga: Optional[VGAType] = None
    vmid: Optional[int] = None
    watchdog: Optional[str] = None

    ide_devices: Optional[Dict[int, IDEDevice]] = None
    sata_devices: Optional[Dict[int, SATADevice]] = None
    scsi_devices: Optional[Dict[int, SCSIDevice]] = None
    virtio_devices: Optional[Dict[int, VirtIODevice]] = None
    network_devices: Optional[Dict[int, NetworkDevice]] = None
    usb_devices: Optional[Dict[int, RawDevice]] = None
    serial_devices: Optional[Dict[int, RawDevice]] = None
    parallel_devices: Optional[Dict[int, RawDevice]] = None
    hostpci_devices: Optional[Dict[int, RawDevice]] = None
    numa_topologies: Optional[Dict[int, RawDevice]] = None

    def add_device(self, family: str, index: int, device: Device) -> None:
        option = _FAMILIES_BY_PREFIX.get(family)
        if option is None:
            raise ArgError(family, "unknown device family")
        devices = getattr(self, option.attr)
        if devices is None:
            devices = {}
            setattr(self, option.attr, devices)
        devices[index] = device


@dataclass
class DecodeResult:
    config: VMConfig
    warnings: List[DecodeWarning] = field(default_factory=list)


@dataclass(frozen=True)
class _Field:
    key: str
    attr: str
    kind: str = "str"
    enum: Optional[Type[WireEnum]] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    pattern: Optional[Pattern[str]] = None
    reason: Optional[str] = None

    def _range_reason(self) -> str:
        if self.reason:
            return self.reason
        if self.minimum is not None and self.maximum is not None:
            return f"it must be {format_number(self.minimum)} to {format_number(self.maximum)}"
        if self.maximum is not None:
            return f"it must be <= {format_number(self.maximum)}"
        return f"it must be >= {format_number(self.minimum)}"

    def _check_number(self, value: Any, integral: bool) -> None:
        if isinstance(value, bool) or not isinstance(value, int if integral else (int, float)):
            raise ArgError(self.key, "it must be an integer" if integral else "it must be a number")
        if not math.isfinite(value):
            raise ArgError(self.key, "it must be a finite number")
        if self.minimum is not None and value < self.minimum:
            raise ArgError(self.key, self._range_reason())
        if self.maximum is not None and value > self.maximum:
            raise ArgError(self.key, self._range_reason())

    def encode(self, value: Any) -> str:
        if self.kind == "bool":
            if not isinstance(value, bool):
                raise ArgError(self.key, "it must be a boolean")
            return bool_to_wire(value)
        if self.kind == "int":
            self._check_number(value, integral=True)
            return str(value)
        if self.kind == "float":
            self._check_number(value, integral=False)
            return format_number(value)
        if self.kind in ("enum", "cpu"):
            try:
                return self.enum(value).value
            except ValueError as exc:
                raise ArgError(self.key, str(exc)) from exc
        if self.kind == "boot":
            devices = list(value)
            if len(devices) > _MAX_BOOT_DEVICES:
                raise ArgError(self.key, "there are too many boot devices specified")
            try:
                return "".join(BootDevice(device).value for device in devices)
            except ValueError as exc:
                raise ArgError(self.key, str(exc)) from exc
        text = str(value)
        if self.pattern is not None and not self.pattern.fullmatch(text):
            raise ArgError(self.key, self.reason or f"it must match {self.pattern.pattern}")
        return text

    def decode(self, value: Any) -> Any:
        if self.kind == "bool":
            return parse_bool(value)
        if self.kind == "int":
            return parse_int(value)
        if self.kind == "float":
            return parse_float(value)
        if self.kind == "enum":
            return self.enum.from_wire(str(value))
        if self.kind == "cpu":
            # "host", "cputype=host" or "host,hidden=1"; only the type is modelled.
            first = str(value).split(",", 1)[0]
            if first.startswith("cputype="):
                first = first[len("cputype="):]
            return self.enum.from_wire(first)
        if self.kind == "boot":
            text = str(value)
            if not text or len(text) > _MAX_BOOT_DEVICES:
                raise ValueError(f"unsupported boot order {text!r}")
            return [BootDevice.from_wire(char) for char in text]
        return str(value)


@dataclass(frozen=True)
class _Family:
    prefix: str
    attr: str
    device: Type[Device]
    slots: int


_FIELDS: Tuple[_Field, ...] = (
    _Field("acpi", "acpi", "bool"),
    _Field("agent", "qemu_agent", "bool"),
    _Field("archive", "archive"),
    _Field("args", "args"),
    _Field("autostart", "autostart", "bool"),
    _Field("balloon", "balloon", "int", minimum=0),
    _Field("bios", "bios", "enum", enum=Bios),
    _Field("boot", "boot_order", "boot"),
    _Field(
        "bootdisk",
        "boot_disk",
        pattern=re.compile(r"(ide|sata|scsi|virtio)\d+"),
        reason="it must name a disk slot such as scsi0",
    ),
    _Field("cdrom", "cdrom"),
    _Field("cores", "cores", "int", minimum=1, reason="it must be > 0"),
    _Field("cpu", "cpu_type", "cpu", enum=CPUType),
    _Field("cpulimit", "cpu_limit", "int", minimum=0, maximum=128),
    _Field("cpuunits", "cpu_units", "int", minimum=0, maximum=500000),
    _Field("description", "description"),
    _Field("force", "force", "bool"),
    _Field("freeze", "freeze", "bool"),
    _Field("hotplug", "hotplug"),
    _Field("hugepages", "hugepages", "enum", enum=HugePages),
    _Field("keyboard", "keyboard_layout", "enum", enum=KeyboardLayout),
    _Field("kvm", "kvm", "bool"),
    _Field("localtime", "localtime", "bool"),
    _Field("lock", "lock", "enum", enum=Lock),
    _Field(
        "machine",
        "machine_type",
        pattern=re.compile(r"pc|pc(-i440fx)?-\d+\.\d+(\.pxe)?|q35|pc-q35-\d+\.\d+(\.pxe)?"),
        reason="it must be pc, q35 or a versioned pc/pc-q35 machine",
    ),
    _Field("memory", "memory", "int", minimum=16),
    _Field("migrate_downtime", "migrate_downtime", "float", minimum=0),
    _Field("migrate_speed", "migrate_speed", "int", minimum=0),
    _Field("name", "name"),
    _Field("numa", "numa", "bool"),
    _Field("onboot", "start_at_boot", "bool"),
    _Field("ostype", "os_type", "enum", enum=OSType),
    _Field("pool", "pool"),
    _Field("protection", "protection", "bool"),
    _Field("reboot", "reboot", "bool"),
    _Field("scsihw", "scsi_controller", "enum", enum=SCSIControllerType),
    _Field("shares", "memory_shares", "int", minimum=0, maximum=50000),
    _Field("smbios1", "smbios1"),
    _Field("smp", "smp", "int", minimum=1, reason="it must be > 0"),
    _Field("sockets", "sockets", "int", minimum=1, reason="it must be > 0"),
    _Field(
        "startdate",
        "start_date",
        pattern=re.compile(r"now|\d{4}-\d{2}-\d{2}(T\d{2}:\d{2}:\d{2})?"),
        reason="it must be now, YYYY-MM-DD or YYYY-MM-DDTHH:MM:SS",
    ),
    _Field("startup", "startup"),
    _Field("storage", "storage"),
    _Field("tablet", "tablet", "bool"),
    _Field("tdf", "tdf", "bool"),
    _Field("template", "template", "bool"),
    _Field("unique", "unique", "bool"),
    _Field("vcpus", "vcpus", "int", minimum=0),
    _Field("vga", "vga", "enum", enum=VGAType),
    _Field(
        "vmid",
        "vmid",
        "int",
        minimum=100,
        reason="it should be >= 100. IDs < 100 are reserved for internal purposes.",
    ),
    _Field("watchdog", "watchdog"),
)

_FAMILIES: Tuple[_Family, ...] = (
    _Family("ide", "ide_devices", IDEDevice, 4),
    _Family("sata", "sata_devices", SATADevice, 6),
    _Family("scsi", "scsi_devices", SCSIDevice, 14),
    _Family("virtio", "virtio_devices", VirtIODevice, 16),
    _Family("net", "network_devices", NetworkDevice, 32),
    _Family("usb", "usb_devices", RawDevice, 5),
    _Family("serial", "serial_devices", RawDevice, 4),
    _Family("parallel", "parallel_devices", RawDevice, 3),
    _Family("hostpci", "hostpci_devices", RawDevice, 4),
    _Family("numa", "numa_topologies", RawDevice, 8),
)

_FIELDS_BY_KEY: Dict[str, _Field] = {option.key: option for option in _FIELDS}
_FAMILIES_BY_PREFIX: Dict[str, _Family] = {family.prefix: family for family in _FAMILIES}


def _encode_family(family: _Family, devices: Mapping[int, Device], wire: Dict[str, str]) -> None:
    if len(devices) > family.slots:
        raise ArgError(
            family.prefix,
            f"there are too many {family.prefix} devices specified. Max. {family.slots}",
        )
    for index, device in devices.items():
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < family.slots:
            raise ArgError(family.prefix, f"slot {index!r} must be 0 to {family.slots - 1}")
        if not isinstance(device, family.device):
            raise ArgError(f"{family.prefix}{index}", f"expected a {family.device.__name__}")
    for index in sorted(devices):
        key = f"{family.prefix}{index}"
        wire[key] = devices[index].to_wire(key)


def to_wire_map(config: VMConfig) -> Dict[str, str]:
    """Encode ``config`` into the flat parameter map the API expects."""
    wire: Dict[str, str] = {}
    for option in _FIELDS:
        value = getattr(config, option.attr)
        if value is None:
            continue
        wire[option.key] = option.encode(value)
    for family in _FAMILIES:
        devices = getattr(config, family.attr)
        if devices is None:
            continue
        _encode_family(family, devices, wire)
    return wire


def _warn(warnings: List[DecodeWarning], key: str, value: Any, reason: str) -> None:
    logger.debug("Skipping config key %s=%r: %s", key, value, reason)
    warnings.append(DecodeWarning(key, value, reason))


def from_wire_map(data: Mapping[str, Any]) -> DecodeResult:
    """Decode an API configuration object.

    Unknown keys and null values are ignored; unparsable values leave their
    field unset and are reported in ``DecodeResult.warnings``.
    """
    result = DecodeResult(config=VMConfig())
    for key, value in data.items():
        if value is None:
            # JSON null means unset
            logger.debug("Ignoring null config key %s", key)
            continue
        option = _FIELDS_BY_KEY.get(key)
        if option is not None:
            try:
                setattr(result.config, option.attr, option.decode(value))
            except (TypeError, ValueError) as exc:
                _warn(result.warnings, key, value, str(exc))
            continue

        match = _FAMILY_KEY_RE.match(key)
        family = _FAMILIES_BY_PREFIX.get(match.group(1)) if match else None
        if family is None:
            logger.debug("Ignoring unmapped config key %s", key)
            continue
        index = int(match.group(2))
        if index >= family.slots:
            _warn(result.warnings, key, value, f"slot must be 0 to {family.slots - 1}")
            continue
        device = family.device.from_wire(str(value), result.warnings, key)
        result.config.add_device(family.prefix, index, device)
    return result
