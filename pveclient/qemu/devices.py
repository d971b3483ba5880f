"""Codecs for the ``key=value,...`` strings behind indexed device slots.

Each descriptor encodes to one comma-joined string. The first token is
positional and carries the device identity (``virtio=AA:BB:CC:DD:EE:FF`` for
a NIC, the volume reference for a drive); every other token is
``key=value``. Decoding takes the first bare or unrecognised token as the
identity wherever it appears. Other unknown keys are skipped so that options
added by newer backends do not break reading older configurations.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, FrozenSet, List, Optional, Tuple, Type, TypeVar

from pveclient.enums import DriveCache, MediaType, NetworkCardModel, VolumeFormat, WireEnum
from pveclient.errors import ArgError, DecodeWarning
from pveclient.qemu.wire import bool_to_wire, format_number, parse_bool, parse_float, parse_int

D = TypeVar("D", bound="Device")

_MAC_RE = re.compile(r"^[0-9A-Fa-f]{2}(:[0-9A-Fa-f]{2}){5}$")
_SIZE_RE = re.compile(r"^\d+(\.\d+)?[KMGT]?$")


@dataclass(frozen=True)
class _Attr:
    key: str
    name: str
    kind: str = "str"
    enum: Optional[Type[WireEnum]] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None

    def _check_range(self, value: float, field: str) -> None:
        if self.minimum is not None and value < self.minimum:
            raise ArgError(field, f"it must be >= {format_number(self.minimum)}")
        if self.maximum is not None and value > self.maximum:
            raise ArgError(field, f"it must be <= {format_number(self.maximum)}")

    def encode(self, value: Any, field: str) -> str:
        if self.kind == "bool":
            return bool_to_wire(bool(value))
        if self.kind == "int":
            if isinstance(value, bool) or not isinstance(value, int):
                raise ArgError(field, "it must be an integer")
            self._check_range(value, field)
            return str(value)
        if self.kind == "float":
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ArgError(field, "it must be a number")
            if not math.isfinite(value):
                raise ArgError(field, "it must be a finite number")
            self._check_range(value, field)
            return format_number(value)
        if self.kind == "enum":
            try:
                return self.enum(value).value
            except ValueError as exc:
                raise ArgError(field, str(exc)) from exc
        if self.kind == "vlans":
            tags = list(value)
            if not tags:
                raise ArgError(field, "it must list at least one VLAN")
            for tag in tags:
                if isinstance(tag, bool) or not isinstance(tag, int) or not 1 <= tag <= 4094:
                    raise ArgError(field, "VLAN ids must be 1 to 4094")
            return ";".join(str(tag) for tag in tags)
        text = str(value)
        if not text:
            raise ArgError(field, "it must not be empty")
        if "," in text:
            raise ArgError(field, "it must not contain ','")
        if self.kind == "size" and not _SIZE_RE.match(text):
            raise ArgError(field, "it must look like 32G, 512M or 1024")
        return text

    def decode(self, raw: str) -> Any:
        if self.kind == "bool":
            return parse_bool(raw)
        if self.kind == "int":
            return parse_int(raw)
        if self.kind == "float":
            return parse_float(raw)
        if self.kind == "enum":
            return self.enum.from_wire(raw)
        if self.kind == "vlans":
            return [parse_int(part) for part in raw.split(";") if part.strip()]
        return raw


class Device:
    """Base for slot descriptors; subclasses are dataclasses of optionals."""

    ATTRIBUTES: ClassVar[Tuple[_Attr, ...]] = ()
    IDENTITY_KEYS: ClassVar[FrozenSet[str]] = frozenset()

    def _identity_token(self, field: str) -> str:
        raise NotImplementedError

    def _apply_identity(self, token: str, warnings: List[DecodeWarning], field: str) -> None:
        raise NotImplementedError

    def _apply_identity_key(self, key: str, raw: str, warnings: List[DecodeWarning], field: str) -> None:
        raise NotImplementedError

    def to_wire(self, field: str = "device") -> str:
        tokens = [self._identity_token(field)]
        for attr in self.ATTRIBUTES:
            value = getattr(self, attr.name)
            if value is None:
                continue
            tokens.append(f"{attr.key}={attr.encode(value, f'{field}.{attr.key}')}")
        return ",".join(tokens)

    @classmethod
    def from_wire(
        cls: Type[D],
        value: str,
        warnings: Optional[List[DecodeWarning]] = None,
        field: str = "device",
    ) -> D:
        sink: List[DecodeWarning] = warnings if warnings is not None else []
        device = cls()
        attrs: Dict[str, _Attr] = {attr.key: attr for attr in cls.ATTRIBUTES}
        identity_seen = False
        for token in str(value).split(","):
            token = token.strip()
            if not token:
                continue
            key, sep, raw = token.partition("=")
            if sep and key in attrs:
                attr = attrs[key]
                try:
                    setattr(device, attr.name, attr.decode(raw))
                except ValueError as exc:
                    sink.append(DecodeWarning(f"{field}.{key}", raw, str(exc)))
                continue
            if sep and key in cls.IDENTITY_KEYS:
                device._apply_identity_key(key, raw, sink, field)
                identity_seen = True
                continue
            # First bare or unrecognised token is the identity; later ones are skipped.
            if not identity_seen:
                device._apply_identity(token, sink, field)
                identity_seen = True
        return device


@dataclass
class NetworkDevice(Device):
    model: Optional[NetworkCardModel] = None
    macaddr: Optional[str] = None
    bridge: Optional[str] = None
    firewall: Optional[bool] = None
    link_down: Optional[bool] = None
    queues: Optional[int] = None
    rate: Optional[float] = None
    tag: Optional[int] = None
    trunks: Optional[List[int]] = None

    ATTRIBUTES: ClassVar[Tuple[_Attr, ...]] = (
        _Attr("bridge", "bridge"),
        _Attr("firewall", "firewall", "bool"),
        _Attr("link_down", "link_down", "bool"),
        _Attr("queues", "queues", "int", minimum=0, maximum=16),
        _Attr("rate", "rate", "float", minimum=0),
        _Attr("tag", "tag", "int", minimum=1, maximum=4094),
        _Attr("trunks", "trunks", "vlans"),
    )
    IDENTITY_KEYS: ClassVar[FrozenSet[str]] = frozenset({"model", "macaddr"})

    def _identity_token(self, field: str) -> str:
        if self.model is None:
            raise ArgError(f"{field}.model", "a network device needs a card model")
        try:
            model = NetworkCardModel(self.model).value
        except ValueError as exc:
            raise ArgError(f"{field}.model", str(exc)) from exc
        if self.macaddr is None:
            return model
        if not _MAC_RE.match(self.macaddr):
            raise ArgError(f"{field}.macaddr", "it must look like XX:XX:XX:XX:XX:XX")
        return f"{model}={self.macaddr}"

    def _set_model(self, raw: str, warnings: List[DecodeWarning], field: str) -> None:
        try:
            self.model = NetworkCardModel.from_wire(raw)
        except ValueError as exc:
            warnings.append(DecodeWarning(f"{field}.model", raw, str(exc)))

    def _apply_identity(self, token: str, warnings: List[DecodeWarning], field: str) -> None:
        model, sep, mac = token.partition("=")
        self._set_model(model, warnings, field)
        if sep and mac:
            self.macaddr = mac

    def _apply_identity_key(self, key: str, raw: str, warnings: List[DecodeWarning], field: str) -> None:
        if key == "model":
            self._set_model(raw, warnings, field)
        else:
            self.macaddr = raw


@dataclass
class _DriveDevice(Device):
    file: Optional[str] = None

    IDENTITY_KEYS: ClassVar[FrozenSet[str]] = frozenset({"file"})

    def _identity_token(self, field: str) -> str:
        if not self.file:
            raise ArgError(f"{field}.file", "a drive needs a volume or file reference")
        if "," in self.file:
            raise ArgError(f"{field}.file", "it must not contain ','")
        return self.file

    def _apply_identity(self, token: str, warnings: List[DecodeWarning], field: str) -> None:
        self.file = token

    def _apply_identity_key(self, key: str, raw: str, warnings: List[DecodeWarning], field: str) -> None:
        self.file = raw


_DRIVE_ATTRIBUTES = (
    _Attr("media", "media", "enum", enum=MediaType),
    _Attr("format", "format", "enum", enum=VolumeFormat),
    _Attr("size", "size", "size"),
    _Attr("cache", "cache", "enum", enum=DriveCache),
    _Attr("backup", "backup", "bool"),
    _Attr("snapshot", "snapshot", "bool"),
)


@dataclass
class IDEDevice(_DriveDevice):
    media: Optional[MediaType] = None
    format: Optional[VolumeFormat] = None
    size: Optional[str] = None
    cache: Optional[DriveCache] = None
    backup: Optional[bool] = None
    snapshot: Optional[bool] = None

    ATTRIBUTES: ClassVar[Tuple[_Attr, ...]] = _DRIVE_ATTRIBUTES


@dataclass
class SATADevice(IDEDevice):
    pass


@dataclass
class SCSIDevice(IDEDevice):
    iothread: Optional[bool] = None

    ATTRIBUTES: ClassVar[Tuple[_Attr, ...]] = _DRIVE_ATTRIBUTES + (
        _Attr("iothread", "iothread", "bool"),
    )


@dataclass
class VirtIODevice(_DriveDevice):
    format: Optional[VolumeFormat] = None
    size: Optional[str] = None
    cache: Optional[DriveCache] = None
    backup: Optional[bool] = None
    iothread: Optional[bool] = None
    snapshot: Optional[bool] = None

    ATTRIBUTES: ClassVar[Tuple[_Attr, ...]] = (
        _Attr("format", "format", "enum", enum=VolumeFormat),
        _Attr("size", "size", "size"),
        _Attr("cache", "cache", "enum", enum=DriveCache),
        _Attr("backup", "backup", "bool"),
        _Attr("iothread", "iothread", "bool"),
        _Attr("snapshot", "snapshot", "bool"),
    )


@dataclass
class RawDevice(Device):
    """Slot value passed through untouched (usb, serial, parallel, ...)."""

    value: str = ""

    def to_wire(self, field: str = "device") -> str:
        if not self.value:
            raise ArgError(field, "it must not be empty")
        return self.value

    @classmethod
    def from_wire(
        cls,
        value: str,
        warnings: Optional[List[DecodeWarning]] = None,
        field: str = "device",
    ) -> "RawDevice":
        return cls(value=str(value))


def encode_device(device: Device, field: str = "device") -> str:
    return device.to_wire(field)


def decode_device(
    cls: Type[D],
    value: str,
    warnings: Optional[List[DecodeWarning]] = None,
    field: str = "device",
) -> D:
    return cls.from_wire(value, warnings, field)
