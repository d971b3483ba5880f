from __future__ import annotations

import pytest

from pveclient.enums import (
    Bios,
    BootDevice,
    CPUType,
    DriveCache,
    HugePages,
    KeyboardLayout,
    Lock,
    MediaType,
    NetworkCardModel,
    OSType,
    SCSIControllerType,
    VGAType,
    VolumeFormat,
)

ALL_ENUMS = [
    Bios,
    BootDevice,
    CPUType,
    DriveCache,
    HugePages,
    KeyboardLayout,
    Lock,
    MediaType,
    NetworkCardModel,
    OSType,
    SCSIControllerType,
    VGAType,
    VolumeFormat,
]


@pytest.mark.parametrize("enum_cls", ALL_ENUMS)
def test_every_member_maps_back_to_itself(enum_cls):
    wires = [member.wire for member in enum_cls]
    assert len(set(wires)) == len(wires)
    for member in enum_cls:
        assert enum_cls.from_wire(member.wire) is member


def test_known_wire_strings():
    assert OSType.from_wire("l26") is OSType.LINUX_26
    assert OSType.from_wire("win10") is OSType.WINDOWS_10_2016
    assert CPUType.from_wire("Skylake-Client") is CPUType.SKYLAKE_CLIENT
    assert CPUType.I486.wire == "486"
    assert str(SCSIControllerType.VIRTIO_SCSI_SINGLE) == "virtio-scsi-single"


def test_unknown_value_is_rejected_with_enum_name():
    with pytest.raises(ValueError) as exc:
        OSType.from_wire("beos")
    assert "OSType" in str(exc.value)


def test_lookup_uses_own_table_only():
    # "c" is a boot device letter and must not resolve anywhere else.
    assert BootDevice.from_wire("c") is BootDevice.HARD_DISK
    with pytest.raises(ValueError):
        OSType.from_wire("c")
    with pytest.raises(ValueError):
        Bios.from_wire("n")


def test_lookup_is_case_sensitive():
    with pytest.raises(ValueError):
        CPUType.from_wire("HOST")
