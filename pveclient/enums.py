from __future__ import annotations

from enum import Enum
from typing import Type, TypeVar

E = TypeVar("E", bound="WireEnum")


class WireEnum(str, Enum):
    """Closed set of values with exactly one wire string per member."""

    @property
    def wire(self) -> str:
        return self.value

    @classmethod
    def from_wire(cls: Type[E], value: str) -> E:
        # Lookup goes through this class's own value table only.
        for member in cls:
            if member.value == value:
                return member
        raise ValueError(f"{value!r} does not belong to {cls.__name__} values")

    def __str__(self) -> str:
        return self.value


class Bios(WireEnum):
    SEABIOS = "seabios"
    OVMF = "ovmf"


class BootDevice(WireEnum):
    FLOPPY = "a"
    HARD_DISK = "c"
    CDROM = "d"
    NETWORK = "n"


class CPUType(WireEnum):
    I486 = "486"
    BROADWELL = "Broadwell"
    BROADWELL_NO_TSX = "Broadwell-noTSX"
    CONROE = "Conroe"
    HASWELL = "Haswell"
    HASWELL_NO_TSX = "Haswell-noTSX"
    IVY_BRIDGE = "IvyBridge"
    NEHALEM = "Nehalem"
    OPTERON_G1 = "Opteron_G1"
    OPTERON_G2 = "Opteron_G2"
    OPTERON_G3 = "Opteron_G3"
    OPTERON_G4 = "Opteron_G4"
    OPTERON_G5 = "Opteron_G5"
    PENRYN = "Penryn"
    SANDY_BRIDGE = "SandyBridge"
    SKYLAKE_CLIENT = "Skylake-Client"
    WESTMERE = "Westmere"
    ATHLON = "athlon"
    CORE2DUO = "core2duo"
    COREDUO = "coreduo"
    HOST = "host"
    KVM32 = "kvm32"
    KVM64 = "kvm64"
    PENTIUM = "pentium"
    PENTIUM2 = "pentium2"
    PENTIUM3 = "pentium3"
    PHENOM = "phenom"
    QEMU32 = "qemu32"
    QEMU64 = "qemu64"


class HugePages(WireEnum):
    SIZE_1024 = "1024"
    SIZE_2 = "2"
    ANY = "any"


class KeyboardLayout(WireEnum):
    DA = "da"
    DE = "de"
    DE_CH = "de-ch"
    EN_GB = "en-gb"
    EN_US = "en-us"
    ES = "es"
    FI = "fi"
    FR = "fr"
    FR_BE = "fr-be"
    FR_CA = "fr-ca"
    FR_CH = "fr-ch"
    HU = "hu"
    IS = "is"
    IT = "it"
    JA = "ja"
    LT = "lt"
    MK = "mk"
    NL = "nl"
    NO = "no"
    PL = "pl"
    PT = "pt"
    PT_BR = "pt-br"
    SL = "sl"
    SV = "sv"
    TR = "tr"


class Lock(WireEnum):
    MIGRATE = "migrate"
    BACKUP = "backup"
    SNAPSHOT = "snapshot"
    ROLLBACK = "rollback"


class OSType(WireEnum):
    OTHER = "other"
    WINDOWS_XP = "wxp"
    WINDOWS_2000 = "w2k"
    WINDOWS_2003 = "w2k3"
    WINDOWS_2008 = "w2k8"
    WINDOWS_VISTA = "wvista"
    WINDOWS_7 = "win7"
    WINDOWS_8_2012 = "win8"
    WINDOWS_10_2016 = "win10"
    LINUX_24 = "l24"
    LINUX_26 = "l26"
    SOLARIS = "solaris"


class SCSIControllerType(WireEnum):
    LSI = "lsi"
    LSI53C810 = "lsi53c810"
    VIRTIO_SCSI_PCI = "virtio-scsi-pci"
    VIRTIO_SCSI_SINGLE = "virtio-scsi-single"
    MEGASAS = "megasas"
    PVSCSI = "pvscsi"


class VGAType(WireEnum):
    CIRRUS = "cirrus"
    QXL = "qxl"
    QXL2 = "qxl2"
    QXL3 = "qxl3"
    QXL4 = "qxl4"
    SERIAL0 = "serial0"
    SERIAL1 = "serial1"
    SERIAL2 = "serial2"
    SERIAL3 = "serial3"
    STD = "std"
    VMWARE = "vmware"


class NetworkCardModel(WireEnum):
    E1000 = "e1000"
    E1000_82540EM = "e1000-82540em"
    E1000_82544GC = "e1000-82544gc"
    E1000_82545EM = "e1000-82545em"
    I82551 = "i82551"
    I82557B = "i82557b"
    I82559ER = "i82559er"
    NE2K_ISA = "ne2k_isa"
    NE2K_PCI = "ne2k_pci"
    PCNET = "pcnet"
    RTL8139 = "rtl8139"
    VIRTIO = "virtio"
    VMXNET3 = "vmxnet3"


class MediaType(WireEnum):
    CDROM = "cdrom"
    DISK = "disk"


class VolumeFormat(WireEnum):
    RAW = "raw"
    CLOOP = "cloop"
    COW = "cow"
    QCOW = "qcow"
    QCOW2 = "qcow2"
    QED = "qed"
    VMDK = "vmdk"


class DriveCache(WireEnum):
    NONE = "none"
    WRITETHROUGH = "writethrough"
    WRITEBACK = "writeback"
    UNSAFE = "unsafe"
    DIRECTSYNC = "directsync"
