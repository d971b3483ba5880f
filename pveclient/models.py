from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import BaseModel, Field

# The API adds fields between releases and omits unset ones; every model
# ignores unknown keys and treats everything but the identity as optional.
_LENIENT = {"extra": "ignore", "populate_by_name": True}


class Node(BaseModel):
    id: Optional[str] = None
    node: str
    type: Optional[str] = None
    status: Optional[str] = None
    cpu: Optional[float] = Field(default=None, ge=0)
    mem: Optional[int] = Field(default=None, ge=0)
    disk: Optional[int] = Field(default=None, ge=0)
    maxcpu: Optional[int] = Field(default=None, ge=0)
    maxmem: Optional[int] = Field(default=None, ge=0)
    maxdisk: Optional[int] = Field(default=None, ge=0)
    uptime: Optional[int] = Field(default=None, ge=0)
    level: Optional[str] = None

    model_config = _LENIENT


class VM(BaseModel):
    vmid: int
    name: Optional[str] = None
    status: Optional[str] = None
    pid: Optional[Union[int, str]] = None
    template: Optional[Union[int, str]] = None
    cpu: Optional[float] = None
    cpus: Optional[int] = None
    mem: Optional[int] = None
    maxmem: Optional[int] = None
    disk: Optional[int] = None
    maxdisk: Optional[int] = None
    diskread: Optional[int] = None
    diskwrite: Optional[int] = None
    netin: Optional[int] = None
    netout: Optional[int] = None
    uptime: Optional[int] = None

    model_config = _LENIENT


class VMStatus(BaseModel):
    name: Optional[str] = None
    status: Optional[str] = None
    qmpstatus: Optional[str] = None
    template: Optional[Union[int, str]] = None
    pid: Optional[Union[int, str]] = None
    cpu: Optional[float] = None
    cpus: Optional[int] = None
    mem: Optional[int] = None
    maxmem: Optional[int] = None
    disk: Optional[int] = None
    maxdisk: Optional[int] = None
    diskread: Optional[int] = None
    diskwrite: Optional[int] = None
    netin: Optional[int] = None
    netout: Optional[int] = None
    uptime: Optional[int] = None
    ha: Optional[Any] = None

    model_config = _LENIENT


class Storage(BaseModel):
    storage: str
    content: Optional[str] = None
    type: Optional[str] = None
    active: Optional[int] = None
    enabled: Optional[int] = None
    shared: Optional[int] = None
    used: Optional[int] = None
    avail: Optional[int] = None
    total: Optional[int] = None

    model_config = _LENIENT


class StorageVolume(BaseModel):
    volid: Optional[str] = None
    format: Optional[str] = None
    parent: Optional[Any] = None
    size: Optional[int] = None
    content: Optional[str] = None
    used: Optional[int] = None
    vmid: Optional[Union[int, str]] = None
    path: Optional[str] = None

    model_config = _LENIENT
