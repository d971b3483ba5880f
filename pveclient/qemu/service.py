from __future__ import annotations

import dataclasses
import logging
from typing import TYPE_CHECKING, Any, List, Optional

from pveclient.models import VM, VMStatus
from pveclient.qemu.config import DecodeResult, VMConfig, from_wire_map, to_wire_map

if TYPE_CHECKING:
    from pveclient.client import Client

logger = logging.getLogger(__name__)


class QemuService:
    """QEMU virtual machines of a node.

    Lifecycle calls return the task id (UPID) the backend hands back.
    """

    def __init__(self, client: "Client") -> None:
        self.client = client

    def get_vms(self, node: str) -> List[VM]:
        items = self.client.get(f"nodes/{node}/qemu") or []
        return [VM.model_validate(item) for item in items if isinstance(item, dict)]

    def get_vm_current_status(self, node: str, vmid: int) -> VMStatus:
        payload = self.client.get(f"nodes/{node}/qemu/{vmid}/status/current") or {}
        return VMStatus.model_validate(payload)

    def _status_action(self, node: str, vmid: int, action: str) -> Any:
        logger.debug("VM %s on %s: %s", vmid, node, action)
        return self.client.post(f"nodes/{node}/qemu/{vmid}/status/{action}")

    def start_vm(self, node: str, vmid: int) -> Any:
        return self._status_action(node, vmid, "start")

    def stop_vm(self, node: str, vmid: int) -> Any:
        """Kill the qemu process immediately, like pulling the plug."""
        return self._status_action(node, vmid, "stop")

    def shutdown_vm(self, node: str, vmid: int) -> Any:
        """Send an ACPI shutdown to the guest."""
        return self._status_action(node, vmid, "shutdown")

    def reset_vm(self, node: str, vmid: int) -> Any:
        return self._status_action(node, vmid, "reset")

    def suspend_vm(self, node: str, vmid: int) -> Any:
        return self._status_action(node, vmid, "suspend")

    def resume_vm(self, node: str, vmid: int) -> Any:
        return self._status_action(node, vmid, "resume")

    def create_vm(self, node: str, vmid: int, config: Optional[VMConfig] = None) -> Any:
        params = to_wire_map(dataclasses.replace(config or VMConfig(), vmid=vmid))
        return self.client.post(f"nodes/{node}/qemu", data=params)

    def delete_vm(self, node: str, vmid: int) -> Any:
        return self.client.delete(f"nodes/{node}/qemu/{vmid}")

    def get_vm_config(self, node: str, vmid: int) -> DecodeResult:
        payload = self.client.get(f"nodes/{node}/qemu/{vmid}/config") or {}
        result = from_wire_map(payload)
        if result.warnings:
            logger.debug("VM %s config decoded with %d warnings", vmid, len(result.warnings))
        return result

    def update_vm_config(self, node: str, vmid: int, config: VMConfig) -> Any:
        # vmid travels in the path; the config endpoint rejects it in the body
        params = to_wire_map(dataclasses.replace(config, vmid=None))
        return self.client.put(f"nodes/{node}/qemu/{vmid}/config", data=params)
