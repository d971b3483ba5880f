from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Optional
from urllib.parse import quote

from pveclient.enums import VolumeFormat
from pveclient.errors import ArgError
from pveclient.models import Storage, StorageVolume

if TYPE_CHECKING:
    from pveclient.client import Client


class StorageService:
    def __init__(self, client: "Client") -> None:
        self.client = client

    @staticmethod
    def _content_path(node: str, storage: str, volume_id: Optional[str] = None) -> str:
        path = f"nodes/{node}/storage/{storage}/content"
        if volume_id:
            # volume ids look like local-lvm:vm-100-disk-0
            path = f"{path}/{quote(volume_id, safe='')}"
        return path

    def get_storage_list(self, node: str) -> List[Storage]:
        items = self.client.get(f"nodes/{node}/storage") or []
        return [Storage.model_validate(item) for item in items if isinstance(item, dict)]

    def get_storage_volumes(self, node: str, storage: str) -> List[StorageVolume]:
        items = self.client.get(self._content_path(node, storage)) or []
        return [StorageVolume.model_validate(item) for item in items if isinstance(item, dict)]

    def get_volume(self, node: str, storage: str, volume_id: str) -> StorageVolume:
        payload = self.client.get(self._content_path(node, storage, volume_id)) or {}
        return StorageVolume.model_validate(payload)

    def create_volume(
        self,
        node: str,
        storage: str,
        vmid: int,
        filename: str,
        size: str,
        fmt: Optional[VolumeFormat] = None,
    ) -> Any:
        if vmid < 100:
            raise ArgError("vmid", "it should be >= 100. IDs < 100 are reserved for internal purposes.")
        if not filename:
            raise ArgError("filename", "it must not be empty")
        params = {"filename": filename, "size": size, "vmid": str(vmid)}
        if fmt is not None:
            params["format"] = VolumeFormat(fmt).value
        return self.client.post(self._content_path(node, storage), data=params)

    def delete_volume(self, node: str, storage: str, volume_id: str) -> Any:
        return self.client.delete(self._content_path(node, storage, volume_id))
