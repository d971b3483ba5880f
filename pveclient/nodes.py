from __future__ import annotations

from typing import TYPE_CHECKING, List

from pveclient.models import Node

if TYPE_CHECKING:
    from pveclient.client import Client


class NodesService:
    def __init__(self, client: "Client") -> None:
        self.client = client

    def get_nodes(self) -> List[Node]:
        items = self.client.get("nodes") or []
        return [Node.model_validate(item) for item in items if isinstance(item, dict)]
