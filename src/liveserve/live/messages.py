"""Messages pushed to browser clients."""

import json
from dataclasses import dataclass

from liveserve.strategy import BroadcastAction


@dataclass(frozen=True)
class BroadcastMessage:
    """A reload notification, serialized identically for every recipient."""

    action: BroadcastAction
    file_name: str = ""
    dom: str | None = None

    @classmethod
    def connected(cls) -> "BroadcastMessage":
        return cls(action="connected")

    def to_dict(self) -> dict[str, object]:
        if self.action == "connected":
            return {"action": "connected"}
        data: dict[str, str] = {}
        if self.dom is not None:
            data["dom"] = self.dom
        data["fileName"] = self.file_name
        return {"data": data, "action": self.action}

    def to_json(self) -> str:
        return json.dumps(self.to_dict())
