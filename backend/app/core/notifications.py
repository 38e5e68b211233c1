"""
Notifications collected during an operation and returned with the response.
"""
from dataclasses import dataclass, field
from typing import List

INFO = "info"


@dataclass
class Notification:
    kind: str  # An ErrorKind value, or "info"
    operation: str
    message: str

    def as_dict(self) -> dict:
        return {"kind": self.kind, "operation": self.operation, "message": self.message}


@dataclass
class Notifier:
    """Collects user-visible notifications, one per operation outcome."""
    items: List[Notification] = field(default_factory=list)

    def notify(self, kind, operation: str, message: str) -> None:
        kind = getattr(kind, "value", kind)
        self.items.append(Notification(kind=kind, operation=operation, message=message))

    def drain(self) -> List[Notification]:
        drained, self.items = self.items, []
        return drained
