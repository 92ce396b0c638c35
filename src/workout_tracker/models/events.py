"""Change events returned from write operations.

Repositories and engines do not broadcast anything themselves. Each write
returns the affected entity together with a ``ChangeEvent`` the caller can
forward to whatever event bus drives its UI refresh.
"""

from dataclasses import dataclass, asdict
from datetime import datetime
from enum import Enum
from typing import Any, NamedTuple


class ChangeKind(str, Enum):
    """Kinds of persisted changes."""
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"


@dataclass(frozen=True)
class ChangeEvent:
    """A persisted change to one entity."""
    kind: ChangeKind
    entity_type: str
    entity_id: str
    occurred_at: datetime

    def to_dict(self) -> dict:
        d = asdict(self)
        d["kind"] = self.kind.value
        d["occurred_at"] = self.occurred_at.isoformat()
        return d


class Change(NamedTuple):
    """Result of a write: the entity as persisted plus its change event."""
    entity: Any
    event: ChangeEvent
