"""Base repository for workout tracker entities.

Repositories own validation, timestamps and change events for one entity
type. Storage itself is delegated to a ``WorkoutStore``.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Generic, List, Optional, Type

from ...clock import Clock, SystemClock
from ...config import UserPreferences
from ...exceptions import NotFoundError
from ...models.events import Change, ChangeEvent, ChangeKind
from ..base import T, WorkoutStore


class Repository(ABC, Generic[T]):
    """
    Abstract base class for entity repositories.

    Type Parameters:
        T: The type of entity managed by this repository
    """

    entity_type: Type[T]
    not_found_error: Type[NotFoundError]

    def __init__(
        self,
        store: WorkoutStore,
        clock: Optional[Clock] = None,
        preferences: Optional[UserPreferences] = None,
    ):
        self.store = store
        self.clock = clock or SystemClock()
        self.preferences = preferences or UserPreferences()

    def _change(self, kind: ChangeKind, entity) -> Change:
        event = ChangeEvent(
            kind=kind,
            entity_type=type(entity).__name__,
            entity_id=entity.id,
            occurred_at=self.clock.now(),
        )
        return Change(entity, event)

    @contextmanager
    def _unchanged_on_failure(self, *objects):
        """Restore the attributes of ``objects`` if the enclosed write fails."""
        saved = [
            (obj, {k: list(v) if isinstance(v, list) else v for k, v in vars(obj).items()})
            for obj in objects
        ]
        try:
            yield
        except Exception:
            for obj, state in saved:
                vars(obj).update(state)
            raise

    def get(self, entity_id: str) -> Optional[T]:
        """
        Retrieve an entity by its ID.

        Args:
            entity_id: The unique identifier of the entity

        Returns:
            The entity if found, None otherwise
        """
        return self.store.get(self.entity_type, entity_id)

    def get_or_raise(self, entity_id: str) -> T:
        """Retrieve an entity by its ID, raising the matching NotFoundError."""
        entity = self.get(entity_id)
        if entity is None:
            raise self.not_found_error(entity_id)
        return entity

    def count(self) -> int:
        return len(self.store.query(self.entity_type))

    @abstractmethod
    def fetch_all(self) -> List[T]:
        """Retrieve every entity in this repository's natural order."""
        pass

    @abstractmethod
    def delete(self, entity: T) -> Change:
        """Delete an entity and return the DELETED change."""
        pass
