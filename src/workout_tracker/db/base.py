"""Base persistence interface.

The repositories and engines only talk to storage through ``WorkoutStore``.
Workouts and templates are stored as aggregates: writing one writes its whole
child graph (exercises-in-workout, sets, template exercises).
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Any, Callable, List, Optional, Type, TypeVar, Union

from ..models.entities import Exercise, Workout, WorkoutTemplate

Entity = Union[Exercise, Workout, WorkoutTemplate]

# Type variable for the entity type being queried
T = TypeVar("T", Exercise, Workout, WorkoutTemplate)


class WorkoutStore(ABC):
    """
    Abstract base class for workout data storage.

    Implementations must wrap backend failures in ``StorageError`` and make
    every write atomic. Writes are serialized per store; reads may run
    concurrently.
    """

    @abstractmethod
    def insert(self, entity: Entity) -> Entity:
        """
        Insert a new entity (and, for aggregates, all of its children).

        Args:
            entity: The entity to insert

        Returns:
            The inserted entity
        """
        pass

    @abstractmethod
    def update(self, entity: Entity) -> Entity:
        """
        Persist the current state of an existing entity.

        For aggregates the stored child graph is replaced by the entity's
        current children.

        Args:
            entity: The entity to update

        Returns:
            The updated entity
        """
        pass

    @abstractmethod
    def delete(self, entity: Entity) -> bool:
        """
        Delete an entity. Aggregates take their children with them.

        Args:
            entity: The entity to delete

        Returns:
            True if the entity was deleted, False if it was not stored
        """
        pass

    @abstractmethod
    def get(self, entity_type: Type[T], entity_id: str) -> Optional[T]:
        """
        Retrieve an entity by its ID.

        Args:
            entity_type: Exercise, Workout or WorkoutTemplate
            entity_id: The unique identifier of the entity

        Returns:
            The entity if found, None otherwise
        """
        pass

    @abstractmethod
    def query(
        self,
        entity_type: Type[T],
        predicate: Optional[Callable[[T], bool]] = None,
        sort_key: Optional[Callable[[T], Any]] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[T]:
        """
        Retrieve entities matching a predicate.

        Args:
            entity_type: Exercise, Workout or WorkoutTemplate
            predicate: Keep only entities for which this returns True
            sort_key: Sort by this key if given
            descending: Reverse the sort order
            limit: Maximum number of entities to return, applied after sorting

        Returns:
            List of matching entities
        """
        pass

    @abstractmethod
    def count_references(self, exercise: Exercise) -> int:
        """Count workout and template entries that reference an exercise."""
        pass

    @abstractmethod
    def delete_references(self, exercise: Exercise) -> int:
        """Delete every workout and template entry referencing an exercise.

        Returns:
            Number of entries removed
        """
        pass

    @abstractmethod
    def transaction(self) -> AbstractContextManager:
        """
        Context manager grouping writes into one atomic unit.

        Either every write inside the block is committed or none is. Nested
        blocks join the outermost transaction.
        """
        pass
