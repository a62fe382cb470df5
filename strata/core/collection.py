"""Ordered result sets returned by model queries."""

from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING, Any

from .entity import Entity

if TYPE_CHECKING:
    from .model import Model


class RecordSet:
    """Read-only, ordered collection of entities.

    Offset access past the end returns None instead of raising, so
    ``records[2]`` on a two-record set is simply None. Slicing returns
    a new RecordSet.

    A cursor supports ``rewind()``/``current()``/``next()`` for callers
    that walk the set step by step; plain iteration does not move it.
    """

    def __init__(self, model: "type[Model]", entities: list[Entity] | None = None):
        self._model = model
        self._entities = list(entities or [])
        self._position = 0

    def __len__(self) -> int:
        return len(self._entities)

    def __iter__(self) -> Iterator[Entity]:
        return iter(self._entities)

    def __bool__(self) -> bool:
        return bool(self._entities)

    def __getitem__(self, offset: int | slice) -> "Entity | RecordSet | None":
        if isinstance(offset, slice):
            return RecordSet(self._model, self._entities[offset])
        if -len(self._entities) <= offset < len(self._entities):
            return self._entities[offset]
        return None

    def __repr__(self) -> str:
        return f"<RecordSet {self._model.__name__} x{len(self._entities)}>"

    def model(self) -> "type[Model]":
        return self._model

    def count(self) -> int:
        return len(self._entities)

    def first(self, predicate: Callable[[Entity], bool] | None = None) -> Entity | None:
        """Return the first entity, or the first one matching ``predicate``."""
        for entity in self._entities:
            if predicate is None or predicate(entity):
                return entity
        return None

    def data(self) -> list[dict[str, Any]]:
        return [entity.data() for entity in self._entities]

    def keys(self) -> list[Any]:
        return [entity.key() for entity in self._entities]

    def rewind(self) -> Entity | None:
        """Move the cursor to the start and return the first entity."""
        self._position = 0
        return self.current()

    def current(self) -> Entity | None:
        return self[self._position] if self._position < len(self._entities) else None

    def next(self) -> Entity | None:
        """Advance the cursor and return the entity under it, or None at the end."""
        if self._position < len(self._entities):
            self._position += 1
        return self.current()


__all__ = ["RecordSet"]
