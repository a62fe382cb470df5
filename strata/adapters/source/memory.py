"""In-memory source adapter.

Implements SourcePort with plain dictionaries. Records live as long as
the source instance; nothing is written to disk.
"""

import copy
import logging
from typing import TYPE_CHECKING, Any

from strata.core.errors import SourceError
from strata.core.ports import SourcePort
from strata.core.query import Query

if TYPE_CHECKING:
    from strata.core.model import Model

logger = logging.getLogger(__name__)


class MemorySource(SourcePort):
    """Dictionary-backed source.

    Rows are kept in insertion order per source name. Generated keys are
    integers following the highest integer key seen so far.
    """

    features = {
        "relationships": True,
        "booleans": True,
        "arrays": True,
        "transactions": False,
    }

    def __init__(self) -> None:
        self.records: dict[str, dict[Any, dict[str, Any]]] = {}
        self._sequences: dict[str, int] = {}
        self._connected = False

    async def connect(self) -> None:
        self._connected = True

    async def disconnect(self) -> None:
        self._connected = False

    async def is_connected(self, auto_connect: bool = False) -> bool:
        if not self._connected and auto_connect:
            await self.connect()
        return self._connected

    async def prepare(self, model: "type[Model]") -> None:
        self.records.setdefault(model.meta("source"), {})

    def _table(self, query: Query) -> dict[Any, dict[str, Any]]:
        return self.records.setdefault(query.source, {})

    def _next_key(self, source: str) -> int:
        self._sequences[source] = self._sequences.get(source, 0) + 1
        return self._sequences[source]

    def _track_key(self, source: str, key: Any) -> None:
        if isinstance(key, int) and key > self._sequences.get(source, 0):
            self._sequences[source] = key

    def _select(self, query: Query) -> list[dict[str, Any]]:
        rows = [row for row in self._table(query).values() if query.matches(row)]
        for name, direction in reversed(query.order):
            rows.sort(
                key=lambda row: (row.get(name) is not None, row.get(name)),
                reverse=direction == "DESC",
            )
        return rows

    async def create(self, query: Query, data: dict[str, Any]) -> Any:
        table = self._table(query)
        row = copy.deepcopy(data)
        key = row.get(query.key)
        if key is None:
            if not query.generates_key:
                raise SourceError(
                    f"Missing {query.key} for {query.source}: keys of this type are not generated",
                    source="memory",
                )
            key = self._next_key(query.source)
            row[query.key] = key
        elif key in table:
            raise SourceError(
                f"Duplicate key {key!r} in {query.source}", source="memory"
            )
        else:
            self._track_key(query.source, key)
        table[key] = row
        logger.debug(f"Inserted {query.source} {key}")
        return key

    async def read(self, query: Query) -> list[dict[str, Any]]:
        rows = query.page(self._select(query))
        return [query.project(copy.deepcopy(row)) for row in rows]

    async def count(self, query: Query) -> int:
        return len(self._select(query))

    async def update(self, query: Query, data: dict[str, Any]) -> int:
        rows = self._select(query)
        for row in rows:
            row.update(copy.deepcopy(data))
        return len(rows)

    async def delete(self, query: Query) -> int:
        table = self._table(query)
        rows = self._select(query)
        for row in rows:
            del table[row[query.key]]
        logger.debug(f"Deleted {len(rows)} row(s) from {query.source}")
        return len(rows)

    def reset(self) -> None:
        """Drop every stored record and key sequence."""
        self.records.clear()
        self._sequences.clear()


__all__ = ["MemorySource"]
