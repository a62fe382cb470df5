"""Port interface between the model layer and storage backends.

The model layer only talks to a SourcePort. Implementations live in the
adapters/source package and are handed out by the connection registry.

Sources work on plain dictionaries: models build a Query, the source
reads or writes rows, and the model layer turns rows back into entities.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar

from .query import Query

if TYPE_CHECKING:
    from .model import Model


class SourcePort(ABC):
    """Port for persisting and querying model records in a backend.

    Implementations must handle:
    - Lazy connection on first use
    - Generating a key when the caller does not provide one
    - Returning rows in primary key order unless the query says otherwise
    """

    features: ClassVar[dict[str, bool]] = {
        "relationships": False,
        "booleans": True,
        "arrays": False,
        "transactions": False,
    }

    @classmethod
    def enabled(cls, feature: str) -> bool:
        """Return True if this source supports ``feature``.

        Unknown features are reported as unsupported.
        """
        return cls.features.get(feature, False)

    @abstractmethod
    async def connect(self) -> None:
        """Open the connection to the backend.

        Raises:
            SourceError: If the backend is unreachable.
        """

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the connection. Safe to call when not connected."""

    @abstractmethod
    async def is_connected(self, auto_connect: bool = False) -> bool:
        """Report connection state.

        Args:
            auto_connect: Try to connect first if not connected yet.

        Returns:
            True if the backend can be used. Never raises.
        """

    @abstractmethod
    async def prepare(self, model: "type[Model]") -> None:
        """Create storage (table, collection) for ``model`` if missing.

        Raises:
            SourceError: If the storage cannot be created.
        """

    @abstractmethod
    async def create(self, query: Query, data: dict[str, Any]) -> Any:
        """Insert one record.

        Args:
            query: Identifies the source, key and schema.
            data: Field values. The key is generated when absent.

        Returns:
            The key of the new record.

        Raises:
            SourceError: If a record with the same key exists or the
                backend fails.
        """

    @abstractmethod
    async def read(self, query: Query) -> list[dict[str, Any]]:
        """Return the rows matching ``query``.

        Rows contain raw backend values; casting is done by the caller.
        """

    @abstractmethod
    async def count(self, query: Query) -> int:
        """Return the number of rows matching ``query`` conditions."""

    @abstractmethod
    async def update(self, query: Query, data: dict[str, Any]) -> int:
        """Update rows matching ``query`` conditions.

        Returns:
            Number of rows updated.
        """

    @abstractmethod
    async def delete(self, query: Query) -> int:
        """Delete rows matching ``query`` conditions.

        Returns:
            Number of rows deleted.
        """


__all__ = ["SourcePort"]
