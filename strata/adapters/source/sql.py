"""SQL statement building shared by the relational source adapters.

Only identifiers validated against a strict pattern are interpolated
into statements; all values are passed as bound parameters.
"""

import re
from typing import Any

from strata.core.models import FieldType
from strata.core.query import Query

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def quote(name: str) -> str:
    """Quote an identifier.

    Raises:
        ValueError: If the name is not a plain identifier.
    """
    if not _IDENTIFIER.match(name):
        raise ValueError(f"Invalid identifier: {name!r}")
    return f'"{name}"'


class SqlDialect:
    """Statement builder for one SQL flavour.

    Args:
        types: Column type per field type.
        key_column: Column definition of a generated primary key.
        numbered: Use ``$1, $2`` placeholders instead of ``?``.
        returning: Append ``RETURNING key`` to inserts.
    """

    def __init__(
        self,
        types: dict[FieldType, str],
        key_column: str,
        numbered: bool = False,
        returning: bool = False,
    ):
        self.types = types
        self.key_column = key_column
        self.numbered = numbered
        self.returning = returning

    def _placeholder(self, params: list[Any]) -> str:
        return f"${len(params)}" if self.numbered else "?"

    def create_table(self, query: Query) -> str:
        columns = []
        for name, field_type in query.schema.items():
            if name == query.key:
                if query.generates_key:
                    columns.append(f"{quote(name)} {self.key_column}")
                else:
                    columns.append(
                        f"{quote(name)} {self.types[field_type]} NOT NULL PRIMARY KEY"
                    )
            else:
                columns.append(f"{quote(name)} {self.types[field_type]}")
        return (
            f"CREATE TABLE IF NOT EXISTS {quote(query.source)} "
            f"({', '.join(columns)})"
        )

    def where(self, query: Query, params: list[Any]) -> str:
        clauses = []
        for name, value in query.conditions.items():
            column = quote(name)
            if value is None:
                clauses.append(f"{column} IS NULL")
            elif isinstance(value, (list, tuple, set, frozenset)):
                if not value:
                    clauses.append("1 = 0")
                    continue
                marks = []
                for item in value:
                    params.append(item)
                    marks.append(self._placeholder(params))
                clauses.append(f"{column} IN ({', '.join(marks)})")
            else:
                params.append(value)
                clauses.append(f"{column} = {self._placeholder(params)}")
        return f" WHERE {' AND '.join(clauses)}" if clauses else ""

    def select(self, query: Query) -> tuple[str, list[Any]]:
        params: list[Any] = []
        columns = ", ".join(quote(name) for name in query.fields) if query.fields else "*"
        sql = f"SELECT {columns} FROM {quote(query.source)}"
        sql += self.where(query, params)
        order = query.order or ((query.key, "ASC"),)
        sql += " ORDER BY " + ", ".join(f"{quote(name)} {direction}" for name, direction in order)
        if query.limit is not None:
            params.append(query.limit)
            sql += f" LIMIT {self._placeholder(params)}"
        if query.offset:
            if query.limit is None:
                sql += " LIMIT -1" if not self.numbered else " LIMIT ALL"
            params.append(query.offset)
            sql += f" OFFSET {self._placeholder(params)}"
        return sql, params

    def count(self, query: Query) -> tuple[str, list[Any]]:
        params: list[Any] = []
        sql = f"SELECT COUNT(*) FROM {quote(query.source)}" + self.where(query, params)
        return sql, params

    def insert(self, query: Query, data: dict[str, Any]) -> tuple[str, list[Any]]:
        params: list[Any] = []
        marks = []
        for value in data.values():
            params.append(value)
            marks.append(self._placeholder(params))
        table = quote(query.source)
        if data:
            columns = ", ".join(quote(name) for name in data)
            sql = f"INSERT INTO {table} ({columns}) VALUES ({', '.join(marks)})"
        else:
            sql = f"INSERT INTO {table} DEFAULT VALUES"
        if self.returning:
            sql += f" RETURNING {quote(query.key)}"
        return sql, params

    def update(self, query: Query, data: dict[str, Any]) -> tuple[str, list[Any]]:
        params: list[Any] = []
        assignments = []
        for name, value in data.items():
            params.append(value)
            assignments.append(f"{quote(name)} = {self._placeholder(params)}")
        sql = f"UPDATE {quote(query.source)} SET {', '.join(assignments)}"
        return sql + self.where(query, params), params

    def delete(self, query: Query) -> tuple[str, list[Any]]:
        params: list[Any] = []
        sql = f"DELETE FROM {quote(query.source)}" + self.where(query, params)
        return sql, params


SQLITE = SqlDialect(
    types={
        FieldType.ID: "INTEGER",
        FieldType.STRING: "TEXT",
        FieldType.TEXT: "TEXT",
        FieldType.INTEGER: "INTEGER",
        FieldType.FLOAT: "REAL",
        FieldType.BOOLEAN: "INTEGER",
        FieldType.DATETIME: "TIMESTAMP",
    },
    key_column="INTEGER PRIMARY KEY AUTOINCREMENT",
)

POSTGRESQL = SqlDialect(
    types={
        FieldType.ID: "BIGINT",
        FieldType.STRING: "VARCHAR(255)",
        FieldType.TEXT: "TEXT",
        FieldType.INTEGER: "BIGINT",
        FieldType.FLOAT: "DOUBLE PRECISION",
        FieldType.BOOLEAN: "BOOLEAN",
        FieldType.DATETIME: "TIMESTAMP",
    },
    key_column="BIGINT GENERATED BY DEFAULT AS IDENTITY PRIMARY KEY",
    numbered=True,
    returning=True,
)


__all__ = ["POSTGRESQL", "SQLITE", "SqlDialect", "quote"]
