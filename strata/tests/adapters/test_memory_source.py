"""Tests for the in-memory source adapter."""

import pytest

from strata.adapters.source.memory import MemorySource
from strata.core.errors import SourceError
from strata.core.models import FieldType
from strata.core.query import Query


@pytest.fixture
def source() -> MemorySource:
    return MemorySource()


def _query(**kwargs) -> Query:
    return Query(source="notes", **kwargs)


@pytest.mark.asyncio
async def test_generated_keys_are_sequential(source: MemorySource) -> None:
    assert await source.create(_query(), {"text": "a"}) == 1
    assert await source.create(_query(), {"text": "b"}) == 2
    assert await source.create(Query(source="other"), {"text": "c"}) == 1


@pytest.mark.asyncio
async def test_manual_key_advances_sequence(source: MemorySource) -> None:
    assert await source.create(_query(), {"id": 10, "text": "a"}) == 10
    assert await source.create(_query(), {"text": "b"}) == 11


@pytest.mark.asyncio
async def test_duplicate_key(source: MemorySource) -> None:
    await source.create(_query(), {"id": 1})
    with pytest.raises(SourceError, match="Duplicate key"):
        await source.create(_query(), {"id": 1})


@pytest.mark.asyncio
async def test_text_key_must_be_given(source: MemorySource) -> None:
    query = Query(source="tags", key="code", schema={"code": FieldType.STRING})

    with pytest.raises(SourceError, match="Missing code"):
        await source.create(query, {"label": "x"})
    assert await source.create(query, {"code": "py"}) == "py"


@pytest.mark.asyncio
async def test_rows_are_copies(source: MemorySource) -> None:
    data = {"tags": ["x"]}
    await source.create(_query(), data)
    data["tags"].append("y")

    rows = await source.read(_query())
    rows[0]["tags"].append("z")

    assert (await source.read(_query()))[0]["tags"] == ["x"]


@pytest.mark.asyncio
async def test_order_with_missing_values(source: MemorySource) -> None:
    await source.create(_query(), {"rank": 2})
    await source.create(_query(), {})
    await source.create(_query(), {"rank": 1})

    rows = await source.read(_query(order=(("rank", "ASC"),)))
    assert [r.get("rank") for r in rows] == [None, 1, 2]

    rows = await source.read(_query(order=(("rank", "DESC"),), limit=2))
    assert [r.get("rank") for r in rows] == [2, 1]


@pytest.mark.asyncio
async def test_update_delete_count(source: MemorySource) -> None:
    for flag in (True, True, False):
        await source.create(_query(), {"flag": flag})

    assert await source.count(_query(conditions={"flag": True})) == 2
    assert await source.update(_query(conditions={"flag": True}), {"seen": 1}) == 2
    assert await source.count(_query(conditions={"seen": 1})) == 2
    assert await source.delete(_query(conditions={"flag": True})) == 2
    assert await source.count(_query()) == 1


@pytest.mark.asyncio
async def test_connection_state(source: MemorySource) -> None:
    assert await source.is_connected() is False
    assert await source.is_connected(auto_connect=True) is True
    await source.disconnect()
    assert await source.is_connected() is False


def test_reset(source: MemorySource) -> None:
    source.records["notes"] = {1: {"id": 1}}
    source.reset()
    assert source.records == {}
