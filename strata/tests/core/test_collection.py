"""Unit tests for RecordSet."""

import pytest

from strata.core.collection import RecordSet
from strata.core.model import Model


class Widget(Model, connection="unit"):
    schema = {"id": "id", "name": "string"}


@pytest.fixture
def records() -> RecordSet:
    entities = [
        Widget.create(id=1, name="bolt"),
        Widget.create(id=2, name="nut"),
        Widget.create(id=3, name="washer"),
    ]
    return RecordSet(Widget, entities)


def test_length_and_count(records: RecordSet) -> None:
    assert len(records) == 3
    assert records.count() == 3
    assert records
    assert not RecordSet(Widget)


def test_offset_access(records: RecordSet) -> None:
    assert records[0].name == "bolt"
    assert records[-1].name == "washer"
    assert records[3] is None
    assert records[-4] is None


def test_slicing_returns_record_set(records: RecordSet) -> None:
    sliced = records[1:]
    assert isinstance(sliced, RecordSet)
    assert [w.name for w in sliced] == ["nut", "washer"]


def test_first_with_and_without_predicate(records: RecordSet) -> None:
    assert records.first().name == "bolt"
    assert records.first(lambda w: w.name.startswith("w")).id == 3
    assert records.first(lambda w: w.name == "gear") is None
    assert RecordSet(Widget).first() is None


def test_data_and_keys(records: RecordSet) -> None:
    assert records.data()[1] == {"id": 2, "name": "nut"}
    assert records.keys() == [1, 2, 3]
    assert records.model() is Widget


def test_cursor(records: RecordSet) -> None:
    assert records.next().name == "nut"
    assert records.next().name == "washer"
    assert records.next() is None
    assert records.next() is None

    assert records.rewind().name == "bolt"
    assert records.current().name == "bolt"
    assert RecordSet(Widget).rewind() is None


def test_iteration_does_not_move_cursor(records: RecordSet) -> None:
    assert [w.id for w in records] == [1, 2, 3]
    assert records.current().id == 1
