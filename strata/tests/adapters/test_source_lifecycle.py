"""Record lifecycle tests run against every available source backend.

Each test uses the ``test`` connection. Memory and SQLite always run;
PostgreSQL runs when STRATA_TEST_DATABASE_URL points at a reachable
server and is skipped otherwise.
"""

import contextlib
import os
from pathlib import Path

import pytest

from strata.connections import Connections
from strata.core.errors import StrataError
from strata.core.model import Model
from strata.core.models import RelationType
from strata.core.ports import SourcePort


class Company(Model, connection="test", locked=False):
    schema = {"id": "id", "name": "string", "active": "boolean"}
    has_many = ["Employees"]


class Employee(Model, connection="test", locked=False):
    schema = {"id": "id", "name": "string", "company_id": "integer"}
    belongs_to = ["Company"]


COMPANY_DATA = [
    {"name": "StuffMart", "active": True},
    {"name": "Ma 'n Pa's Data Warehousing & Bait Shop", "active": False},
]


async def _clear() -> None:
    # Nothing to delete is not a failure.
    with contextlib.suppress(StrataError):
        for employee in await Employee.all():
            await employee.delete()
    with contextlib.suppress(StrataError):
        for company in await Company.all():
            await company.delete()


@pytest.fixture(params=["memory", "sqlite", "postgresql"])
async def connection(request, tmp_path: Path) -> SourcePort:
    """Register the ``test`` connection and start from an empty store."""
    Connections.reset()
    if request.param == "memory":
        Connections.add("test", type="memory")
    elif request.param == "sqlite":
        Connections.add("test", type="sqlite", db_path=str(tmp_path / "test.db"))
    else:
        url = os.environ.get("STRATA_TEST_DATABASE_URL")
        if not url:
            pytest.skip("No test connection available")
        Connections.add("test", type="postgresql", url=url, pool_size=2)

    Company.config()
    Employee.config()
    source = Connections.get("test")
    is_available = Connections.get("test", config=True) and await source.is_connected(
        auto_connect=True
    )
    if not is_available:
        Connections.reset()
        pytest.skip("No test connection available")

    await source.prepare(Company)
    await source.prepare(Employee)
    await _clear()
    yield source
    await _clear()
    await Connections.disconnect_all()
    Connections.reset()


@pytest.mark.asyncio
async def test_single_read_write_with_key(connection: SourcePort) -> None:
    """A record with a manual key can be created, persisted, re-read and updated."""
    key = Company.meta("key")
    new = Company.create({key: 12345, "name": "Acme, Inc."})

    result = new.data()
    assert result[key] == 12345
    assert result["name"] == "Acme, Inc."

    assert not new.exists()
    assert await new.save()
    assert new.exists()

    existing = await Company.find(12345)
    result = existing.data()
    assert result[key] == 12345
    assert result["name"] == "Acme, Inc."
    assert existing.exists()

    existing.name = "Big Brother and the Holding Company"
    assert await existing.save()

    existing = await Company.find(12345)
    result = existing.data()
    assert result[key] == 12345
    assert result["name"] == "Big Brother and the Holding Company"

    assert await existing.delete()
    assert await Company.find(12345) is None


@pytest.mark.asyncio
async def test_rewind(connection: SourcePort) -> None:
    key = Company.meta("key")
    new = Company.create({key: 12345, "name": "Acme, Inc."})

    assert new.data() is not None
    assert await new.save()
    assert new.exists()

    result = await Company.all(12345)
    assert result is not None

    first = result.rewind()
    assert first is not None
    assert not isinstance(first, str)
    assert first[key] == 12345


@pytest.mark.asyncio
async def test_find_first_with_fields_option(connection: SourcePort) -> None:
    key = Company.meta("key")
    new = Company.create({key: 1111, "name": "Test find first with fields."})
    result = new.data()

    assert result["name"] == "Test find first with fields."
    assert result[key] == 1111
    assert not new.exists()
    assert await new.save()
    assert new.exists()

    found = await Company.find("first", fields=["name"])
    assert found is not None
    assert found.data() == {"name": "Test find first with fields."}

    assert await new.delete()


@pytest.mark.asyncio
async def test_read_write_multiple(connection: SourcePort) -> None:
    key = Company.meta("key")
    companies = []

    for data in COMPANY_DATA:
        company = Company.create(data)
        companies.append(company)
        assert await company.save()
        assert company[key]

    assert await Company.count() == 2
    assert await Company.count({"active": True}) == 1
    assert await Company.count({"active": False}) == 1
    assert await Company.count({"active": None}) == 0

    records = await Company.all()
    assert records.count() == len(COMPANY_DATA)
    assert len(records) == len(COMPANY_DATA)

    first_id = str(records.first()[key])
    assert len(first_id) > 0
    assert records.data()

    for company in companies:
        assert await company.delete()
    assert await Company.count() == 0


@pytest.mark.asyncio
async def test_record_offset(connection: SourcePort) -> None:
    for data in COMPANY_DATA:
        await Company.create(data).save()
    records = await Company.all()

    result = records.first(lambda doc: doc.name == "StuffMart")
    assert result["name"] == "StuffMart"
    assert result.data()["name"] == "StuffMart"

    result = records[1]
    expected = "Ma 'n Pa's Data Warehousing & Bait Shop"
    assert result["name"] == expected
    assert result.data()["name"] == expected

    assert records[2] is None


@pytest.mark.asyncio
async def test_get_record_by_generated_id(connection: SourcePort) -> None:
    """A record saved without a key can be re-read with the generated one."""
    key = Company.meta("key")
    company = Company.create({"name": "Test Company"})
    assert await company.save()

    generated = company[key]
    assert generated is not None
    copy = (await Company.find(generated)).data()
    data = company.data()

    for name, value in data.items():
        assert name in copy
        assert copy[name] == value


@pytest.mark.asyncio
async def test_boolean_fields_read_back_as_booleans(connection: SourcePort) -> None:
    for data in COMPANY_DATA:
        await Company.create(data).save()

    records = await Company.all(order="name")

    assert [r.active for r in records] == [False, True]
    assert all(isinstance(r.active, bool) for r in records)


@pytest.mark.asyncio
async def test_default_relationship_info(connection: SourcePort) -> None:
    """The declared relationships are reported with their defaults."""
    if not connection.enabled("relationships"):
        pytest.skip("Relationships are not supported by this adapter.")

    assert list(Company.relations()) == ["Employees"]
    assert list(Employee.relations()) == ["Company"]

    assert Company.relations("hasMany") == ["Employees"]
    assert Employee.relations("belongsTo") == ["Company"]

    assert Company.relations("belongsTo") is False
    assert Company.relations("hasOne") is False

    assert Employee.relations("hasMany") is False
    assert Employee.relations("hasOne") is False

    result = Company.relations("Employees")
    assert result.type is RelationType.HAS_MANY
    assert result.type == "hasMany"
    assert result.type == "has_many"
    assert result.to is Employee


@pytest.mark.asyncio
async def test_relationship_querying(connection: SourcePort) -> None:
    if not connection.enabled("relationships"):
        pytest.skip("Relationships are not supported by this adapter.")

    for data in COMPANY_DATA:
        await Company.create(data).save()
    company = await Company.first({"name": "StuffMart"})
    other = await Company.first({"name": COMPANY_DATA[1]["name"]})

    await Employee.create(name="Ann", company_id=company.id).save()
    await Employee.create(name="Bob", company_id=company.id).save()
    await Employee.create(name="Cid", company_id=other.id).save()

    employees = await company.related("Employees")
    assert employees.model() is Employee
    assert sorted(e.name for e in employees) == ["Ann", "Bob"]
    assert company.employees is employees

    ann = await Employee.first({"name": "Ann"})
    employer = await ann.related("Company")
    assert employer.name == "StuffMart"
    assert ann.company is employer


@pytest.mark.asyncio
async def test_delete_unsaved_record_returns_false(connection: SourcePort) -> None:
    company = Company.create({"name": "Never saved"})

    assert await company.delete() is False
    assert await Company.count() == 0


@pytest.mark.asyncio
async def test_remove_by_conditions(connection: SourcePort) -> None:
    for data in COMPANY_DATA:
        await Company.create(data).save()

    assert await Company.remove({"active": False}) == 1
    assert await Company.count() == 1
    assert (await Company.first()).name == "StuffMart"


@pytest.mark.asyncio
async def test_limit_offset_and_order(connection: SourcePort) -> None:
    for name in ["b", "c", "a"]:
        await Company.create(name=name, active=True).save()

    ordered = await Company.all(order="name DESC")
    assert [c.name for c in ordered] == ["c", "b", "a"]

    page = await Company.all(order="name", limit=1, offset=1)
    assert [c.name for c in page] == ["b"]

    assert await Company.count({"name": ["a", "c"]}) == 2
