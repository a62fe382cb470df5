"""Unit tests for naming conventions."""

import pytest

from strata.core.inflector import (
    camelize,
    foreign_key,
    pluralize,
    singularize,
    tableize,
    underscore,
)


@pytest.mark.parametrize(
    "singular, plural",
    [
        ("Company", "Companies"),
        ("Employee", "Employees"),
        ("Address", "Addresses"),
        ("Box", "Boxes"),
        ("Person", "People"),
        ("Day", "Days"),
        ("OrderItem", "OrderItems"),
    ],
)
def test_pluralize_and_singularize(singular: str, plural: str) -> None:
    assert pluralize(singular) == plural
    assert singularize(plural) == singular


def test_singularize_leaves_singular_words_alone() -> None:
    assert singularize("Company") == "Company"
    assert singularize("Status") == "Status"


def test_underscore_and_camelize() -> None:
    assert underscore("OrderItem") == "order_item"
    assert underscore("HTTPRequest") == "http_request"
    assert underscore("Employees") == "employees"
    assert camelize("order_item") == "OrderItem"
    assert camelize("company") == "Company"


def test_tableize_and_foreign_key() -> None:
    assert tableize("Company") == "companies"
    assert tableize("OrderItem") == "order_items"
    assert foreign_key("Company") == "company_id"
    assert foreign_key("OrderItem", "uid") == "order_item_uid"
