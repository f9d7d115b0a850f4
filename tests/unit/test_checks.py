from __future__ import annotations

import pytest

from core.domain.errors import CheckError, ResourceNotInStateError
from core.services.checks import (
    check_no_resource_attr,
    check_resource_attr,
    check_resource_attr_set,
    compose_checks,
)
from fakes import POWERBI, capacity_state

NAME = f"{POWERBI}.test"


def test_check_resource_attr_matches() -> None:
    state = capacity_state(sku="A2", tags={"ENV": "Test"})

    check_resource_attr(NAME, "sku_name", "A2")(state)
    check_resource_attr(NAME, "tags.ENV", "Test")(state)


def test_check_resource_attr_mismatch() -> None:
    with pytest.raises(CheckError, match="Attribute 'sku_name' expected 'A2', got 'A1'"):
        check_resource_attr(NAME, "sku_name", "A2")(capacity_state(sku="A1"))


def test_check_resource_attr_missing_attribute() -> None:
    with pytest.raises(CheckError, match="Attribute 'tags.ENV' not found"):
        check_resource_attr(NAME, "tags.ENV", "Test")(capacity_state())


def test_zero_count_matches_absent_collection() -> None:
    check_resource_attr(NAME, "tags.%", "0")(capacity_state(tags=None))


def test_missing_resource_is_a_state_error() -> None:
    with pytest.raises(ResourceNotInStateError, match="Not found: azurerm_powerbi_embedded.other"):
        check_resource_attr(f"{POWERBI}.other", "sku_name", "A1")(capacity_state())


def test_attr_set_and_no_attr() -> None:
    state = capacity_state()

    check_resource_attr_set(NAME, "id")(state)
    check_no_resource_attr(NAME, "tags.ENV")(state)
    with pytest.raises(CheckError, match="expected to be set"):
        check_resource_attr_set(NAME, "tags.ENV")(state)
    with pytest.raises(CheckError, match="found when not expected"):
        check_no_resource_attr(NAME, "sku_name")(state)


def test_compose_stops_at_first_failure() -> None:
    seen: list[str] = []

    def _record(state) -> None:
        seen.append("ran")

    check = compose_checks(
        check_resource_attr(NAME, "sku_name", "A1"),
        check_resource_attr(NAME, "sku_name", "A2"),
        _record,
    )

    with pytest.raises(CheckError, match=r"Check 2/3 error: .*expected 'A2'"):
        check(capacity_state(sku="A1"))
    assert seen == []
