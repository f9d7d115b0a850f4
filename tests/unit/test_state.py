from __future__ import annotations

import json

from core.domain.state import TerraformState, flatten_attributes
from fakes import ADMIN, CAPACITY_ID, POWERBI, show_json


def test_from_show_json_indexes_resources_by_address() -> None:
    state = TerraformState.from_show_json(json.dumps(show_json()))

    assert set(state.resources) == {
        "azurerm_resource_group.test",
        f"{POWERBI}.test",
        "data.azurerm_client_config.test",
    }
    capacity = state.resources[f"{POWERBI}.test"]
    assert capacity.id == CAPACITY_ID
    assert capacity.mode == "managed"
    assert state.resources["data.azurerm_client_config.test"].mode == "data"


def test_of_type_skips_data_sources() -> None:
    state = TerraformState.from_show_json(show_json())

    assert [r.address for r in state.of_type(POWERBI)] == [f"{POWERBI}.test"]
    assert state.of_type("azurerm_client_config") == []


def test_attributes_use_flatmap_keys() -> None:
    state = TerraformState.from_show_json(show_json(sku="A2", tags={"ENV": "Test"}))
    attrs = state.resources[f"{POWERBI}.test"].attributes

    assert attrs["sku_name"] == "A2"
    assert attrs["administrators.#"] == "1"
    assert attrs["administrators.0"] == ADMIN
    assert attrs["tags.%"] == "1"
    assert attrs["tags.ENV"] == "Test"
    # null values are not part of the state
    assert not any(key.startswith("timeouts") for key in attrs)


def test_flatten_nested_blocks_and_scalars() -> None:
    flat = flatten_attributes(
        {
            "enabled": True,
            "count": 3.0,
            "ratio": 0.5,
            "identity": [{"type": "SystemAssigned", "ids": ["a", "b"]}],
            "matrix": [["x"]],
            "empty": [],
        }
    )

    assert flat["enabled"] == "true"
    assert flat["count"] == "3"
    assert flat["ratio"] == "0.5"
    assert flat["identity.#"] == "1"
    assert flat["identity.0.type"] == "SystemAssigned"
    assert flat["identity.0.ids.#"] == "2"
    assert flat["identity.0.ids.1"] == "b"
    assert flat["matrix.0.#"] == "1"
    assert flat["matrix.0.0"] == "x"
    assert flat["empty.#"] == "0"


def test_empty_state_output() -> None:
    state = TerraformState.from_show_json({"format_version": "1.0"})

    assert state.resources == {}
