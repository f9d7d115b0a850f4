from __future__ import annotations

import httpx
import pytest

from adapters.powerbi_client import CapacityClient, CapacityClientError
from adapters.resources import powerbi_embedded
from adapters.resources.powerbi_embedded import (
    check_destroy,
    check_exists,
    config_basic,
    config_complete,
    config_requires_import,
    config_template,
)
from core.domain.errors import (
    CheckError,
    ResourceNotFoundError,
    ResourceNotInStateError,
    UnexpectedAPIError,
)
from core.domain.models import CapacityDetails, Locations, TestData
from core.domain.state import TerraformState
from fakes import CAPACITY, POWERBI, RG, FakeCapacityReader, capacity_body, capacity_state, client_error

NAME = f"{POWERBI}.test"


@pytest.fixture
def data() -> TestData:
    return TestData(
        resource_type=POWERBI,
        resource_label="test",
        random_integer=1234,
        random_string="abcde",
        locations=Locations(primary="westeurope", secondary="northeurope"),
    )


def test_template_declares_provider_group_and_client_config(data, settings) -> None:
    hcl = config_template(data, settings)

    assert 'provider "azurerm" {\n  features {}\n}' in hcl
    assert 'name     = "acctestRG-powerbi-1234"' in hcl
    assert 'location = "westeurope"' in hcl
    assert 'data "azurerm_client_config" "test" {}' in hcl
    assert "version" not in hcl


def test_template_pins_provider_version(data, settings) -> None:
    pinned = settings.model_copy(update={"provider_version": "~> 3.0"})

    assert 'version = "~> 3.0"' in config_template(data, pinned)


def test_basic_config(data, settings) -> None:
    hcl = config_basic(data, settings)

    assert hcl.startswith(config_template(data, settings))
    assert 'resource "azurerm_powerbi_embedded" "test" {' in hcl
    assert 'name                = "acctestpowerbi1234"' in hcl
    assert 'sku_name            = "A1"' in hcl
    assert "administrators      = [data.azurerm_client_config.test.object_id]" in hcl
    assert "tags" not in hcl


def test_complete_config(data, settings) -> None:
    hcl = config_complete(data, settings)

    assert 'sku_name            = "A2"' in hcl
    assert 'ENV = "Test"' in hcl
    assert '"A1"' not in hcl


def test_requires_import_config_reuses_existing_name(data, settings) -> None:
    hcl = config_requires_import(data, settings)

    assert hcl.startswith(config_basic(data, settings))
    assert 'resource "azurerm_powerbi_embedded" "import" {' in hcl
    assert "name                = azurerm_powerbi_embedded.test.name" in hcl
    assert "location            = azurerm_powerbi_embedded.test.location" in hcl


def test_scenario_names() -> None:
    assert powerbi_embedded.scenario_names() == ["basic", "complete", "requires_import", "template"]


def test_check_exists_passes_when_capacity_found() -> None:
    reader = FakeCapacityReader(details=CapacityDetails.model_validate(capacity_body()))

    check_exists(NAME, client=reader)(capacity_state())
    assert reader.calls == [(RG, CAPACITY)]


def test_check_exists_not_in_state() -> None:
    reader = FakeCapacityReader(error=AssertionError("must not be called"))

    with pytest.raises(ResourceNotInStateError, match="PowerBI Embedded not found: azurerm_powerbi_embedded.test"):
        check_exists(NAME, client=reader)(TerraformState.empty())
    assert reader.calls == []


def test_check_exists_not_found_remotely() -> None:
    reader = FakeCapacityReader(error=client_error(404))

    with pytest.raises(ResourceNotFoundError) as excinfo:
        check_exists(NAME, client=reader)(capacity_state())
    assert str(excinfo.value) == (
        f'Bad: PowerBI Embedded (PowerBI Embedded Name "{CAPACITY}" / Resource Group "{RG}") does not exist'
    )


def test_check_exists_passes_other_errors_through() -> None:
    reader = FakeCapacityReader(error=client_error(500))

    with pytest.raises(UnexpectedAPIError, match=r"Bad: Get on PowerBI.CapacityClient: HTTP 500"):
        check_exists(NAME, client=reader)(capacity_state())


def test_check_destroy_accepts_not_found() -> None:
    reader = FakeCapacityReader(error=client_error(404))

    check_destroy(capacity_state(), client=reader)
    assert reader.calls == [(RG, CAPACITY)]


def test_check_destroy_fails_if_capacity_remains() -> None:
    reader = FakeCapacityReader(details=CapacityDetails.model_validate(capacity_body()))

    with pytest.raises(CheckError) as excinfo:
        check_destroy(capacity_state(), client=reader)
    assert str(excinfo.value) == (
        f'Bad: PowerBI Embedded (PowerBI Embedded Name "{CAPACITY}" / Resource Group "{RG}") still exists'
    )


def test_check_destroy_unexpected_error() -> None:
    reader = FakeCapacityReader(error=client_error(403))

    with pytest.raises(UnexpectedAPIError, match="Bad: Get on CapacityClient: HTTP 403"):
        check_destroy(capacity_state(), client=reader)


def test_check_destroy_ignores_other_resource_types() -> None:
    reader = FakeCapacityReader(error=AssertionError("must not be called"))
    state = TerraformState(
        resources={k: v for k, v in capacity_state().resources.items() if v.type != POWERBI}
    )

    check_destroy(state, client=reader)
    assert reader.calls == []


class _Arm:
    """AAD + ARM sobre `httpx.MockTransport`; la capacidad responde con `body`."""

    def __init__(self, body: dict) -> None:
        self.body = body
        self.token_requests = 0
        self.capacity_requests = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/oauth2/v2.0/token"):
            self.token_requests += 1
            return httpx.Response(200, json={"access_token": "tok", "expires_in": 3599})
        self.capacity_requests += 1
        return httpx.Response(200, json=self.body)


def test_check_exists_unreadable_body_is_unexpected_api_error(settings) -> None:
    client = CapacityClient(settings, transport=httpx.MockTransport(_Arm({"id": "x"})))

    with pytest.raises(UnexpectedAPIError, match="unexpected capacity body") as excinfo:
        check_exists(NAME, client=client)(capacity_state())
    assert isinstance(excinfo.value.__cause__, CapacityClientError)


def test_check_exists_reuses_client_across_steps(monkeypatch, settings) -> None:
    arm = _Arm(capacity_body())
    built: list[CapacityClient] = []

    def _client() -> CapacityClient:
        built.append(CapacityClient(settings, transport=httpx.MockTransport(arm)))
        return built[-1]

    monkeypatch.setattr(powerbi_embedded, "CapacityClient", _client)
    check = check_exists(NAME)
    assert built == []

    for _ in range(3):
        check(capacity_state())

    assert len(built) == 1
    assert arm.capacity_requests == 3
    assert arm.token_requests == 1
