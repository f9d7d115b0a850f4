"""Fixtures de aceptación: `azurerm_powerbi_embedded`.

Contiene las configuraciones de test (basic, requires_import, complete) y los
checks que consultan la API de ARM para confirmar existencia o ausencia.
"""

from __future__ import annotations

import asyncio
from typing import Callable

import httpx

from adapters.azure_auth import AuthenticationError
from adapters.config_renderer import available_templates, render_config
from adapters.http_client import response_was_not_found
from adapters.powerbi_client import CapacityClient, CapacityClientError
from core.config import AcceptanceSettings
from core.domain.errors import (
    CheckError,
    ResourceNotFoundError,
    ResourceNotInStateError,
    UnexpectedAPIError,
)
from core.domain.harness import CheckFunc
from core.domain.models import CapacityDetails, TestData
from core.domain.state import TerraformState
from core.interfaces.runners import CapacityReader
from core.services.checks import primary_resource

RESOURCE_TYPE = "azurerm_powerbi_embedded"
_TEMPLATE_DIR = "powerbi_embedded"

_LOOKUP_ERRORS = (CapacityClientError, AuthenticationError, httpx.HTTPError)


def config_template(data: TestData, settings: AcceptanceSettings | None = None) -> str:
    settings = settings or AcceptanceSettings()
    return render_config(
        f"{_TEMPLATE_DIR}/template.tf.j2",
        data=data,
        provider_version=settings.provider_version,
    )


def config_basic(data: TestData, settings: AcceptanceSettings | None = None) -> str:
    return render_config(
        f"{_TEMPLATE_DIR}/basic.tf.j2",
        data=data,
        template=config_template(data, settings),
    )


def config_requires_import(data: TestData, settings: AcceptanceSettings | None = None) -> str:
    return render_config(
        f"{_TEMPLATE_DIR}/requires_import.tf.j2",
        data=data,
        basic=config_basic(data, settings),
    )


def config_complete(data: TestData, settings: AcceptanceSettings | None = None) -> str:
    return render_config(
        f"{_TEMPLATE_DIR}/complete.tf.j2",
        data=data,
        template=config_template(data, settings),
    )


SCENARIOS: dict[str, Callable[[TestData, AcceptanceSettings | None], str]] = {
    "template": config_template,
    "basic": config_basic,
    "requires_import": config_requires_import,
    "complete": config_complete,
}


def scenario_names() -> list[str]:
    return [name for name in available_templates(_TEMPLATE_DIR) if name in SCENARIOS]


def get_details(client: CapacityReader, resource_group: str, name: str) -> CapacityDetails:
    """Versión síncrona de `client.get_details` (los checks corren fuera de un loop)."""

    return asyncio.run(client.get_details(resource_group, name))


def _response_of(exc: Exception) -> httpx.Response | None:
    return exc.response if isinstance(exc, CapacityClientError) else None


def check_exists(resource_name: str, *, client: CapacityReader | None = None) -> CheckFunc:
    """El recurso del state debe existir en Azure.

    El cliente (y su token cacheado) se crea una sola vez y se reutiliza en
    cada paso que invoca este check.
    """

    reader = client

    def _check(state: TerraformState) -> None:
        nonlocal reader
        try:
            resource = primary_resource(state, resource_name)
        except ResourceNotInStateError as exc:
            raise ResourceNotInStateError(f"PowerBI Embedded not found: {resource_name}") from exc

        name = resource.values.get("name", "")
        resource_group = resource.values.get("resource_group_name", "")

        if reader is None:
            reader = CapacityClient()
        try:
            get_details(reader, resource_group, name)
        except _LOOKUP_ERRORS as exc:
            if response_was_not_found(_response_of(exc)):
                raise ResourceNotFoundError(
                    f'Bad: PowerBI Embedded (PowerBI Embedded Name "{name}" / '
                    f'Resource Group "{resource_group}") does not exist'
                ) from exc
            raise UnexpectedAPIError(f"Bad: Get on PowerBI.CapacityClient: {exc}") from exc

    return _check


def check_destroy(state: TerraformState, *, client: CapacityReader | None = None) -> None:
    """Tras el destroy, toda capacidad del state debe devolver 404."""

    resources = state.of_type(RESOURCE_TYPE)
    if not resources:
        return

    client = client or CapacityClient()
    for resource in resources:
        name = resource.values.get("name", "")
        resource_group = resource.values.get("resource_group_name", "")
        try:
            get_details(client, resource_group, name)
        except _LOOKUP_ERRORS as exc:
            if response_was_not_found(_response_of(exc)):
                continue
            raise UnexpectedAPIError(f"Bad: Get on CapacityClient: {exc}") from exc
        raise CheckError(
            f'Bad: PowerBI Embedded (PowerBI Embedded Name "{name}" / '
            f'Resource Group "{resource_group}") still exists'
        )
