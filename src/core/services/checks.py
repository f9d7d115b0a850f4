"""Funciones de check genéricas sobre el state aplicado.

Cada check es un callable `(TerraformState) -> None` que lanza `CheckError`
si el estado no es el esperado.
"""

from __future__ import annotations

from core.domain.errors import CheckError, ResourceNotInStateError
from core.domain.harness import CheckFunc
from core.domain.state import ResourceState, TerraformState


def compose_checks(*checks: CheckFunc) -> CheckFunc:
    """Ejecuta los checks en orden y se detiene en el primero que falla."""

    def _check(state: TerraformState) -> None:
        total = len(checks)
        for index, check in enumerate(checks, start=1):
            try:
                check(state)
            except CheckError as exc:
                raise CheckError(f"Check {index}/{total} error: {exc}") from exc

    return _check


def primary_resource(state: TerraformState, resource_name: str) -> ResourceState:
    resource = state.resources.get(resource_name)
    if resource is None:
        raise ResourceNotInStateError(f"Not found: {resource_name} in root module")
    return resource


def check_resource_attr(resource_name: str, key: str, value: str) -> CheckFunc:
    """El atributo `key` del recurso debe valer exactamente `value`."""

    def _check(state: TerraformState) -> None:
        attributes = primary_resource(state, resource_name).attributes
        actual = attributes.get(key)
        if actual is None:
            # Una colección vacía no aparece en el flatmap.
            if value == "0" and (key.endswith(".#") or key.endswith(".%")):
                return
            raise CheckError(f"{resource_name}: Attribute '{key}' not found")
        if actual != value:
            raise CheckError(f"{resource_name}: Attribute '{key}' expected {value!r}, got {actual!r}")

    return _check


def check_resource_attr_set(resource_name: str, key: str) -> CheckFunc:
    def _check(state: TerraformState) -> None:
        actual = primary_resource(state, resource_name).attributes.get(key)
        if not actual:
            raise CheckError(f"{resource_name}: Attribute '{key}' expected to be set")

    return _check


def check_no_resource_attr(resource_name: str, key: str) -> CheckFunc:
    def _check(state: TerraformState) -> None:
        actual = primary_resource(state, resource_name).attributes.get(key)
        if actual is not None:
            raise CheckError(f"{resource_name}: Attribute '{key}' found when not expected ({actual!r})")

    return _check
