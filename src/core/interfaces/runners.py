"""Contratos del harness.

Por qué Protocol:
- Define un contrato estructural (duck typing) sin herencia rígida.
- Permite sustituir el binario real de Terraform o la API de Azure por fakes
  en tests unitarios sin acoplar el Core a implementaciones concretas.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from core.domain.models import CapacityDetails
from core.domain.state import TerraformState


@dataclass(frozen=True)
class CommandResult:
    """Salida de un comando externo."""

    args: list[str]
    stdout: str
    stderr: str
    returncode: int


@runtime_checkable
class TerraformRunner(Protocol):
    """Operaciones de Terraform que necesita el harness.

    Reglas de diseño:
    - Cada runner trabaja sobre un único directorio (un test case).
    - Los comandos fallidos lanzan `TerraformCommandError`.
    """

    def write_config(self, config: str) -> None: ...

    def init(self) -> CommandResult: ...

    def apply(self) -> CommandResult: ...

    def plan_has_changes(self) -> tuple[bool, str]: ...

    def show_state(self) -> TerraformState: ...

    def import_resource(self, address: str, import_id: str) -> TerraformState: ...

    def destroy(self) -> CommandResult: ...


@runtime_checkable
class CapacityReader(Protocol):
    """Lectura de capacidades PowerBI Embedded (cliente ARM)."""

    async def get_details(self, resource_group: str, name: str) -> CapacityDetails:
        """Devuelve la capacidad o lanza un error que lleva la respuesta HTTP."""

        ...
