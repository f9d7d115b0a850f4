"""Errores del harness de aceptación.

Tres familias:
- `CheckError`: una función de check rechazó el estado (local o remoto).
- `StepError`: un paso del test case no se comportó como se esperaba.
- `TerraformCommandError`: el binario de Terraform devolvió un código inesperado.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from core.interfaces.runners import CommandResult


class AcceptanceError(Exception):
    """Raíz de todos los errores del harness."""


class PreCheckError(AcceptanceError):
    """El entorno no cumple los requisitos para crear infraestructura real."""


class CheckError(AcceptanceError):
    """Un check sobre el estado aplicado falló."""


class ResourceNotInStateError(CheckError):
    """El recurso no existe en el state local (error de setup del test)."""


class ResourceNotFoundError(CheckError):
    """El recurso no existe en la API remota."""


class UnexpectedAPIError(CheckError):
    """Cualquier otro fallo de la API remota, propagado tal cual."""


class StepError(AcceptanceError):
    """Un paso del test case falló."""

    def __init__(self, step: int, message: str) -> None:
        super().__init__(f"Step {step}: {message}")
        self.step = step


class ImportVerifyError(StepError):
    """Los atributos importados no coinciden con los aplicados."""

    def __init__(self, step: int, resource_name: str, differences: dict[str, tuple[str | None, str | None]]) -> None:
        lines = [
            f"ImportStateVerify attributes not equivalent for {resource_name}. "
            "Each line shows imported != applied:"
        ]
        for key in sorted(differences):
            actual, expected = differences[key]
            lines.append(f"  {key}: {actual!r} != {expected!r}")
        super().__init__(step, "\n".join(lines))
        self.resource_name = resource_name
        self.differences = differences


class TerraformCommandError(AcceptanceError):
    """Fallo de un comando de Terraform (rc inesperado)."""

    def __init__(self, result: CommandResult) -> None:
        super().__init__(
            f"terraform command failed (rc={result.returncode}): {' '.join(result.args)}\n"
            f"stdout: {result.stdout}\n"
            f"stderr: {result.stderr}"
        )
        self.result = result

    @property
    def output(self) -> str:
        return f"{self.result.stdout}\n{self.result.stderr}"
