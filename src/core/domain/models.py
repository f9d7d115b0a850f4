"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Validación estricta de lo que viene de fuera (respuestas ARM, env vars).
- Serialización sencilla para la CLI (`exists --json`).

Nota:
- Estos modelos describen *qué* es la información, no *cómo* se obtiene.
"""

from __future__ import annotations

import random
import string
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic.config import ConfigDict

from core.domain.harness import TestStep


class Locations(BaseModel):
    """Regiones disponibles para un test."""

    primary: str = Field(..., min_length=1)
    secondary: str | None = None
    ternary: str | None = None


def random_time_int(now: datetime | None = None, rng: random.Random | None = None) -> int:
    """Entero aleatorio basado en el reloj: `YYMMDDhhmmss` + centésimas + 2 dígitos.

    Garantiza nombres únicos entre ejecuciones y ordenables por fecha.
    """

    now = now or datetime.now()
    rng = rng or random.SystemRandom()
    stamp = now.strftime("%y%m%d%H%M%S") + f"{now.microsecond // 10_000:02d}"
    return int(stamp + f"{rng.randrange(100):02d}")


def random_string(length: int = 5, rng: random.Random | None = None) -> str:
    rng = rng or random.SystemRandom()
    alphabet = string.ascii_lowercase + string.digits
    return "".join(rng.choice(alphabet) for _ in range(length))


class TestData(BaseModel):
    """Datos de un test: recurso bajo prueba + sufijos aleatorios + regiones."""

    __test__ = False

    resource_type: str = Field(..., min_length=1, description="Tipo de recurso, p.ej. 'azurerm_powerbi_embedded'.")
    resource_label: str = Field(..., min_length=1, description="Etiqueta del bloque, p.ej. 'test'.")
    random_integer: int = Field(..., ge=0)
    random_string: str = Field(..., min_length=1)
    locations: Locations

    @property
    def resource_name(self) -> str:
        return f"{self.resource_type}.{self.resource_label}"

    def import_step(self, *ignore: str) -> TestStep:
        """Paso estándar: importar el recurso y comparar con lo aplicado."""

        return TestStep(
            resource_name=self.resource_name,
            import_state=True,
            import_state_verify=True,
            import_state_verify_ignore=list(ignore),
        )


class CapacitySku(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    tier: str | None = None


class CapacityDetails(BaseModel):
    """Capacidad PowerBI Embedded tal como la devuelve ARM.

    Acepta el cuerpo de `GET .../Microsoft.PowerBIDedicated/capacities/{name}`.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str | None = None
    name: str = Field(..., min_length=1)
    type: str | None = None
    location: str | None = None
    sku: CapacitySku | None = None
    tags: dict[str, str] = Field(default_factory=dict)
    properties: dict[str, Any] = Field(default_factory=dict)

    @field_validator("tags", "properties", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any) -> Any:
        # ARM devuelve `null` cuando no hay tags.
        return {} if value is None else value

    @property
    def sku_name(self) -> str | None:
        return self.sku.name if self.sku else None

    @property
    def administrators(self) -> list[str]:
        administration = self.properties.get("administration") or {}
        members = administration.get("members") or []
        return [str(m) for m in members]

    @property
    def state(self) -> str | None:
        value = self.properties.get("state")
        return str(value) if value is not None else None

    @property
    def provisioning_state(self) -> str | None:
        value = self.properties.get("provisioningState")
        return str(value) if value is not None else None
