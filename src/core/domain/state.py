"""Estado de Terraform leído con `terraform show -json`.

Por qué aplanar:
- Los checks y la verificación de import comparan atributos como pares
  clave/valor planos (`sku_name`, `tags.ENV`, `administrators.#`), igual que
  los muestra el state "flatmap" del SDK de providers.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, Field


def _scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def flatten_attributes(values: dict[str, Any], prefix: str = "") -> dict[str, str]:
    """Aplana `values` al formato flatmap.

    - objetos/mapas: `key.sub` + `key.%` con el número de claves
    - listas/sets: `key.N` + `key.#` con la longitud
    - `None` se omite (atributo no establecido)
    """

    out: dict[str, str] = {}
    for key, value in values.items():
        path = f"{prefix}{key}"
        if value is None:
            continue
        if isinstance(value, dict):
            out[f"{path}.%"] = str(len(value))
            out.update(flatten_attributes(value, prefix=f"{path}."))
        elif isinstance(value, list):
            out[f"{path}.#"] = str(len(value))
            for index, item in enumerate(value):
                item_path = f"{path}.{index}"
                if isinstance(item, dict):
                    out.update(flatten_attributes(item, prefix=f"{item_path}."))
                elif isinstance(item, list):
                    out.update(flatten_attributes({str(index): item}, prefix=f"{path}."))
                elif item is not None:
                    out[item_path] = _scalar(item)
        else:
            out[path] = _scalar(value)
    return out


class ResourceState(BaseModel):
    """Un recurso (o data source) del state."""

    address: str = Field(..., min_length=1, description="Dirección completa, p.ej. 'azurerm_powerbi_embedded.test'.")
    mode: str = Field(default="managed", description="'managed' o 'data'.")
    type: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    provider_name: str | None = None
    values: dict[str, Any] = Field(default_factory=dict)

    @property
    def id(self) -> str | None:
        value = self.values.get("id")
        return str(value) if value is not None else None

    @property
    def attributes(self) -> dict[str, str]:
        return flatten_attributes(self.values)


class TerraformState(BaseModel):
    """Recursos del state indexados por dirección."""

    resources: dict[str, ResourceState] = Field(default_factory=dict)

    @classmethod
    def empty(cls) -> "TerraformState":
        return cls()

    @classmethod
    def from_show_json(cls, raw: str | dict[str, Any]) -> "TerraformState":
        """Construye el estado a partir de la salida de `terraform show -json`.

        Un state vacío (sin `values`) devuelve un estado sin recursos.
        """

        data = json.loads(raw) if isinstance(raw, str) else raw
        resources: dict[str, ResourceState] = {}

        def _walk(module: dict[str, Any]) -> None:
            for item in module.get("resources") or []:
                resource = ResourceState.model_validate(item)
                resources[resource.address] = resource
            for child in module.get("child_modules") or []:
                _walk(child)

        values = data.get("values") or {}
        root = values.get("root_module") or {}
        _walk(root)
        return cls(resources=resources)

    def of_type(self, resource_type: str) -> list[ResourceState]:
        return [r for r in self.resources.values() if r.type == resource_type and r.mode == "managed"]
