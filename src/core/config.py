"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- El harness, el runner de Terraform y el cliente ARM leen la misma config.

Las variables siguen la convención del provider azurerm (`ARM_*`, `TF_ACC`),
así un entorno que ya sirve para `terraform apply` sirve también aquí.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


PRECHECK_VARIABLES: tuple[str, ...] = (
    "ARM_CLIENT_ID",
    "ARM_CLIENT_SECRET",
    "ARM_SUBSCRIPTION_ID",
    "ARM_TENANT_ID",
    "ARM_TEST_LOCATION",
    "ARM_TEST_LOCATION_ALT",
)


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "powerbi-acctest"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "powerbi-acctest"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "powerbi-acctest"
    return Path.home() / ".config" / "powerbi-acctest"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str | None]) -> Path:
    """Escribe/actualiza variables en el .env global del usuario.

    Las claves existentes se conservan; un valor `None` no pisa el anterior.
    """

    env_path = get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# powerbi-acctest user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AcceptanceSettings(BaseSettings):
    """Configuración central de los tests de aceptación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el harness.
    - Un único contrato de configuración para harness/adapters/CLI.
    """

    model_config = SettingsConfigDict(
        env_prefix="ARM_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    client_id: str | None = Field(default=None, description="Service principal (app) id.")
    client_secret: str | None = Field(default=None, description="Service principal secret.")
    subscription_id: str | None = Field(default=None, description="Suscripción donde se crean los recursos.")
    tenant_id: str | None = Field(default=None, description="Tenant de Azure AD.")

    test_location: str | None = Field(default=None, description="Región primaria de los tests.")
    test_location_alt: str | None = Field(default=None, description="Región secundaria.")
    test_location_alt2: str | None = Field(default=None, description="Región terciaria (opcional).")

    tf_acc: bool = Field(
        default=False,
        validation_alias=AliasChoices("tf_acc", "TF_ACC"),
        description="Habilita los tests de aceptación (crean infraestructura real).",
    )
    terraform_path: str = Field(
        default="terraform",
        min_length=1,
        validation_alias=AliasChoices("terraform_path", "TF_ACC_TERRAFORM_PATH"),
        description="Binario de Terraform a utilizar.",
    )
    keep_workdir: bool = Field(
        default=False,
        validation_alias=AliasChoices("keep_workdir", "TF_ACC_KEEP_WORKDIR"),
        description="Conserva el directorio temporal de cada test case (depuración).",
    )
    terraform_timeout_seconds: float = Field(
        default=3600.0,
        gt=0,
        description="Timeout por comando de Terraform (segundos).",
    )
    provider_version: str | None = Field(
        default=None,
        description="Restricción de versión para hashicorp/azurerm (p.ej. '~> 3.0').",
    )

    http_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Timeout por request a ARM/AAD (segundos).",
    )
    user_agent: str = Field(
        default="powerbi-acctest/0.1",
        min_length=1,
        description="User-Agent para peticiones a Azure.",
    )
    resource_manager_endpoint: str = Field(
        default="https://management.azure.com",
        min_length=8,
        description="Endpoint de Azure Resource Manager.",
    )
    authority_host: str = Field(
        default="https://login.microsoftonline.com",
        min_length=8,
        description="Autoridad OAuth2 de Azure AD.",
    )

    def missing_precheck_variables(self) -> list[str]:
        """Variables obligatorias para los tests de aceptación que no están definidas."""

        values = {
            "ARM_CLIENT_ID": self.client_id,
            "ARM_CLIENT_SECRET": self.client_secret,
            "ARM_SUBSCRIPTION_ID": self.subscription_id,
            "ARM_TENANT_ID": self.tenant_id,
            "ARM_TEST_LOCATION": self.test_location,
            "ARM_TEST_LOCATION_ALT": self.test_location_alt,
        }
        return [name for name in PRECHECK_VARIABLES if not (values.get(name) or "").strip()]

    def provider_environment(self) -> dict[str, str]:
        """Variables `ARM_*` que el provider azurerm necesita en el subprocess."""

        env = {
            "ARM_CLIENT_ID": self.client_id,
            "ARM_CLIENT_SECRET": self.client_secret,
            "ARM_SUBSCRIPTION_ID": self.subscription_id,
            "ARM_TENANT_ID": self.tenant_id,
        }
        return {k: v for k, v in env.items() if v}
