"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio
import tempfile
from pathlib import Path

import typer
from rich.console import Console

from adapters.azure_auth import AuthenticationError, ClientSecretCredential
from adapters.http_client import build_async_client
from adapters.terraform_cli import TerraformCLI
from cli.ui_components import build_doctor_table
from core.config import AcceptanceSettings, write_user_env_vars

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and credential setup.")

_console = Console()


async def _check_arm(settings: AcceptanceSettings) -> tuple[bool, str]:
    """Pide un token y lista la suscripción configurada."""

    try:
        token = await ClientSecretCredential(settings).get_token()
    except AuthenticationError as exc:
        return False, str(exc)

    url = f"{settings.resource_manager_endpoint.rstrip('/')}/subscriptions/{settings.subscription_id}"
    async with build_async_client(settings, token=token) as client:
        response = await client.get(url, params={"api-version": "2020-01-01"})
    return response.is_success, f"HTTP {response.status_code}"


def _check_terraform(settings: AcceptanceSettings) -> tuple[bool, str]:
    try:
        with tempfile.TemporaryDirectory(prefix="acctest-doctor-") as tmp:
            version = TerraformCLI(Path(tmp), settings=settings).version()
    except OSError as exc:
        return False, str(exc)
    return bool(version), version or "no output"


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AcceptanceSettings()
    table = build_doctor_table()

    missing = settings.missing_precheck_variables()
    if missing:
        table.add_row("Credentials", "FAIL", "missing: " + ", ".join(missing))
    else:
        table.add_row("Credentials", "OK", f"subscription {settings.subscription_id}")
    table.add_row("TF_ACC", "OK" if settings.tf_acc else "OFF", "acceptance tests enabled" if settings.tf_acc else "acceptance tests will be skipped")

    ok_tf, detail_tf = _check_terraform(settings)
    table.add_row("Terraform", "OK" if ok_tf else "FAIL", detail_tf)

    ok_arm = False
    if missing:
        table.add_row("ARM connectivity", "SKIP", "credentials incomplete")
    else:
        ok_arm, detail_arm = asyncio.run(_check_arm(settings))
        table.add_row("ARM connectivity", "OK" if ok_arm else "FAIL", detail_arm)

    _console.print(table)

    if missing:
        _console.print(
            "\n[yellow]Note:[/yellow] run `powerbi-acctest doctor setup-credentials` to store ARM_* values."
        )
    if missing or not ok_tf or not ok_arm:
        raise typer.Exit(code=1)


@app.command(name="setup-credentials")
def setup_credentials() -> None:
    """Interactive credential setup (stores ARM_* in the user config .env)."""

    tenant_id = typer.prompt("Tenant id").strip()
    subscription_id = typer.prompt("Subscription id").strip()
    client_id = typer.prompt("Client id").strip()
    client_secret = typer.prompt("Client secret", hide_input=True, confirmation_prompt=False).strip()
    location = typer.prompt("Primary test location", default="westeurope", show_default=True).strip()
    location_alt = typer.prompt("Secondary test location", default="northeurope", show_default=True).strip()

    if not (tenant_id and subscription_id and client_id and client_secret):
        raise typer.BadParameter("tenant, subscription, client id and secret are required")

    env_path = write_user_env_vars(
        {
            "ARM_TENANT_ID": tenant_id,
            "ARM_SUBSCRIPTION_ID": subscription_id,
            "ARM_CLIENT_ID": client_id,
            "ARM_CLIENT_SECRET": client_secret,
            "ARM_TEST_LOCATION": location,
            "ARM_TEST_LOCATION_ALT": location_alt,
        }
    )

    _console.print(f"[green]Saved credentials to:[/green] {env_path}")
