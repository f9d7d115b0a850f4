"""CLI principal (Typer).

Comandos:
- `render`: imprime la configuración Terraform de un escenario.
- `exists`: consulta una capacidad en ARM.
- `doctor`: diagnóstico del entorno y alta de credenciales.

Los tests de aceptación se ejecutan con pytest (`TF_ACC=1 pytest -m acceptance`).
"""

from __future__ import annotations

import asyncio
from typing import Optional

import typer
from rich.console import Console

from adapters.azure_auth import AuthenticationError
from adapters.http_client import response_was_not_found
from adapters.powerbi_client import CapacityClient, CapacityClientError
from adapters.resources import powerbi_embedded
from cli import doctor
from cli.ui_components import build_capacity_table, configure_logging
from core.config import AcceptanceSettings
from core.domain.models import Locations
from core.services.acceptance import build_test_data

app = typer.Typer(no_args_is_help=True, help="PowerBI Embedded acceptance-test tooling.")
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
) -> None:
    configure_logging(_err_console, verbose=verbose)


@app.command()
def render(
    scenario: str = typer.Argument(..., help="basic | complete | requires_import | template"),
    random_integer: Optional[int] = typer.Option(None, "--random-integer", help="Fixed suffix instead of a random one."),
    location: Optional[str] = typer.Option(None, "--location", help="Primary location override."),
) -> None:
    """Print the Terraform configuration of a test scenario."""

    builder = powerbi_embedded.SCENARIOS.get(scenario)
    if builder is None:
        raise typer.BadParameter(
            f"unknown scenario {scenario!r} (choose from {', '.join(powerbi_embedded.scenario_names())})"
        )

    settings = AcceptanceSettings()
    data = build_test_data(powerbi_embedded.RESOURCE_TYPE, "test", settings)
    update: dict[str, object] = {}
    if random_integer is not None:
        update["random_integer"] = random_integer
    if location:
        update["locations"] = Locations(primary=location, secondary=data.locations.secondary, ternary=data.locations.ternary)
    if update:
        data = data.model_copy(update=update)

    typer.echo(builder(data, settings), nl=False)


@app.command()
def exists(
    resource_group: str = typer.Option(..., "--resource-group", "-g", help="Resource group name."),
    name: str = typer.Option(..., "--name", "-n", help="Capacity name."),
    as_json: bool = typer.Option(False, "--json", help="Print the raw model as JSON."),
) -> None:
    """Look a PowerBI Embedded capacity up (exit 1 when it does not exist)."""

    settings = AcceptanceSettings()
    client = CapacityClient(settings)
    try:
        details = asyncio.run(client.get_details(resource_group, name))
    except CapacityClientError as exc:
        if response_was_not_found(exc.response):
            _err_console.print(f"[yellow]Not found:[/yellow] {name} in {resource_group}")
            raise typer.Exit(code=1) from exc
        _err_console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=2) from exc
    except AuthenticationError as exc:
        _err_console.print(f"[red]Authentication failed:[/red] {exc}")
        raise typer.Exit(code=2) from exc

    if as_json:
        typer.echo(details.model_dump_json(indent=2))
        return
    _console.print(build_capacity_table(details))


def run() -> None:
    app()


if __name__ == "__main__":
    run()
