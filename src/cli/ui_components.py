"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas en `exists` y `doctor`.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from core.domain.models import CapacityDetails


def configure_logging(console: Console, *, verbose: bool = False) -> None:
    """Instala un `RichHandler` en el logger raíz (stderr de la consola dada)."""

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=verbose, rich_tracebacks=True)],
        force=True,
    )


def build_capacity_table(details: CapacityDetails) -> Table:
    table = Table(title=f"PowerBI Embedded: {details.name}")
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")
    table.add_row("Location", details.location or "-")
    table.add_row("SKU", details.sku_name or "-")
    table.add_row("State", details.state or "-")
    table.add_row("Provisioning", details.provisioning_state or "-")
    table.add_row("Administrators", ", ".join(details.administrators) or "-")
    for key in sorted(details.tags):
        table.add_row(f"tags.{key}", details.tags[key])
    return table


def build_doctor_table() -> Table:
    table = Table(title="powerbi-acctest Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")
    return table
