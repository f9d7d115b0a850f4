"""Tipos del harness: pasos y casos de test.

Son dataclasses (no pydantic) porque transportan callables y regex, no datos
que haya que validar o serializar.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable

from core.domain.state import TerraformState

CheckFunc = Callable[[TerraformState], None]


@dataclass
class TestStep:
    """Un paso: aplicar una configuración o importar un recurso ya aplicado.

    - `config` vacío en un paso de import reutiliza la config del paso anterior.
    - `expect_error` exige que el apply falle con un mensaje que haga match.
    """

    __test__ = False

    config: str | None = None
    check: CheckFunc | None = None
    expect_error: re.Pattern[str] | None = None

    import_state: bool = False
    import_state_verify: bool = False
    import_state_verify_ignore: list[str] = field(default_factory=list)
    resource_name: str | None = None


@dataclass
class TestCase:
    """Secuencia de pasos con hooks de pre-check y de verificación del destroy."""

    __test__ = False

    steps: list[TestStep]
    pre_check: Callable[[], None] | None = None
    check_destroy: CheckFunc | None = None
