"""Orquestación de tests de aceptación.

Este módulo ejecuta un `TestCase` contra Terraform real: aplica cada paso,
corre los checks, verifica imports y siempre intenta destruir lo creado.
Los tests (pytest) solo declaran configuraciones y checks; todo el ciclo
plan/apply/import/destroy vive aquí.
"""

from __future__ import annotations

import logging
import re
import shutil
import tempfile
from pathlib import Path
from typing import Callable

import pytest

from adapters.terraform_cli import TerraformCLI
from core.config import AcceptanceSettings
from core.domain.errors import (
    CheckError,
    ImportVerifyError,
    PreCheckError,
    StepError,
    TerraformCommandError,
)
from core.domain.harness import TestCase, TestStep
from core.domain.models import Locations, TestData, random_string, random_time_int
from core.domain.state import TerraformState
from core.interfaces.runners import TerraformRunner

logger = logging.getLogger(__name__)

RunnerFactory = Callable[[Path], TerraformRunner]

# Atributos que nunca se comparan en un import.
_IMPORT_VERIFY_ALWAYS_IGNORED = ("timeouts",)


def build_test_data(
    resource_type: str,
    resource_label: str,
    settings: AcceptanceSettings | None = None,
) -> TestData:
    settings = settings or AcceptanceSettings()
    return TestData(
        resource_type=resource_type,
        resource_label=resource_label,
        random_integer=random_time_int(),
        random_string=random_string(5),
        locations=Locations(
            primary=settings.test_location or "westeurope",
            secondary=settings.test_location_alt,
            ternary=settings.test_location_alt2,
        ),
    )


def pre_check(settings: AcceptanceSettings | None = None) -> None:
    """Falla si faltan credenciales o regiones para crear infraestructura."""

    settings = settings or AcceptanceSettings()
    missing = settings.missing_precheck_variables()
    if missing:
        raise PreCheckError(
            "; ".join(f"`{name}` must be set for acceptance tests!" for name in missing)
        )


def requires_import_error(resource_type: str) -> re.Pattern[str]:
    """Error que da el provider al crear un recurso que ya existe fuera del state."""

    message = (
        "to be managed via Terraform this resource needs to be imported into the State. "
        f'Please see the resource documentation for "{resource_type}" for more information.'
    )
    return re.compile(re.escape(message))


def _default_runner_factory(settings: AcceptanceSettings) -> RunnerFactory:
    def _factory(workdir: Path) -> TerraformRunner:
        return TerraformCLI(workdir, settings=settings)

    return _factory


def parallel_test(
    case: TestCase,
    *,
    settings: AcceptanceSettings | None = None,
    runner_factory: RunnerFactory | None = None,
    workdir: Path | None = None,
) -> None:
    """Ejecuta un test case completo.

    Cada llamada usa su propio directorio de trabajo (y state), así que los
    casos corren en paralelo bajo pytest-xdist (`pytest -n auto -m acceptance`)
    sin interferir. El directorio temporal se borra siempre, también si un
    paso falla, salvo con `TF_ACC_KEEP_WORKDIR`.
    """

    settings = settings or AcceptanceSettings()
    if not settings.tf_acc:
        pytest.skip("Acceptance tests skipped unless env 'TF_ACC' set")

    if case.pre_check is not None:
        case.pre_check()

    owns_workdir = workdir is None
    workdir = workdir or Path(tempfile.mkdtemp(prefix="acctest-"))
    factory = runner_factory or _default_runner_factory(settings)
    runner = factory(workdir)
    logger.info("running %d step(s) in %s", len(case.steps), workdir)

    run = _CaseRun(runner)
    try:
        run.run_steps(case.steps)
    finally:
        try:
            if run.applied:
                run.destroy(case)
        finally:
            if owns_workdir and not settings.keep_workdir:
                shutil.rmtree(workdir, ignore_errors=True)
            elif owns_workdir:
                logger.info("keeping working directory %s", workdir)


class _CaseRun:
    """Estado mutable de una ejecución (config actual, state, init hecho)."""

    def __init__(self, runner: TerraformRunner) -> None:
        self.runner = runner
        self.state = TerraformState.empty()
        self.config: str | None = None
        self.initialized = False
        self.applied = False

    def run_steps(self, steps: list[TestStep]) -> None:
        for number, step in enumerate(steps, start=1):
            if step.import_state:
                logger.info("step %d: import %s", number, step.resource_name)
                self._import_step(number, step)
            else:
                logger.info("step %d: apply", number)
                self._config_step(number, step)

    def _write(self, config: str) -> None:
        self.runner.write_config(config)
        self.config = config
        if not self.initialized:
            self.runner.init()
            self.initialized = True

    def _config_step(self, number: int, step: TestStep) -> None:
        if not step.config:
            raise StepError(number, "config step without configuration")
        self._write(step.config)

        if step.expect_error is not None:
            self._expect_apply_error(number, step.expect_error)
            return

        self.applied = True
        try:
            self.runner.apply()
        except TerraformCommandError as exc:
            raise StepError(number, f"error applying configuration:\n{exc.output}") from exc

        self.state = self.runner.show_state()
        if step.check is not None:
            try:
                step.check(self.state)
            except CheckError as exc:
                raise StepError(number, f"Check failed: {exc}") from exc

        changed, plan_output = self.runner.plan_has_changes()
        if changed:
            raise StepError(
                number,
                "After applying this step, the plan was not empty.\n\n" + plan_output,
            )

    def _expect_apply_error(self, number: int, pattern: re.Pattern[str]) -> None:
        # Un apply fallido puede haber creado recursos a medias.
        self.applied = True
        try:
            self.runner.apply()
        except TerraformCommandError as exc:
            output = exc.output
            self.state = self.runner.show_state()
            if not pattern.search(output):
                raise StepError(
                    number,
                    f"expected an error matching {pattern.pattern!r}, got:\n{output}",
                ) from exc
            logger.info("step %d: got expected error", number)
            return
        raise StepError(number, f"expected an error matching {pattern.pattern!r} but got none")

    def _import_step(self, number: int, step: TestStep) -> None:
        if step.config:
            self._write(step.config)
        if self.config is None:
            raise StepError(number, "import step requires a previous configuration")
        if not step.resource_name:
            raise StepError(number, "import step without resource_name")

        applied = self.state.resources.get(step.resource_name)
        if applied is None or not applied.id:
            raise StepError(number, f"resource {step.resource_name} not found in state, nothing to import")

        try:
            imported_state = self.runner.import_resource(step.resource_name, applied.id)
        except TerraformCommandError as exc:
            raise StepError(number, f"error importing {applied.id}:\n{exc.output}") from exc

        if not step.import_state_verify:
            return

        imported = imported_state.resources.get(step.resource_name)
        if imported is None:
            raise StepError(number, f"import of {applied.id} did not produce {step.resource_name}")

        ignore = tuple(step.import_state_verify_ignore) + _IMPORT_VERIFY_ALWAYS_IGNORED
        differences = diff_attributes(imported.attributes, applied.attributes, ignore=ignore)
        if differences:
            raise ImportVerifyError(number, step.resource_name, differences)

    def destroy(self, case: TestCase) -> None:
        state = self.runner.show_state()
        logger.info("destroying %d resource(s)", len(state.resources))
        self.runner.destroy()
        if case.check_destroy is not None:
            case.check_destroy(state)


def diff_attributes(
    actual: dict[str, str],
    expected: dict[str, str],
    *,
    ignore: tuple[str, ...] = (),
) -> dict[str, tuple[str | None, str | None]]:
    """Pares `clave -> (actual, esperado)` que difieren, saltando prefijos ignorados."""

    out: dict[str, tuple[str | None, str | None]] = {}
    for key in set(actual) | set(expected):
        if key.startswith(ignore):
            continue
        if actual.get(key) != expected.get(key):
            out[key] = (actual.get(key), expected.get(key))
    return out
