"""Runner de Terraform sobre el binario (`subprocess`).

Un `TerraformCLI` gestiona un único directorio de trabajo: `main.tf`, el
state local (`terraform.tfstate`) y un state auxiliar para imports.
"""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path

from core.config import AcceptanceSettings
from core.domain.errors import TerraformCommandError
from core.domain.state import TerraformState
from core.interfaces.runners import CommandResult

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "main.tf"
IMPORT_STATE_FILENAME = "import.tfstate"


class TerraformCLI:
    """Implementación de `TerraformRunner` con el binario real."""

    def __init__(self, workdir: Path, *, settings: AcceptanceSettings | None = None) -> None:
        self._settings = settings or AcceptanceSettings()
        self.workdir = Path(workdir)
        self.workdir.mkdir(parents=True, exist_ok=True)

    def _env(self) -> dict[str, str]:
        env = dict(os.environ)
        env.update(self._settings.provider_environment())
        env["TF_IN_AUTOMATION"] = "1"
        env["TF_INPUT"] = "0"
        return env

    def run(self, *args: str, check: bool = True, ok_codes: tuple[int, ...] = (0,)) -> CommandResult:
        """Ejecuta `terraform <args>` en el directorio de trabajo."""

        cmd = [self._settings.terraform_path, *args]
        logger.debug("exec %s (cwd=%s)", " ".join(cmd), self.workdir)
        proc = subprocess.run(
            cmd,
            cwd=self.workdir,
            env=self._env(),
            capture_output=True,
            text=True,
            timeout=self._settings.terraform_timeout_seconds,
            check=False,
        )
        result = CommandResult(
            args=cmd,
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
            returncode=proc.returncode,
        )
        if check and result.returncode not in ok_codes:
            raise TerraformCommandError(result)
        return result

    def version(self) -> str:
        res = self.run("version", check=False)
        text = (res.stdout or res.stderr).strip()
        return text.splitlines()[0] if text else ""

    def write_config(self, config: str) -> None:
        (self.workdir / CONFIG_FILENAME).write_text(config, encoding="utf-8")

    def init(self) -> CommandResult:
        return self.run("init", "-input=false", "-no-color")

    def apply(self) -> CommandResult:
        return self.run("apply", "-input=false", "-auto-approve", "-no-color")

    def plan_has_changes(self) -> tuple[bool, str]:
        # -detailed-exitcode: 0 = sin cambios, 2 = cambios, 1 = error.
        res = self.run("plan", "-input=false", "-no-color", "-detailed-exitcode", ok_codes=(0, 2))
        return res.returncode == 2, res.stdout

    def show_state(self, state_file: str | None = None) -> TerraformState:
        args = ["show", "-json", "-no-color"]
        if state_file:
            args.append(state_file)
        res = self.run(*args)
        if not res.stdout.strip():
            return TerraformState.empty()
        return TerraformState.from_show_json(res.stdout)

    def import_resource(self, address: str, import_id: str) -> TerraformState:
        """Importa en un state aparte para no tocar el state del test."""

        state_path = self.workdir / IMPORT_STATE_FILENAME
        state_path.unlink(missing_ok=True)
        try:
            self.run("import", "-input=false", "-no-color", f"-state={IMPORT_STATE_FILENAME}", address, import_id)
            return self.show_state(IMPORT_STATE_FILENAME)
        finally:
            state_path.unlink(missing_ok=True)

    def destroy(self) -> CommandResult:
        return self.run("destroy", "-input=false", "-auto-approve", "-no-color")
