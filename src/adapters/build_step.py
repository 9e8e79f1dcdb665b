"""Paso de build externo (p.ej. `npm run minify`).

El build no es parte de este proyecto: solo se invoca y se traduce su exit
code. La salida del comando va directa a la terminal.
"""

from __future__ import annotations

import shlex
import subprocess
from pathlib import Path
from typing import Callable

from core.domain.errors import BuildError
from core.interfaces.publisher import DeployHooks


class CommandBuildStep:
    def __init__(
        self,
        command: str,
        *,
        workdir: Path | None = None,
        runner: Callable[..., "subprocess.CompletedProcess[str]"] = subprocess.run,
        hooks: DeployHooks | None = None,
    ) -> None:
        self.command = command
        self._argv = shlex.split(command)
        self._workdir = workdir
        self._runner = runner
        self._hooks = hooks or DeployHooks()

    def run(self) -> None:
        if not self._argv:
            raise BuildError("Build command is empty")

        self._hooks.emit_status(f"Building: {self.command}")
        try:
            proc = self._runner(self._argv, cwd=self._workdir, check=False)
        except FileNotFoundError as exc:
            raise BuildError(f"Build command not found: {self._argv[0]}") from exc
        if proc.returncode != 0:
            raise BuildError(f"Build command failed with exit code {proc.returncode}: {self.command}")
