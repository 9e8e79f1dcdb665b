"""Publicación de la distribución en el repositorio git.

Flujo: `git add <dist>` → `git diff --cached --quiet` → `git commit -m
"Ship dist HH:MM at YYYY-MM-DD"` → `git push <remote> HEAD`.

Un commit sin cambios no es un error (warning y seguimos). Cualquier otro
fallo de commit o push aborta: sin rebase ni reintento automático.

Notas:
- git se ejecuta con `LC_ALL=C`/`LANGUAGE=C`: los mensajes que se comparan
  son los ingleses, sea cual sea el idioma del usuario.
- "Sin cambios" se decide por el exit code de `git diff --cached --quiet`;
  el texto de `git commit` queda solo como segunda red.
"""

from __future__ import annotations

import os
import shutil
import subprocess
from datetime import datetime
from pathlib import Path
from typing import Callable, Mapping, Sequence

from core.domain.errors import PreconditionError, TransportError
from core.interfaces.publisher import DeployHooks

Runner = Callable[..., "subprocess.CompletedProcess[str]"]

_NOTHING_TO_COMMIT_MARKERS: tuple[str, ...] = (
    "nothing to commit",
    "nothing added to commit",
    "no changes added to commit",
)

_UNTRANSLATED_ENV: dict[str, str] = {"LC_ALL": "C", "LANGUAGE": "C"}


def commit_message(now: datetime) -> str:
    return f"Ship dist {now:%H:%M} at {now:%Y-%m-%d}"


def is_nothing_to_commit(output: str) -> bool:
    lowered = output.lower()
    return any(marker in lowered for marker in _NOTHING_TO_COMMIT_MARKERS)


def git_environment(base: Mapping[str, str] | None = None) -> dict[str, str]:
    """Entorno del proceso con la salida de git forzada a inglés."""

    env = dict(os.environ if base is None else base)
    env.update(_UNTRANSLATED_ENV)
    return env


class GitRepoPublisher:
    """Publisher `repo`: stage + commit + push del directorio de distribución."""

    name = "repo"

    def __init__(
        self,
        dist_dir: Path,
        *,
        remote: str = "origin",
        workdir: Path | None = None,
        runner: Runner = subprocess.run,
        clock: Callable[[], datetime] = datetime.now,
        which: Callable[[str], str | None] = shutil.which,
        hooks: DeployHooks | None = None,
    ) -> None:
        self._dist_dir = dist_dir
        self._remote = remote
        self._workdir = workdir or Path.cwd()
        self._runner = runner
        self._clock = clock
        self._which = which
        self._hooks = hooks or DeployHooks()

    def _dist_path(self) -> Path:
        if self._dist_dir.is_absolute():
            return self._dist_dir
        return self._workdir / self._dist_dir

    def check_preconditions(self) -> PreconditionError | None:
        if not self._dist_path().is_dir():
            return PreconditionError(f"Distribution directory '{self._dist_dir}' does not exist!")
        if not (self._workdir / ".git").exists():
            return PreconditionError(f"'{self._workdir}' is not a git repository!")
        if self._which("git") is None:
            return PreconditionError("git executable not found on PATH")
        return None

    def _git(self, *args: str) -> "subprocess.CompletedProcess[str]":
        command: Sequence[str] = ("git", *args)
        return self._runner(
            list(command),
            cwd=self._workdir,
            env=git_environment(),
            capture_output=True,
            text=True,
            check=False,
        )

    @staticmethod
    def _output(proc: "subprocess.CompletedProcess[str]") -> str:
        return "\n".join(part for part in (proc.stdout, proc.stderr) if part).strip()

    def _has_staged_changes(self) -> bool:
        diff = self._git("diff", "--cached", "--quiet")
        if diff.returncode == 0:
            return False
        if diff.returncode == 1:
            return True
        raise TransportError(f"git diff --cached failed: {self._output(diff)}")

    def _commit(self) -> None:
        if not self._has_staged_changes():
            self._hooks.emit_warning("Nothing to commit.")
            return

        message = commit_message(self._clock())
        commit = self._git("commit", "-m", message)
        if commit.returncode == 0:
            self._hooks.emit_detail(f"Committed: {message}")
            return

        output = self._output(commit)
        if not is_nothing_to_commit(output):
            raise TransportError(f"git commit failed: {output}")
        self._hooks.emit_warning("Nothing to commit.")

    def publish(self) -> None:
        self._hooks.emit_status("Pushing dist to Git...")

        add = self._git("add", str(self._dist_dir))
        if add.returncode != 0:
            raise TransportError(f"git add failed: {self._output(add)}")

        self._commit()

        push = self._git("push", self._remote, "HEAD")
        if push.returncode != 0:
            raise TransportError(f"git push {self._remote} HEAD failed: {self._output(push)}")

        self._hooks.emit_status("Git push complete.")
