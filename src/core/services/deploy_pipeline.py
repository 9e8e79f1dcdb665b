"""Orquestación del despliegue.

Por qué aquí:
- La máquina de estados vive en el Core; la CLI solo parsea, construye
  colaboradores y pinta.
- Flujo estrictamente secuencial y fail-fast:

    start -> building -> publishing-repo -> publishing-cdn -> done
                 \\              \\                 \\
                  +--------------+-----------------+--> failed

Los publicadores los elige `RunMode` (repo siempre antes que cdn). Las
precondiciones de cada uno se comprueban justo antes de ejecutarlo; el primer
`ShipError` (build, precondición o transporte) termina la ejecución.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping

from core.domain.errors import ShipError
from core.domain.mode import RunMode
from core.interfaces.publisher import BuildStep, Publisher


class DeployState(str, Enum):
    START = "start"
    BUILDING = "building"
    PUBLISHING_REPO = "publishing-repo"
    PUBLISHING_CDN = "publishing-cdn"
    DONE = "done"
    FAILED = "failed"


_PUBLISHING_STATES: dict[str, DeployState] = {
    "repo": DeployState.PUBLISHING_REPO,
    "cdn": DeployState.PUBLISHING_CDN,
}


@dataclass
class DeployResult:
    """Resultado de una ejecución del pipeline."""

    mode: RunMode
    state: DeployState = DeployState.START
    history: list[DeployState] = field(default_factory=lambda: [DeployState.START])
    published: list[str] = field(default_factory=list)
    error: ShipError | None = None

    @property
    def ok(self) -> bool:
        return self.state is DeployState.DONE

    def transition(self, state: DeployState) -> None:
        self.state = state
        self.history.append(state)


def run_deploy(
    *,
    mode: RunMode,
    publishers: Mapping[str, Publisher],
    build: BuildStep | None = None,
) -> DeployResult:
    """Ejecuta el build y los publicadores que selecciona `mode`.

    `build=None` omite el build. Los publicadores fuera de `mode` no se tocan,
    ni siquiera para comprobar precondiciones.
    """

    result = DeployResult(mode=mode)

    missing = [name for name in mode.publisher_names() if name not in publishers]
    if missing:
        raise KeyError(f"No publisher registered for: {', '.join(missing)}")

    try:
        if build is not None:
            result.transition(DeployState.BUILDING)
            build.run()

        for name in mode.publisher_names():
            publisher = publishers[name]
            result.transition(_PUBLISHING_STATES[name])
            error = publisher.check_preconditions()
            if error is not None:
                raise error
            publisher.publish()
            result.published.append(name)
    except ShipError as exc:
        result.error = exc
        result.transition(DeployState.FAILED)
        return result

    result.transition(DeployState.DONE)
    return result
