"""Contratos de publicadores y del paso de build.

Por qué Protocol:
- Contrato estructural (duck typing) sin herencia rígida.
- El pipeline puede recibir publicadores falsos en tests sin tocar git ni la red.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol, runtime_checkable

from core.domain.errors import PreconditionError


@dataclass
class DeployHooks:
    """Callbacks opcionales para la capa de UI (estado, avisos, diagnóstico).

    Core y adapters nunca imprimen; la CLI los enlaza a una consola Rich.
    """

    status: Callable[[str], None] | None = None
    warning: Callable[[str], None] | None = None
    detail: Callable[[str], None] | None = None

    def emit_status(self, message: str) -> None:
        if self.status:
            self.status(message)

    def emit_warning(self, message: str) -> None:
        if self.warning:
            self.warning(message)

    def emit_detail(self, message: str) -> None:
        if self.detail:
            self.detail(message)


@runtime_checkable
class Publisher(Protocol):
    """Contrato mínimo para un destino de publicación.

    Reglas de diseño:
    - `check_preconditions` no lanza: devuelve el error para que el pipeline
      decida (y lo registre) antes de invocar `publish`.
    - `publish` es bloqueante y lanza `ShipError` ante cualquier fallo fatal.
    """

    name: str

    def check_preconditions(self) -> PreconditionError | None:
        ...

    def publish(self) -> None:
        ...


@runtime_checkable
class BuildStep(Protocol):
    """Paso externo que genera la distribución antes de publicar."""

    def run(self) -> None:
        ...
