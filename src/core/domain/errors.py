"""Errores del dominio de despliegue.

Por qué una jerarquía propia:
- El orquestador solo necesita saber "esto aborta el despliegue" (`ShipError`).
- La CLI decide el mensaje y el exit code según la subclase.
"""

from __future__ import annotations

from typing import Iterable, Mapping


class ShipError(Exception):
    """Base de todos los errores fatales de un despliegue."""


class ConfigurationError(ShipError):
    """Claves obligatorias ausentes/vacías o valores que no validan.

    - `missing`: claves `TS_*` sin valor, en orden fijo.
    - `invalid`: clave `TS_*` -> motivo del rechazo.
    """

    def __init__(
        self,
        missing: Iterable[str] = (),
        *,
        invalid: Mapping[str, str] | None = None,
    ) -> None:
        self.missing = list(missing)
        self.invalid = dict(invalid or {})
        parts: list[str] = []
        if self.missing:
            parts.append(f"Required configuration missing: {', '.join(self.missing)}")
        if self.invalid:
            shown = ", ".join(f"{key} ({reason})" for key, reason in self.invalid.items())
            parts.append(f"Invalid configuration: {shown}")
        super().__init__("; ".join(parts) or "Invalid configuration")


class PreconditionError(ShipError):
    """Un publicador no puede arrancar (falta directorio, repositorio o binario)."""


class TransportError(ShipError):
    """Falló una subida, una purga, un commit o un push."""


class UsageError(ShipError):
    """Argumentos de línea de comandos no reconocidos."""


class BuildError(ShipError):
    """El comando de build externo falló."""
