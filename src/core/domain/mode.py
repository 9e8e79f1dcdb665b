"""Modos de ejecución de ship-dist.

Por qué en el dominio:
- El modo sale del primer argumento posicional y decide qué publicadores corren.
- CLI y pipeline lo comparten sin importarse entre sí.
"""

from __future__ import annotations

from enum import Enum

from core.domain.errors import UsageError


class RunMode(str, Enum):
    """Qué publicadores ejecuta un despliegue."""

    REPO = "repo"
    CDN = "cdn"
    BOTH = "both"

    @classmethod
    def default(cls) -> "RunMode":
        return cls.BOTH

    @classmethod
    def parse(cls, value: str | None) -> "RunMode":
        """Parsea el argumento de la CLI; `None` o vacío = modo por defecto."""

        if value is None or not value.strip():
            return cls.default()
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise UsageError(f"Invalid argument: {value}") from None

    def publisher_names(self) -> tuple[str, ...]:
        """Nombres de publicadores en orden de ejecución (repo siempre antes que cdn)."""

        if self is RunMode.REPO:
            return ("repo",)
        if self is RunMode.CDN:
            return ("cdn",)
        return ("repo", "cdn")

    def label(self) -> str:
        descriptions = {
            RunMode.REPO: "Only push to git repository",
            RunMode.CDN: "Only upload to CDN and flush caches",
            RunMode.BOTH: "Push to git and upload to CDN (default)",
        }
        return descriptions[self]
