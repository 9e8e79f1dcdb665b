"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno `TS_*` (pydantic-settings) sin contaminar la CLI.
- Convierte la configuración cruda en un `DeployConfig` inmutable, o falla
  nombrando todas las claves ausentes antes de cualquier acción de red.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.domain.errors import ConfigurationError
from core.domain.models import DeployConfig

ENV_PREFIX = "TS_"

# Orden estable: es el orden en que se listan en la ayuda y en los errores.
REQUIRED_FIELDS: tuple[str, ...] = (
    "bunny_region",
    "bunny_bucket",
    "bunny_bucket_token",
    "bunny_pullzone_id",
    "bunny_api_key",
    "cloudflare_zone",
    "cloudflare_api_key",
)

SECRET_FIELDS: frozenset[str] = frozenset(
    {"bunny_bucket_token", "bunny_api_key", "cloudflare_api_key"}
)

# Solo para el modo cdn/both: la purga de Cloudflare envía X-Auth-Email.
CDN_REQUIRED_FIELDS: tuple[str, ...] = ("cloudflare_email",)


def env_name(field_name: str) -> str:
    """`bunny_region` -> `TS_BUNNY_REGION`."""

    return f"{ENV_PREFIX}{field_name.upper()}"


REQUIRED_ENV_KEYS: tuple[str, ...] = tuple(env_name(name) for name in REQUIRED_FIELDS)
CDN_REQUIRED_ENV_KEYS: tuple[str, ...] = tuple(env_name(name) for name in CDN_REQUIRED_FIELDS)


def mask_secret(value: str | None, visible: int = 10) -> str:
    """`abcdefghijklmnop` -> `abcdefghij... (16 chars)`."""

    if not value:
        return "<unset>"
    return f"{value[:visible]}... ({len(value)} chars)"


def strip_quotes(value: str) -> str:
    return value.replace('"', "").replace("'", "").strip()


def parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = strip_quotes(value)
        if key:
            data[key] = value
    return data


def write_env_vars(env_path: Path, values: dict[str, str | None]) -> Path:
    """Escribe/actualiza variables en un fichero `.env` conservando las existentes."""

    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# ship-dist deploy config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars / `.env`) sin ensuciar el Core.
    - Las claves obligatorias se declaran opcionales; `to_deploy_config`
      reporta todas las ausentes juntas.
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        extra="ignore",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    bunny_region: str | None = Field(default=None, description="Región del storage BunnyCDN.")
    bunny_bucket: str | None = Field(default=None, description="Storage zone (bucket).")
    bunny_bucket_token: str | None = Field(default=None, description="AccessKey de la storage zone.")
    bunny_pullzone_id: str | None = Field(default=None, description="ID de la pull zone.")
    bunny_api_key: str | None = Field(default=None, description="API key de BunnyCDN.")
    cloudflare_zone: str | None = Field(default=None, description="Zone ID de Cloudflare.")
    cloudflare_api_key: str | None = Field(default=None, description="API key de Cloudflare.")

    cloudflare_email: str | None = Field(
        default=None,
        description="Email de la cuenta Cloudflare (X-Auth-Email).",
    )

    dist_dir: Path = Field(
        default=Path("./"),
        description="Raíz de la distribución a publicar.",
    )
    build_command: str = Field(
        default="npm run minify",
        description="Comando de build ejecutado antes de publicar ('' = sin build).",
    )
    git_remote: str = Field(
        default="origin",
        min_length=1,
        description="Remoto al que se hace `git push <remote> HEAD`.",
    )
    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout por request (segundos).",
    )
    user_agent: str = Field(
        default="ship-dist/0.1",
        min_length=1,
        description="User-Agent para las APIs de storage/purge.",
    )

    @field_validator("*", mode="before")
    @classmethod
    def _sanitize_quotes(cls, value: Any) -> Any:
        if isinstance(value, str):
            return strip_quotes(value)
        return value

    def missing_required_keys(self, *, cdn: bool = False) -> list[str]:
        """Claves `TS_*` ausentes; con `cdn=True` incluye las de la purga."""

        fields = (*REQUIRED_FIELDS, *CDN_REQUIRED_FIELDS) if cdn else REQUIRED_FIELDS
        return [env_name(name) for name in fields if not getattr(self, name)]

    def to_deploy_config(self, *, cdn: bool = False) -> DeployConfig:
        missing = self.missing_required_keys(cdn=cdn)
        if missing:
            raise ConfigurationError(missing)
        return DeployConfig(
            **{name: getattr(self, name) for name in REQUIRED_FIELDS},
            cloudflare_email=self.cloudflare_email or None,
        )


def _invalid_settings(exc: ValidationError) -> dict[str, str]:
    invalid: dict[str, str] = {}
    for error in exc.errors():
        loc = error.get("loc") or ()
        key = env_name(str(loc[0])) if loc else f"{ENV_PREFIX}*"
        invalid.setdefault(key, error.get("msg", "invalid value"))
    return invalid


def load_settings(env_file: Path | None = None, **overrides: Any) -> AppSettings:
    """Carga settings desde entorno + `.env` (o el fichero indicado).

    Un valor que no valida (p. ej. `TS_HTTP_TIMEOUT_SECONDS=abc`) se reporta
    como `ConfigurationError` con la clave `TS_*` afectada.
    """

    try:
        if env_file is None:
            return AppSettings(**overrides)
        return AppSettings(_env_file=env_file, **overrides)
    except ValidationError as exc:
        raise ConfigurationError(invalid=_invalid_settings(exc)) from exc


def load_deploy_config(
    env_file: Path | None = None,
    *,
    cdn: bool = False,
    **overrides: Any,
) -> DeployConfig:
    return load_settings(env_file, **overrides).to_deploy_config(cdn=cdn)
