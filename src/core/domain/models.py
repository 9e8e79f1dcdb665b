"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Validación estricta de la configuración antes de tocar la red.
- Modelos inmutables (`frozen`) que se pasan explícitamente a cada componente,
  sin lecturas de entorno escondidas en la lógica de negocio.

Nota:
- Estos modelos describen *qué* se publica, no *cómo* se sube.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class DeployConfig(BaseModel):
    """Configuración validada de un despliegue.

    Por qué existe:
    - Es el único contrato de credenciales/identificadores que ven los
      adaptadores (storage, purge).
    - Se construye solo cuando las siete claves obligatorias están presentes.
    """

    model_config = ConfigDict(frozen=True)

    bunny_region: str = Field(
        ...,
        min_length=1,
        description="Región del storage BunnyCDN ('de'/'primary' = host principal).",
    )
    bunny_bucket: str = Field(
        ...,
        min_length=1,
        description="Nombre de la storage zone (bucket).",
    )
    bunny_bucket_token: str = Field(
        ...,
        min_length=1,
        description="Password/AccessKey de la storage zone.",
    )
    bunny_pullzone_id: str = Field(
        ...,
        min_length=1,
        description="Identificador de la pull zone a purgar.",
    )
    bunny_api_key: str = Field(
        ...,
        min_length=1,
        description="API key de la cuenta BunnyCDN (purge).",
    )
    cloudflare_zone: str = Field(
        ...,
        min_length=1,
        description="Zone ID de Cloudflare.",
    )
    cloudflare_api_key: str = Field(
        ...,
        min_length=1,
        description="Global API key de Cloudflare.",
    )
    cloudflare_email: str | None = Field(
        default=None,
        description="Email de la cuenta Cloudflare (cabecera X-Auth-Email).",
    )


class CandidateFile(BaseModel):
    """Un fichero de la distribución elegible para subir."""

    model_config = ConfigDict(frozen=True)

    path: Path = Field(..., description="Ruta local del fichero.")
    relative_path: str = Field(
        ...,
        min_length=1,
        description="Ruta relativa a la raíz de distribución, con '/' y sin prefijo './'.",
    )


class UploadTarget(BaseModel):
    """Destino remoto de un `CandidateFile`."""

    model_config = ConfigDict(frozen=True)

    url: str
    host: str
    relative_path: str
    source: Path


class UploadResult(BaseModel):
    relative_path: str
    url: str
    size_bytes: int = Field(..., ge=0)
    attempts: int = Field(default=1, ge=1)
