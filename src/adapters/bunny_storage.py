"""Subida de ficheros al storage de BunnyCDN.

Contrato HTTP:
- `PUT https://{host}/{bucket}/{relative_path}` con `AccessKey: <token>` y
  cuerpo binario (`application/octet-stream`).
- Host: `storage.bunnycdn.com` para 'de'/'primary', si no `<region>.storage.bunnycdn.com`.

Política de fallos: un reintento con salida verbose y, si vuelve a fallar,
`TransportError` (aborta todo el despliegue). Sin backoff.
"""

from __future__ import annotations

from typing import Iterable
from urllib.parse import quote

import httpx

from adapters.http_client import describe_exchange
from core.domain.errors import TransportError
from core.domain.models import CandidateFile, DeployConfig, UploadResult, UploadTarget
from core.interfaces.publisher import DeployHooks

STORAGE_BASE_HOST = "storage.bunnycdn.com"
PRIMARY_REGIONS: frozenset[str] = frozenset({"de", "primary"})
UPLOAD_ATTEMPTS = 2


def storage_host(region: str) -> str:
    region = region.strip().lower()
    if region in PRIMARY_REGIONS:
        return STORAGE_BASE_HOST
    return f"{region}.{STORAGE_BASE_HOST}"


def build_upload_target(config: DeployConfig, candidate: CandidateFile) -> UploadTarget:
    host = storage_host(config.bunny_region)
    key = candidate.relative_path.lstrip("/")
    url = f"https://{host}/{quote(config.bunny_bucket, safe='')}/{quote(key, safe='/')}"
    return UploadTarget(url=url, host=host, relative_path=key, source=candidate.path)


class BunnyStorageUploader:
    """Sube `CandidateFile`s uno a uno a la storage zone configurada."""

    def __init__(
        self,
        config: DeployConfig,
        *,
        client: httpx.Client,
        hooks: DeployHooks | None = None,
        max_attempts: int = UPLOAD_ATTEMPTS,
    ) -> None:
        self._config = config
        self._client = client
        self._hooks = hooks or DeployHooks()
        self._max_attempts = max(1, max_attempts)

    def _headers(self) -> dict[str, str]:
        return {
            "AccessKey": self._config.bunny_bucket_token,
            "Content-Type": "application/octet-stream",
        }

    def upload(self, candidate: CandidateFile) -> UploadResult:
        target = build_upload_target(self._config, candidate)
        try:
            payload = target.source.read_bytes()
        except OSError as exc:
            raise TransportError(f"Failed to read {target.source}: {exc}") from exc

        self._hooks.emit_status(f"Uploading: {target.relative_path} → {target.url}")

        failure = ""
        for attempt in range(1, self._max_attempts + 1):
            verbose = attempt > 1
            request = self._client.build_request(
                "PUT", target.url, content=payload, headers=self._headers()
            )
            response: httpx.Response | None = None
            try:
                response = self._client.send(request)
            except httpx.HTTPError as exc:
                failure = f"{type(exc).__name__}: {exc}"
            else:
                failure = "" if response.is_success else f"HTTP {response.status_code}"

            # el reintento siempre vuelca el intercambio, salga bien o mal
            if verbose:
                for line in describe_exchange(request, response):
                    self._hooks.emit_detail(line)
                if response is None:
                    self._hooks.emit_detail(f"* {failure}")

            if response is not None and response.is_success:
                return UploadResult(
                    relative_path=target.relative_path,
                    url=target.url,
                    size_bytes=len(payload),
                    attempts=attempt,
                )

            if attempt < self._max_attempts:
                self._hooks.emit_warning(f"Failed to upload: {target.relative_path} ({failure})")
                self._hooks.emit_status("Retrying with verbose output...")

        raise TransportError(
            f"Failed to upload {target.relative_path} to {target.url} "
            f"after {self._max_attempts} attempts ({failure})"
        )

    def upload_all(self, candidates: Iterable[CandidateFile]) -> list[UploadResult]:
        """Sube en secuencia; el primer fallo persistente corta el resto."""

        results: list[UploadResult] = []
        for candidate in candidates:
            results.append(self.upload(candidate))
        return results
