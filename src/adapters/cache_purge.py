"""Purga de cachés de borde (BunnyCDN pull zone + Cloudflare zone).

Orden fijo: Bunny primero, Cloudflare después. Cada fallo es fatal al
instante (sin reintento) y la segunda purga solo se intenta si la primera
fue bien. Sin `TS_CLOUDFLARE_EMAIL` la purga de Cloudflare no sale:
el error de configuración llega antes de cualquier request.
"""

from __future__ import annotations

import httpx

from core.config import CDN_REQUIRED_ENV_KEYS
from core.domain.errors import ConfigurationError, TransportError
from core.domain.models import DeployConfig
from core.interfaces.publisher import DeployHooks

BUNNY_API_BASE = "https://api.bunny.net"
CLOUDFLARE_API_BASE = "https://api.cloudflare.com/client/v4"


def bunny_purge_url(pullzone_id: str) -> str:
    return f"{BUNNY_API_BASE}/pullzone/{pullzone_id}/purgeCache"


def cloudflare_purge_url(zone_id: str) -> str:
    return f"{CLOUDFLARE_API_BASE}/zones/{zone_id}/purge_cache"


class CachePurger:
    def __init__(
        self,
        config: DeployConfig,
        *,
        client: httpx.Client,
        hooks: DeployHooks | None = None,
    ) -> None:
        self._config = config
        self._client = client
        self._hooks = hooks or DeployHooks()

    def _post(self, label: str, url: str, **kwargs: object) -> httpx.Response:
        self._hooks.emit_status(f"FLUSHING {label} CACHE: {url}")
        try:
            response = self._client.post(url, **kwargs)  # type: ignore[arg-type]
        except httpx.HTTPError as exc:
            raise TransportError(f"Failed to flush {label.title()} cache: {exc}") from exc
        if not response.is_success:
            raise TransportError(
                f"Failed to flush {label.title()} cache: HTTP {response.status_code}"
            )
        return response

    def purge_pullzone(self) -> httpx.Response:
        return self._post(
            "BUNNY",
            bunny_purge_url(self._config.bunny_pullzone_id),
            headers={
                "AccessKey": self._config.bunny_api_key,
                "Content-Type": "application/json",
            },
        )

    def purge_edge(self) -> httpx.Response:
        if not self._config.cloudflare_email:
            raise ConfigurationError(CDN_REQUIRED_ENV_KEYS)
        return self._post(
            "CLOUDFLARE",
            cloudflare_purge_url(self._config.cloudflare_zone),
            headers={
                "Content-Type": "application/json",
                "X-Auth-Email": self._config.cloudflare_email,
                "X-Auth-Key": self._config.cloudflare_api_key,
            },
            json={"purge_everything": True},
        )

    def purge_all(self) -> None:
        self.purge_pullzone()
        self.purge_edge()
