from __future__ import annotations

import json

import httpx
import pytest

from adapters.cache_purge import CachePurger, bunny_purge_url, cloudflare_purge_url
from core.domain.errors import ConfigurationError, TransportError
from core.domain.models import DeployConfig


def _purger(config: DeployConfig, handler, hooks=None) -> CachePurger:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return CachePurger(config, client=client, hooks=hooks)


def test_purge_urls() -> None:
    assert bunny_purge_url("42") == "https://api.bunny.net/pullzone/42/purgeCache"
    assert cloudflare_purge_url("z1") == "https://api.cloudflare.com/client/v4/zones/z1/purge_cache"


def test_purges_bunny_then_cloudflare(deploy_config: DeployConfig, recorded) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"success": True})

    _purger(deploy_config, handler, recorded.hooks()).purge_all()

    assert [(r.method, str(r.url)) for r in seen] == [
        ("POST", "https://api.bunny.net/pullzone/424242/purgeCache"),
        ("POST", "https://api.cloudflare.com/client/v4/zones/cf-zone-id/purge_cache"),
    ]
    bunny, cloudflare = seen
    assert bunny.headers["AccessKey"] == "bunny-api-key-abcdef"
    assert cloudflare.headers["X-Auth-Key"] == "cf-api-key-0987654321"
    assert cloudflare.headers["X-Auth-Email"] == "ops@example.com"
    assert cloudflare.headers["Content-Type"] == "application/json"
    assert json.loads(cloudflare.content) == {"purge_everything": True}
    assert len(recorded.statuses) == 2


def test_first_failure_skips_second_purge(deploy_config: DeployConfig) -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.host)
        return httpx.Response(401)

    with pytest.raises(TransportError, match="Bunny"):
        _purger(deploy_config, handler).purge_all()

    assert seen == ["api.bunny.net"]


def test_cloudflare_failure_is_fatal(deploy_config: DeployConfig) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "api.cloudflare.com":
            return httpx.Response(403, json={"success": False})
        return httpx.Response(200)

    with pytest.raises(TransportError, match="Cloudflare cache: HTTP 403"):
        _purger(deploy_config, handler).purge_all()


def test_purge_network_error_is_not_retried(deploy_config: DeployConfig) -> None:
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(TransportError):
        _purger(deploy_config, handler).purge_all()

    assert calls == 1


def test_cloudflare_purge_without_email_sends_nothing(deploy_config: DeployConfig) -> None:
    config = deploy_config.model_copy(update={"cloudflare_email": None})
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200)

    with pytest.raises(ConfigurationError) as excinfo:
        _purger(config, handler).purge_edge()

    assert excinfo.value.missing == ["TS_CLOUDFLARE_EMAIL"]
    assert seen == []
