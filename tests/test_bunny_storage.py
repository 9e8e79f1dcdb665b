from __future__ import annotations

from pathlib import Path

import httpx
import pytest

from adapters.bunny_storage import BunnyStorageUploader, build_upload_target, storage_host
from adapters.http_client import build_client
from core.config import AppSettings
from core.domain.errors import TransportError
from core.domain.models import CandidateFile, DeployConfig
from core.services.file_selector import select_files


def _candidate(root: Path, rel: str, content: bytes = b"payload") -> CandidateFile:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return CandidateFile(path=path, relative_path=rel)


def _client(handler) -> httpx.Client:
    return build_client(AppSettings(), transport=httpx.MockTransport(handler))


@pytest.mark.parametrize("region", ["primary", "de", "DE"])
def test_primary_regions_use_bare_host(region: str) -> None:
    assert storage_host(region) == "storage.bunnycdn.com"


def test_other_regions_are_prefixed() -> None:
    assert storage_host("ny") == "ny.storage.bunnycdn.com"
    assert storage_host("sg") == "sg.storage.bunnycdn.com"


def test_upload_target_url(deploy_config: DeployConfig, tmp_path: Path) -> None:
    target = build_upload_target(deploy_config, _candidate(tmp_path, "assets/app.js"))

    assert target.url == "https://storage.bunnycdn.com/my-site/assets/app.js"
    assert target.relative_path == "assets/app.js"


def test_upload_target_regional_host_and_quoting(deploy_config: DeployConfig, tmp_path: Path) -> None:
    config = deploy_config.model_copy(update={"bunny_region": "ny"})

    target = build_upload_target(config, _candidate(tmp_path, "img/my logo.png"))

    assert target.host == "ny.storage.bunnycdn.com"
    assert target.url == "https://ny.storage.bunnycdn.com/my-site/img/my%20logo.png"


def test_successful_upload_puts_raw_bytes_with_access_key(
    deploy_config: DeployConfig,
    tmp_path: Path,
    recorded,
) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201, json={"HttpCode": 201, "Message": "File uploaded."})

    with _client(handler) as client:
        uploader = BunnyStorageUploader(deploy_config, client=client, hooks=recorded.hooks())
        result = uploader.upload(_candidate(tmp_path, "index.html", b"<h1>hi</h1>"))

    assert len(seen) == 1
    request = seen[0]
    assert request.method == "PUT"
    assert str(request.url) == "https://storage.bunnycdn.com/my-site/index.html"
    assert request.headers["AccessKey"] == "bucket-token-1234567890"
    assert request.headers["Content-Type"] == "application/octet-stream"
    assert request.content == b"<h1>hi</h1>"
    assert result.attempts == 1
    assert result.size_bytes == len(b"<h1>hi</h1>")
    assert recorded.warnings == []
    assert any("index.html" in s for s in recorded.statuses)


def test_failed_upload_is_retried_once_verbosely(
    deploy_config: DeployConfig,
    tmp_path: Path,
    recorded,
) -> None:
    responses = iter([httpx.Response(500, text="storage hiccup"), httpx.Response(201)])

    def handler(request: httpx.Request) -> httpx.Response:
        return next(responses)

    with _client(handler) as client:
        uploader = BunnyStorageUploader(deploy_config, client=client, hooks=recorded.hooks())
        result = uploader.upload(_candidate(tmp_path, "a.css"))

    assert result.attempts == 2
    assert recorded.warnings == ["Failed to upload: a.css (HTTP 500)"]
    assert "Retrying with verbose output..." in recorded.statuses
    # the first attempt is quiet, the retry dumps its exchange even when it succeeds
    details = "\n".join(recorded.details)
    assert "> PUT https://storage.bunnycdn.com/my-site/a.css" in details
    assert "< HTTP 201" in details
    assert "storage hiccup" not in details
    assert "bucket-token-1234567890" not in details


def test_persistent_failure_stops_after_two_attempts(
    deploy_config: DeployConfig,
    tmp_path: Path,
    recorded,
) -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(401, text='{"Message":"Unauthorized"}')

    with _client(handler) as client:
        uploader = BunnyStorageUploader(deploy_config, client=client, hooks=recorded.hooks())
        with pytest.raises(TransportError, match="a.css"):
            uploader.upload(_candidate(tmp_path, "a.css"))

    assert len(calls) == 2
    details = "\n".join(recorded.details)
    assert "> PUT https://storage.bunnycdn.com/my-site/a.css" in details
    assert "< HTTP 401" in details
    assert "Unauthorized" in details
    assert "bucket-token-1234567890" not in details
    assert "bucket-tok..." in details


def test_transport_errors_are_retried_then_fatal(
    deploy_config: DeployConfig,
    tmp_path: Path,
    recorded,
) -> None:
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        raise httpx.ConnectError("connection refused", request=request)

    with _client(handler) as client:
        uploader = BunnyStorageUploader(deploy_config, client=client, hooks=recorded.hooks())
        with pytest.raises(TransportError, match="ConnectError"):
            uploader.upload(_candidate(tmp_path, "a.css"))

    assert calls == 2
    assert any("connection refused" in d for d in recorded.details)


def test_failing_upload_aborts_remaining_files(deploy_config: DeployConfig, tmp_path: Path, tree) -> None:
    tree(tmp_path / "dist", {"a.html": "a", "b.html": "b", "c.html": "c"})
    requested: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(request.url.path)
        if request.url.path.endswith("/b.html"):
            return httpx.Response(500)
        return httpx.Response(201)

    with _client(handler) as client:
        uploader = BunnyStorageUploader(deploy_config, client=client)
        with pytest.raises(TransportError):
            uploader.upload_all(select_files(tmp_path / "dist"))

    assert requested == ["/my-site/a.html", "/my-site/b.html", "/my-site/b.html"]


def test_unreadable_file_is_a_transport_error(deploy_config: DeployConfig, tmp_path: Path) -> None:
    def handler(request: httpx.Request) -> httpx.Response:  # pragma: no cover - never reached
        return httpx.Response(201)

    ghost = CandidateFile(path=tmp_path / "ghost.html", relative_path="ghost.html")
    with _client(handler) as client:
        with pytest.raises(TransportError, match="Failed to read"):
            BunnyStorageUploader(deploy_config, client=client).upload(ghost)
