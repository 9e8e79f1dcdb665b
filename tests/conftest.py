from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from core.config import CDN_REQUIRED_ENV_KEYS, REQUIRED_ENV_KEYS
from core.domain.models import DeployConfig
from core.interfaces.publisher import DeployHooks

VALID_ENV: dict[str, str] = {
    "TS_BUNNY_REGION": "de",
    "TS_BUNNY_BUCKET": "my-site",
    "TS_BUNNY_BUCKET_TOKEN": "bucket-token-1234567890",
    "TS_BUNNY_PULLZONE_ID": "424242",
    "TS_BUNNY_API_KEY": "bunny-api-key-abcdef",
    "TS_CLOUDFLARE_ZONE": "cf-zone-id",
    "TS_CLOUDFLARE_API_KEY": "cf-api-key-0987654321",
}

CDN_ENV: dict[str, str] = {"TS_CLOUDFLARE_EMAIL": "ops@example.com"}


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    for key in list(os.environ):
        if key.upper().startswith("TS_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def full_env(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    for key, value in {**VALID_ENV, **CDN_ENV}.items():
        monkeypatch.setenv(key, value)
    assert set(VALID_ENV) == set(REQUIRED_ENV_KEYS)
    assert set(CDN_ENV) == set(CDN_REQUIRED_ENV_KEYS)
    return {**VALID_ENV, **CDN_ENV}


@pytest.fixture
def deploy_config() -> DeployConfig:
    return DeployConfig(
        bunny_region="de",
        bunny_bucket="my-site",
        bunny_bucket_token="bucket-token-1234567890",
        bunny_pullzone_id="424242",
        bunny_api_key="bunny-api-key-abcdef",
        cloudflare_zone="cf-zone-id",
        cloudflare_api_key="cf-api-key-0987654321",
        cloudflare_email="ops@example.com",
    )


def make_tree(root: Path, files: dict[str, bytes | str]) -> Path:
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, str):
            content = content.encode("utf-8")
        path.write_bytes(content)
    return root


@dataclass
class RecordedHooks:
    statuses: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    details: list[str] = field(default_factory=list)

    def hooks(self) -> DeployHooks:
        return DeployHooks(
            status=self.statuses.append,
            warning=self.warnings.append,
            detail=self.details.append,
        )


@pytest.fixture
def recorded() -> RecordedHooks:
    return RecordedHooks()


@pytest.fixture
def tree():
    return make_tree
