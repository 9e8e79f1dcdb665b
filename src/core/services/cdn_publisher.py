"""Publisher `cdn`: selección de ficheros + subida + purga de cachés.

Compone las tres piezas sin conocer HTTP: el uploader y el purger llegan
ya construidos (con su cliente) desde la CLI o desde los tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Protocol

from core.config import CDN_REQUIRED_ENV_KEYS, mask_secret
from core.domain.errors import PreconditionError
from core.domain.models import CandidateFile, DeployConfig, UploadResult
from core.interfaces.publisher import DeployHooks
from core.services.file_selector import ALLOWED_EXTENSIONS, ensure_distribution_root, select_files


class Uploader(Protocol):
    def upload_all(self, candidates: Iterable[CandidateFile]) -> list[UploadResult]:
        ...


class Purger(Protocol):
    def purge_all(self) -> None:
        ...


@dataclass
class CdnPublishReport:
    uploads: list[UploadResult] = field(default_factory=list)

    @property
    def total_bytes(self) -> int:
        return sum(r.size_bytes for r in self.uploads)


class CdnPublisher:
    name = "cdn"

    def __init__(
        self,
        config: DeployConfig,
        dist_dir: Path,
        *,
        uploader: Uploader,
        purger: Purger,
        extensions: Iterable[str] = ALLOWED_EXTENSIONS,
        hooks: DeployHooks | None = None,
    ) -> None:
        self._config = config
        self._dist_dir = dist_dir
        self._uploader = uploader
        self._purger = purger
        self._extensions = frozenset(extensions)
        self._hooks = hooks or DeployHooks()
        self.last_report: CdnPublishReport | None = None

    def check_preconditions(self) -> PreconditionError | None:
        if not self._config.cloudflare_email:
            return PreconditionError(
                f"Required environment variable {CDN_REQUIRED_ENV_KEYS[0]} is not set!"
            )
        return ensure_distribution_root(self._dist_dir)

    def _debug_info(self) -> None:
        self._hooks.emit_detail("Debug info:")
        self._hooks.emit_detail(f"  Region: '{self._config.bunny_region}'")
        self._hooks.emit_detail(f"  Bucket: '{self._config.bunny_bucket}'")
        self._hooks.emit_detail(f"  Token: '{mask_secret(self._config.bunny_bucket_token)}'")

    def publish(self) -> None:
        self._hooks.emit_status("Uploading dist to BunnyCDN...")
        self._debug_info()

        candidates = select_files(self._dist_dir, self._extensions)
        report = CdnPublishReport(uploads=self._uploader.upload_all(candidates))
        self.last_report = report
        self._hooks.emit_detail(
            f"Uploaded {len(report.uploads)} files ({report.total_bytes} bytes)"
        )

        self._purger.purge_all()
        self._hooks.emit_status("CDN upload complete.")
