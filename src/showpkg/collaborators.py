from __future__ import annotations

import logging
import tarfile
from pathlib import Path
from typing import Any, Dict, List, Protocol

from .config import OBJECTS_FILE, RULEBASE_FILE, RunConfiguration
from .schemas import ExportState
from .staging import OBJECTS, RULEBASE, StagingArea
from .templates import INDEX_HTML_TEMPLATE, OBJECTS_HTML_TEMPLATE, RULEBASE_HTML_TEMPLATE, TemplateSet

logger = logging.getLogger(__name__)


class PolicySource(Protocol):
    """Management API side of a run: session handling and data fetch."""

    def login(self, payload: Dict[str, Any]) -> None: ...

    def logout(self) -> None: ...

    def list_packages(self, cfg: RunConfiguration) -> List[str]: ...

    def export(self, cfg: RunConfiguration, staging: StagingArea, state: ExportState) -> None: ...


class ReportRenderer(Protocol):
    def render(self, staging: StagingArea, templates: TemplateSet, state: ExportState) -> None: ...


class Packager(Protocol):
    def package(self, staging_dir: Path, tar_path: Path) -> None: ...


class JsonArrayRenderer:
    """Seals both accumulation streams into JSON files next to the report pages."""

    def render(self, staging: StagingArea, templates: TemplateSet, state: ExportState) -> None:
        out = staging.staging_dir
        (out / "objects.json").write_text(staging.seal(OBJECTS), encoding="utf-8")
        (out / "rulebase.json").write_text(staging.seal(RULEBASE), encoding="utf-8")
        for name in (INDEX_HTML_TEMPLATE, OBJECTS_HTML_TEMPLATE, RULEBASE_HTML_TEMPLATE):
            (out / name).write_text(templates.page(name), encoding="utf-8")
        logger.debug(
            "rendered %d objects and %d rules into %s",
            staging.count(OBJECTS), staging.count(RULEBASE), out,
        )


class TarGzPackager:
    skip = (OBJECTS_FILE, RULEBASE_FILE)

    def package(self, staging_dir: Path, tar_path: Path) -> None:
        with tarfile.open(tar_path, "w:gz") as tar:
            for entry in sorted(Path(staging_dir).iterdir()):
                if entry.name in self.skip:
                    continue
                tar.add(entry, arcname=entry.name)
        logger.info("Result file location: %s", tar_path)
