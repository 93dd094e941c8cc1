from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

from .collaborators import JsonArrayRenderer, Packager, PolicySource, ReportRenderer, TarGzPackager
from .config import RunConfiguration
from .credentials import CredentialSource, build_login_payload
from .errors import PathError, StagingIOError
from .logger import EventLogger, configure_run_logger, release_run_logger
from .run_manager import update_status
from .schemas import ExportResult, ExportState, RunStatus
from .staging import OBJECTS, RULEBASE, StagingArea
from .templates import TemplateSet

logger = logging.getLogger(__name__)


def _save_status(staging_dir: Path, status: RunStatus) -> None:
    try:
        update_status(staging_dir, status)
    except OSError as e:
        logger.warning("failed to write run status: %s", e)


def _run_phase(
    name: str,
    fn: Callable[[], None],
    status: RunStatus,
    events: EventLogger,
    cfg: RunConfiguration,
) -> None:
    try:
        events.log(name, "start")
        fn()
        setattr(status.phases, name, "ok")
        events.log(name, "done")
    except Exception as e:
        setattr(status.phases, name, "fail")
        status.error = {"phase": name, "message": str(e)}
        events.log(name, "fail", {"error": str(e)})
        logger.error("%s phase failed: %s", name, e)
        raise
    finally:
        _save_status(cfg.paths.staging_dir, status)


def run_export(
    cfg: RunConfiguration,
    debug_summary: str,
    templates: TemplateSet,
    source: Optional[PolicySource] = None,
    renderer: Optional[ReportRenderer] = None,
    packager: Optional[Packager] = None,
    prompt: Optional[CredentialSource] = None,
) -> ExportResult:
    """
    Execute one export inside the planned staging directory.

    Phases:
      1) staging  (accumulation files + run log)
      2) fetch    (policy source login and export, or package listing)
      3) render   (seal streams, write report pages)
      4) package  (tar.gz at the planned path)

    The accumulation files are closed and deleted on every path; the
    staging directory itself is removed unless the run keeps it.
    """
    if cfg.paths is None:
        raise PathError("Output paths were not planned before the export started")
    staging_dir = cfg.paths.staging_dir
    tar_path = cfg.paths.tar_path

    try:
        staging = StagingArea.open(staging_dir)
    except StagingIOError:
        if not cfg.keep_staging_dir:
            StagingArea(staging_dir).discard_directory()
        raise

    configure_run_logger(staging_dir, debug_summary, cfg.log_level)
    events = EventLogger(log_path=staging_dir / "events.jsonl")
    status = RunStatus(run_id=staging_dir.name)
    status.phases.staging = "ok"

    state = ExportState()
    renderer = renderer or JsonArrayRenderer()
    packager = packager or TarGzPackager()
    result = ExportResult(staging_dir=staging_dir)
    logged_in = False

    def fetch() -> None:
        nonlocal logged_in
        if source is None:
            logger.warning("no policy source attached, the package will be empty")
            return
        source.login(build_login_payload(cfg, prompt=prompt))
        logged_in = True
        if cfg.show_package_list_only:
            result.packages = source.list_packages(cfg)
            for name in result.packages:
                logger.info("package: %s", name)
        else:
            source.export(cfg, staging, state)
            result.packages = list(state.installed_packages)

    def render() -> None:
        renderer.render(staging, templates, state)

    def package() -> None:
        try:
            packager.package(staging_dir, tar_path)
        except Exception:
            if tar_path.exists():
                tar_path.unlink()
            raise
        result.tar_path = tar_path

    try:
        update_status(staging_dir, status)
        events.log("staging", "done", {"staging_dir": str(staging_dir)})
        _run_phase("fetch", fetch, status, events, cfg)
        if cfg.show_package_list_only:
            status.phases.render = "skipped"
            status.phases.package = "skipped"
        else:
            _run_phase("render", render, status, events, cfg)
            logger.debug(
                "%d objects, %d rules staged", staging.count(OBJECTS), staging.count(RULEBASE)
            )
            _run_phase("package", package, status, events, cfg)
    finally:
        if logged_in:
            try:
                source.logout()
            except Exception as e:
                logger.warning("logout failed: %s", e)

        result.cleanup_ok = staging.close()
        _save_status(staging_dir, status)
        release_run_logger()
        if not cfg.keep_staging_dir:
            result.cleanup_ok = staging.discard_directory() and result.cleanup_ok

    return result
