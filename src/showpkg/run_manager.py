from __future__ import annotations

import json
import logging
import time
import uuid
from pathlib import Path
from typing import Any, Optional, Union

from .config import PREFIX, TAR_SUFFIX, PlannedPaths
from .errors import PathError
from .schemas import RunStatus

logger = logging.getLogger(__name__)


def timestamp_token(now: Optional[float] = None) -> str:
    return time.strftime("%Y-%m-%d_%H-%M-%S", time.localtime(now))


def default_tar_name(now: Optional[float] = None) -> str:
    return f"{PREFIX}{timestamp_token(now)}{TAR_SUFFIX}"


def plan_paths(
    output_path_hint: Optional[str] = None,
    cwd: Optional[Union[str, Path]] = None,
    now: Optional[float] = None,
) -> PlannedPaths:
    """
    Create a fresh staging directory and decide where the tar file goes.

    Convention:
    - no hint:            <cwd>/<uuid>/ and <cwd>/show_package-<ts>.tar.gz
    - hint "x/y.tar.gz":  <x>/<uuid>/  and x/y.tar.gz
    - hint "x":           <x>/<uuid>/  and x/show_package-<ts>.tar.gz

    Only the staging directory has to be empty; the result directory may
    already hold other files.
    """
    base = Path(cwd) if cwd is not None else Path.cwd()
    base = base.absolute()
    tar_path = base / default_tar_name(now)

    if output_path_hint:
        hint = Path(output_path_hint)
        if not hint.is_absolute():
            hint = base / hint
        if output_path_hint.endswith(TAR_SUFFIX):
            tar_path = hint
            base = hint.parent
        else:
            base = hint
            tar_path = base / default_tar_name(now)

    if not base.is_dir():
        raise PathError(f"Result directory '{base}' does not exist or is not a directory", base)

    staging_dir = base / str(uuid.uuid4())
    try:
        staging_dir.mkdir()
    except OSError as e:
        raise PathError(f"Failed to create output directory '{staging_dir}': {e}", staging_dir) from e

    if not staging_dir.is_dir():
        raise PathError(f"'{staging_dir}' is not a directory!", staging_dir)

    if any(staging_dir.iterdir()):
        raise PathError(f"Directory '{staging_dir}' is not empty!", staging_dir)

    if tar_path.exists():
        staging_dir.rmdir()
        raise PathError(f"File '{tar_path}' already exists!", tar_path)

    logger.debug("staging directory %s, tar output %s", staging_dir, tar_path)
    return PlannedPaths(staging_dir=staging_dir, tar_path=tar_path)


def write_json(path: Path, obj: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(obj, f, ensure_ascii=False, indent=2)


def update_status(staging_dir: Path, status: RunStatus) -> None:
    write_json(staging_dir / "status.json", status.model_dump())
