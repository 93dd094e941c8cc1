from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import typer

from .config import LOG_SUFFIX, PREFIX
from .run_manager import timestamp_token

ROOT_LOGGER = "showpkg"
LINE_FORMAT = "[%(asctime)s %(name)s.%(funcName)s(%(levelname)s)]: %(message)s"


def log_file_name(started_at: Optional[float] = None) -> str:
    return f"{PREFIX}{timestamp_token(started_at)}{LOG_SUFFIX}"


def configure_run_logger(
    staging_dir: Path,
    debug_summary: str,
    level: str = "DEBUG",
    started_at: Optional[float] = None,
) -> Optional[Path]:
    """
    Send the package's log records to a file inside the staging directory.

    Any handler left from an earlier configuration is dropped and records
    stop propagating to the root logger. If the file cannot be created the
    run continues without a file log and None is returned.
    """
    log = logging.getLogger(ROOT_LOGGER)
    log.setLevel(getattr(logging, level.upper(), logging.DEBUG))
    for handler in list(log.handlers):
        log.removeHandler(handler)
        handler.close()
    log.propagate = False

    log_path = Path(staging_dir) / log_file_name(started_at)
    typer.echo(f"Log file location: {log_path}")
    try:
        handler = logging.FileHandler(log_path, encoding="utf-8")
    except OSError as e:
        typer.echo(f"Failed to create log file '{log_path}': {e}", err=True)
        return None

    handler.setFormatter(logging.Formatter(LINE_FORMAT))
    log.addHandler(handler)
    log.info("Log file location: %s", log_path)
    log.debug("The parameters that were received: %s", debug_summary)
    return log_path


def release_run_logger() -> None:
    log = logging.getLogger(ROOT_LOGGER)
    for handler in list(log.handlers):
        log.removeHandler(handler)
        handler.close()


@dataclass
class EventLogger:
    """
    Structured event logger (JSON Lines).

    - fixed fields (ts, stage, event)
    - meta dict reserved for structured diagnostics
    - one event per line (append-only)
    """
    log_path: Path

    def log(self, stage: str, event: str, meta: Optional[Dict[str, Any]] = None) -> None:
        record = {
            "ts": time.strftime("%Y-%m-%dT%H:%M:%S", time.localtime()),
            "stage": stage,
            "event": event,
            "meta": meta or {},
        }
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        with self.log_path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(record, ensure_ascii=False) + "\n")
