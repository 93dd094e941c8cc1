from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path
from typing import Any, Dict, IO, Optional, Union

from .config import OBJECTS_FILE, RULEBASE_FILE
from .errors import StagingIOError

logger = logging.getLogger(__name__)

OBJECTS = "objects"
RULEBASE = "rulebase"

STREAM_FILES: Dict[str, str] = {OBJECTS: OBJECTS_FILE, RULEBASE: RULEBASE_FILE}


class StagingArea:
    """
    The two accumulation files of a run, kept inside the staging directory.

    Each file starts with `[` as soon as it is opened; records are appended
    comma-separated and the closing `]` belongs to whoever renders them.
    `close()` closes and deletes both files and reports whether that worked.
    """

    def __init__(self, staging_dir: Union[str, Path]):
        self.staging_dir = Path(staging_dir)
        self._sinks: Dict[str, Optional[IO[str]]] = {OBJECTS: None, RULEBASE: None}
        self._counts: Dict[str, int] = {OBJECTS: 0, RULEBASE: 0}
        self._closed = False
        self._cleanup_ok = True

    @classmethod
    def open(cls, staging_dir: Union[str, Path]) -> "StagingArea":
        area = cls(staging_dir)
        area._open_sinks()
        return area

    def path_of(self, stream: str) -> Path:
        return self.staging_dir / STREAM_FILES[stream]

    def _open_sinks(self) -> None:
        for stream in (OBJECTS, RULEBASE):
            path = self.path_of(stream)
            try:
                sink = path.open("w", encoding="utf-8")
                self._sinks[stream] = sink
                sink.write("[")
                sink.flush()
            except OSError as e:
                self.close()
                raise StagingIOError(f"Failed to open '{path}' for writing: {e}", path) from e
        logger.debug("accumulation files opened in %s", self.staging_dir)

    def _sink(self, stream: str) -> IO[str]:
        sink = self._sinks.get(stream)
        if sink is None:
            raise StagingIOError(f"{stream} accumulation file is not open", self.path_of(stream))
        return sink

    def append(self, stream: str, record: Any) -> None:
        sink = self._sink(stream)
        prefix = "," if self._counts[stream] else ""
        try:
            sink.write(prefix + json.dumps(record, ensure_ascii=False))
        except OSError as e:
            raise StagingIOError(f"Failed to write to '{self.path_of(stream)}': {e}", self.path_of(stream)) from e
        self._counts[stream] += 1

    def count(self, stream: str) -> int:
        return self._counts[stream]

    def seal(self, stream: str) -> str:
        """Return the accumulated records as a complete JSON array text."""
        sink = self._sink(stream)
        try:
            sink.flush()
            body = self.path_of(stream).read_text(encoding="utf-8")
        except OSError as e:
            raise StagingIOError(f"Failed to read '{self.path_of(stream)}': {e}", self.path_of(stream)) from e
        return body + "]"

    def close(self) -> bool:
        if self._closed:
            return self._cleanup_ok

        ok = True
        for stream in (OBJECTS, RULEBASE):
            sink = self._sinks[stream]
            if sink is None:
                continue
            self._sinks[stream] = None
            try:
                sink.close()
                self.path_of(stream).unlink()
            except OSError as e:
                logger.warning("failed to remove %s: %s", self.path_of(stream), e)
                ok = False

        self._closed = True
        self._cleanup_ok = ok
        return ok

    def discard_directory(self) -> bool:
        try:
            shutil.rmtree(self.staging_dir)
        except OSError as e:
            logger.warning("failed to delete staging directory %s: %s", self.staging_dir, e)
            return False
        return True

    def __enter__(self) -> "StagingArea":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
