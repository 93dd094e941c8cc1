from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .errors import PathError

TOOL_VERSION = "v1.2.5"

LOCAL_SERVER_IP = "127.0.0.1"
DEFAULT_PORT = 443

TAR_SUFFIX = ".tar.gz"
LOG_SUFFIX = ".elg"
PREFIX = "show_package-"

OBJECTS_FILE = "objects.txt"
RULEBASE_FILE = "rulebase.txt"


class PlannedPaths(BaseModel):
    """Absolute staging directory and tar output path of one run."""

    model_config = ConfigDict(frozen=True)

    staging_dir: Path
    tar_path: Path


class RunConfiguration(BaseModel):
    """
    Effective configuration of a single show-package run.

    Notes:
    - Flags mutate the model while they are resolved; nothing else does.
    - `paths` is attached once by the path planner and never replaced.
    - The password is kept in memory only and is excluded from dumps.
    """
    server: str = Field(default_factory=lambda: os.getenv("SHOWPKG_SERVER", LOCAL_SERVER_IP))
    port: Optional[int] = None
    port_explicitly_set: bool = False

    username: Optional[str] = None
    password: Optional[str] = Field(default=None, repr=False, exclude=True)
    domain: Optional[str] = None
    unsafe_tls: bool = False

    requested_gateway: Optional[str] = None
    requested_package: Optional[str] = None
    show_hit_counts: bool = False
    show_package_list_only: bool = False

    keep_staging_dir: bool = False
    proxy: Optional[str] = None
    custom_template_dir: Optional[str] = None
    output_path_hint: Optional[str] = None

    log_level: str = Field(default_factory=lambda: os.getenv("SHOWPKG_LOG_LEVEL", "DEBUG").upper())

    paths: Optional[PlannedPaths] = None

    def attach_paths(self, paths: PlannedPaths) -> None:
        if self.paths is not None:
            raise PathError(
                f"Staging directory is already set to '{self.paths.staging_dir}'",
                self.paths.staging_dir,
            )
        self.paths = paths

    @property
    def staging_dir_path(self) -> Optional[Path]:
        return self.paths.staging_dir if self.paths else None

    @property
    def tar_output_path(self) -> Optional[Path]:
        return self.paths.tar_path if self.paths else None

    @property
    def effective_port(self) -> int:
        return self.port if self.port_explicitly_set and self.port is not None else DEFAULT_PORT

    @property
    def login_as_root(self) -> bool:
        # Local trust only applies on the management host itself.
        return self.server == LOCAL_SERVER_IP and not self.username and not self.password
