from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Literal, Optional, Set

from pydantic import BaseModel, Field

PhaseState = Literal["pending", "ok", "fail", "skipped"]


class PhaseStatus(BaseModel):
    staging: PhaseState = "pending"
    fetch: PhaseState = "pending"
    render: PhaseState = "pending"
    package: PhaseState = "pending"


class RunStatus(BaseModel):
    run_id: str
    phases: PhaseStatus = Field(default_factory=PhaseStatus)
    error: Optional[Dict[str, str]] = None


class GatewayBinding(BaseModel):
    gateway: str
    server: str = ""
    packages: List[str] = Field(default_factory=list)


class ExportState(BaseModel):
    """Lookups shared between the policy source and the renderer during one run."""

    installed_packages: List[str] = Field(default_factory=list)
    uid_to_name: Dict[str, str] = Field(default_factory=dict)
    gateways_with_policy: List[GatewayBinding] = Field(default_factory=list)
    known_inline_layers: Set[str] = Field(default_factory=set)

    def add_inline_layer(self, uid: str) -> None:
        self.known_inline_layers.add(uid)

    def is_known_inline_layer(self, uid: str) -> bool:
        return uid in self.known_inline_layers


class ExportResult(BaseModel):
    staging_dir: Path
    tar_path: Optional[Path] = None
    packages: List[str] = Field(default_factory=list)
    cleanup_ok: bool = True
