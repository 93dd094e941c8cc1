from __future__ import annotations

import json
import tarfile
from pathlib import Path

import pytest

from showpkg import credentials, pipeline
from showpkg.config import OBJECTS_FILE, RULEBASE_FILE
from showpkg.errors import InteractiveInputError
from showpkg.pipeline import run_export
from showpkg.resolver import resolve
from showpkg.run_manager import plan_paths
from showpkg.schemas import GatewayBinding
from showpkg.staging import OBJECTS, RULEBASE
from showpkg.templates import load_templates

OBJECTS_DATA = [{"uid": "u1", "name": "web-srv"}, {"uid": "u2", "name": "dmz-net"}]
RULES_DATA = [{"rule-number": 1, "action": "Accept"}]


class FakeSource:
    def __init__(self, fail_on_export: bool = False):
        self.fail_on_export = fail_on_export
        self.payload = None
        self.logged_out = False

    def login(self, payload):
        self.payload = payload

    def logout(self):
        self.logged_out = True

    def list_packages(self, cfg):
        return ["Standard", "Branch_Office"]

    def export(self, cfg, staging, state):
        if self.fail_on_export:
            raise RuntimeError("management server went away")
        for obj in OBJECTS_DATA:
            staging.append(OBJECTS, obj)
            state.uid_to_name[obj["uid"]] = obj["name"]
        for rule in RULES_DATA:
            staging.append(RULEBASE, rule)
        state.installed_packages.append("Standard")
        state.gateways_with_policy.append(GatewayBinding(gateway="GW1", packages=["Standard"]))


def _prepare(args, out_dir: Path):
    cfg, summary = resolve(list(args) + ["-o", str(out_dir)])
    cfg.attach_paths(plan_paths(cfg.output_path_hint))
    return cfg, summary


def _status(staging_dir: Path) -> dict:
    return json.loads((staging_dir / "status.json").read_text(encoding="utf-8"))


def test_export_produces_tar_and_removes_staging(tmp_path: Path) -> None:
    cfg, summary = _prepare(["-u", "admin", "-p", "pw"], tmp_path)
    source = FakeSource()

    result = run_export(cfg, summary, load_templates(), source=source)

    assert result.tar_path == cfg.tar_output_path
    assert result.cleanup_ok is True
    assert result.packages == ["Standard"]
    assert not cfg.staging_dir_path.exists()
    assert source.payload == {"user": "admin", "password": "pw", "read-only": True}
    assert source.logged_out is True

    with tarfile.open(result.tar_path, "r:gz") as tar:
        names = set(tar.getnames())
        assert {"objects.json", "rulebase.json", "index.html", "objects.html", "rulebase.html"} <= names
        assert OBJECTS_FILE not in names and RULEBASE_FILE not in names
        assert json.loads(tar.extractfile("objects.json").read()) == OBJECTS_DATA
        assert json.loads(tar.extractfile("rulebase.json").read()) == RULES_DATA


def test_keep_switch_leaves_report_but_not_accumulation_files(tmp_path: Path) -> None:
    cfg, summary = _prepare(["-r", "-u", "admin", "-p", "pw"], tmp_path)

    run_export(cfg, summary, load_templates(), source=FakeSource())

    staging_dir = cfg.staging_dir_path
    assert staging_dir.is_dir()
    assert not (staging_dir / OBJECTS_FILE).exists()
    assert not (staging_dir / RULEBASE_FILE).exists()
    assert (staging_dir / "objects.json").exists()
    assert list(staging_dir.glob("show_package-*.elg"))
    assert _status(staging_dir)["phases"] == {
        "staging": "ok", "fetch": "ok", "render": "ok", "package": "ok",
    }


def test_list_only_skips_report(tmp_path: Path) -> None:
    cfg, summary = _prepare(["-v", "-r", "-u", "admin", "-p", "pw"], tmp_path)

    result = run_export(cfg, summary, load_templates(), source=FakeSource())

    assert result.packages == ["Standard", "Branch_Office"]
    assert result.tar_path is None
    assert not cfg.tar_output_path.exists()
    phases = _status(cfg.staging_dir_path)["phases"]
    assert phases["render"] == "skipped" and phases["package"] == "skipped"


def test_fetch_failure_cleans_up_and_propagates(tmp_path: Path) -> None:
    cfg, summary = _prepare(["-r", "-u", "admin", "-p", "pw"], tmp_path)
    source = FakeSource(fail_on_export=True)

    with pytest.raises(RuntimeError, match="went away"):
        run_export(cfg, summary, load_templates(), source=source)

    staging_dir = cfg.staging_dir_path
    assert source.logged_out is True
    assert not (staging_dir / OBJECTS_FILE).exists()
    assert not (staging_dir / RULEBASE_FILE).exists()
    assert not cfg.tar_output_path.exists()
    status = _status(staging_dir)
    assert status["phases"]["fetch"] == "fail"
    assert status["error"]["phase"] == "fetch"


def test_fetch_failure_without_keep_removes_staging_dir(tmp_path: Path) -> None:
    cfg, summary = _prepare(["-u", "admin", "-p", "pw"], tmp_path)

    with pytest.raises(RuntimeError):
        run_export(cfg, summary, load_templates(), source=FakeSource(fail_on_export=True))

    assert list(tmp_path.iterdir()) == []


def test_missing_terminal_aborts_after_cleanup(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(credentials, "_has_console", lambda: False)
    cfg, summary = _prepare(["-r", "-m", "10.0.0.9"], tmp_path)
    source = FakeSource()

    with pytest.raises(InteractiveInputError):
        run_export(cfg, summary, load_templates(), source=source)

    assert source.payload is None
    assert source.logged_out is False
    assert not (cfg.staging_dir_path / OBJECTS_FILE).exists()


def test_without_source_an_empty_package_is_written(tmp_path: Path) -> None:
    cfg, summary = _prepare([], tmp_path)

    result = run_export(cfg, summary, load_templates())

    with tarfile.open(result.tar_path, "r:gz") as tar:
        assert json.loads(tar.extractfile("objects.json").read()) == []
        assert json.loads(tar.extractfile("rulebase.json").read()) == []
    assert [p.name for p in tmp_path.iterdir()] == [result.tar_path.name]


def test_packaging_failure_leaves_no_partial_tar(tmp_path: Path) -> None:
    class BrokenPackager:
        def package(self, staging_dir, tar_path):
            tar_path.write_bytes(b"partial")
            raise OSError("disk full")

    cfg, summary = _prepare([], tmp_path)

    with pytest.raises(OSError, match="disk full"):
        run_export(cfg, summary, load_templates(), packager=BrokenPackager())

    assert list(tmp_path.iterdir()) == []


def test_failed_status_write_does_not_hide_error_or_skip_cleanup(tmp_path: Path, monkeypatch) -> None:
    writes = []

    def broken_update_status(staging_dir, status):
        writes.append(status.model_dump())
        raise OSError(f"status write {len(writes)} failed")

    monkeypatch.setattr(pipeline, "update_status", broken_update_status)
    cfg, summary = _prepare([], tmp_path)

    with pytest.raises(OSError, match="status write 1 failed"):
        run_export(cfg, summary, load_templates())

    assert len(writes) > 1
    assert list(tmp_path.iterdir()) == []


def test_source_sees_inline_layers_across_export(tmp_path: Path) -> None:
    class LayeredSource(FakeSource):
        def export(self, cfg, staging, state):
            for uid in ("inline-1", "inline-2", "inline-1"):
                if not state.is_known_inline_layer(uid):
                    staging.append(RULEBASE, {"inline-layer": uid})
                state.add_inline_layer(uid)

    cfg, summary = _prepare(["-u", "admin", "-p", "pw"], tmp_path)

    result = run_export(cfg, summary, load_templates(), source=LayeredSource())

    with tarfile.open(result.tar_path, "r:gz") as tar:
        rules = json.loads(tar.extractfile("rulebase.json").read())
    assert rules == [{"inline-layer": "inline-1"}, {"inline-layer": "inline-2"}]
