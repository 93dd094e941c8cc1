from __future__ import annotations

import logging

import pytest

from showpkg.logger import ROOT_LOGGER, release_run_logger


@pytest.fixture(autouse=True)
def _isolated_run(monkeypatch):
    monkeypatch.delenv("SHOWPKG_SERVER", raising=False)
    monkeypatch.delenv("SHOWPKG_LOG_LEVEL", raising=False)
    yield
    release_run_logger()
    log = logging.getLogger(ROOT_LOGGER)
    log.propagate = True
    log.setLevel(logging.NOTSET)


class FakePrompt:
    def __init__(self, username: str = "prompted-user", password: str = "prompted-pass"):
        self.username = username
        self.password = password
        self.calls: list[str] = []

    def read_username(self) -> str:
        self.calls.append("username")
        return self.username

    def read_password(self) -> str:
        self.calls.append("password")
        return self.password


@pytest.fixture
def fake_prompt() -> FakePrompt:
    return FakePrompt()
