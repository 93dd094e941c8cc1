from __future__ import annotations

import logging
import sys
from typing import Any, Dict, Optional, Protocol

import typer

from .config import RunConfiguration
from .errors import InteractiveInputError

logger = logging.getLogger(__name__)


class CredentialSource(Protocol):
    def read_username(self) -> str: ...

    def read_password(self) -> str: ...


def _has_console() -> bool:
    return sys.stdin.isatty() and sys.stdout.isatty()


class TerminalPrompt:
    """
    Reads credentials from the controlling terminal only.

    Piped or redirected input is refused: secrets are never taken from a
    non-interactive stream.
    """

    def _require_console(self) -> None:
        if not _has_console():
            logger.critical("Couldn't get console instance")
            typer.echo("Couldn't get console instance")
            raise InteractiveInputError("Couldn't get console instance")

    def read_username(self) -> str:
        self._require_console()
        return typer.prompt("Enter user name")

    def read_password(self) -> str:
        self._require_console()
        return typer.prompt("Enter password", hide_input=True)


def build_login_payload(
    cfg: RunConfiguration,
    login_as_root: Optional[bool] = None,
    prompt: Optional[CredentialSource] = None,
) -> Dict[str, Any]:
    """
    Login body for the management API.

    Missing username/password are asked for lazily, and not at all for a
    root login. The session is always requested read-only.
    """
    if login_as_root is None:
        login_as_root = cfg.login_as_root
    prompt = prompt or TerminalPrompt()

    payload: Dict[str, Any] = {}
    if not login_as_root:
        payload["user"] = cfg.username if cfg.username else prompt.read_username()
        payload["password"] = cfg.password if cfg.password else prompt.read_password()
    if cfg.domain:
        payload["domain"] = cfg.domain

    payload["read-only"] = True
    logger.debug("Login with 'read-only' flag.")
    return payload
