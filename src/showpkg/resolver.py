from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

import typer

from .config import RunConfiguration
from .errors import UsageError
from .flags import lookup, print_catalog

logger = logging.getLogger(__name__)


def resolve(args: Sequence[str]) -> Tuple[RunConfiguration, str]:
    """
    Turn raw command line tokens into a run configuration.

    Returns the configuration and the debug summary: one echo per
    recognised switch, in input order, separated by spaces.
    Unknown switches are reported together with the usage guide and skipped.
    `-h` exits the process with status 0 as soon as it is reached.
    """
    cfg = RunConfiguration()
    echoes: List[str] = []

    i = 0
    while i < len(args):
        token = args[i]
        if len(token) < 2:
            raise UsageError(
                f"Usage: invalid argument: '{token}'. "
                "The Flag should start with '-' and then the flag letter"
            )

        option = lookup(token)
        if option is None:
            typer.echo(f"Unsupported option: {token}")
            print_catalog()
            logger.warning("ignoring unsupported option %s", token)
            i += 1
            continue

        if option.takes_value:
            if i + 1 >= len(args):
                raise UsageError("Usage: The format of an argument should be: <flag , value> ")
            option.apply(cfg, args[i + 1])
            i += 2
        else:
            option.apply(cfg, "")
            i += 1

        echoes.append(option.echo(cfg))

    return cfg, " ".join(echoes)
