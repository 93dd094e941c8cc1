"""
Catalog of the command line switches understood by show-package.

Each switch is defined exactly once, together with the three things the
resolver needs from it: how it changes the run configuration, how it is
described in the usage guide, and how it is echoed into the debug summary.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

import typer

from .config import DEFAULT_PORT, LOCAL_SERVER_IP, TAR_SUFFIX, TOOL_VERSION, RunConfiguration
from .errors import UsageError

PASSWORD_MASK = "*****"


@dataclass(frozen=True)
class Option:
    flag: str
    takes_value: bool
    placeholder: str
    apply: Callable[[RunConfiguration, str], None]
    describe: Callable[[], str]
    echo: Callable[[RunConfiguration], str]


def _set(field: str) -> Callable[[RunConfiguration, str], None]:
    def apply(cfg: RunConfiguration, value: str) -> None:
        setattr(cfg, field, value)
    return apply


def _enable(field: str) -> Callable[[RunConfiguration, str], None]:
    def apply(cfg: RunConfiguration, value: str) -> None:
        setattr(cfg, field, True)
    return apply


def _apply_port(cfg: RunConfiguration, value: str) -> None:
    try:
        cfg.port = int(value)
    except ValueError:
        raise UsageError(f"Usage: port must be a number, got '{value}'") from None
    cfg.port_explicitly_set = True


def _apply_keep(cfg: RunConfiguration, value: str) -> None:
    cfg.keep_staging_dir = True


def _apply_info_level(cfg: RunConfiguration, value: str) -> None:
    cfg.log_level = "INFO"


def _apply_help(cfg: RunConfiguration, value: str) -> None:
    print_usage()
    raise typer.Exit(code=0)


def _echo(label: str, flag: str, field: str) -> Callable[[RunConfiguration], str]:
    return lambda cfg: f"{label}:({flag})={getattr(cfg, field)}"


def _option(
    flag: str,
    placeholder: str,
    apply: Callable[[RunConfiguration, str], None],
    text: str,
    echo: Callable[[RunConfiguration], str],
) -> Option:
    return Option(
        flag=flag,
        takes_value=bool(placeholder),
        placeholder=placeholder,
        apply=apply,
        describe=lambda: text,
        echo=echo,
    )


_OPTIONS: List[Option] = [
    _option("-m", "server-IP", _set("server"),
            f"Management server ip address.\nDefault value is {{{LOCAL_SERVER_IP}}}.",
            _echo("server", "-m", "server")),
    _option("-n", "port-number", _apply_port,
            f"Port of WebAPI server on management server.\nDefault {{{DEFAULT_PORT}}}.",
            _echo("port", "-n", "port")),
    _option("-g", "gateway-name", _set("requested_gateway"),
            "Gateway name.\nShows the policy packages which are installed on this gateway.",
            _echo("userRequestGateway", "-g", "requested_gateway")),
    _option("-u", "user-name", _set("username"),
            "Management administrator user name.",
            _echo("username", "-u", "username")),
    _option("-p", "password", _set("password"),
            "Management administrator password.",
            lambda cfg: f"password:(-p)={PASSWORD_MASK}"),
    _option("-d", "domain-name", _set("domain"),
            "Name, uid or IP-address of the management domain.",
            _echo("domain", "-d", "domain")),
    _option("-b", "", _enable("unsafe_tls"),
            "UNSAFE! Ignore certificate verification.\nDefault {false}",
            _echo("unsafe", "-b", "unsafe_tls")),
    _option("-r", "", _apply_keep,
            "Keep show package temporary folder.",
            _echo("keepStagingDir", "-r", "keep_staging_dir")),
    _option("-o", "path", _set("output_path_hint"),
            "Result path.\nPath where to store the result tar file.\n"
            f"Or path with {TAR_SUFFIX} suffix in order to set tar file name.\n"
            "The default is the current directory.",
            _echo("folderPath", "-o", "output_path_hint")),
    _option("-k", "package-name", _set("requested_package"),
            "Package name.\nThe policy package to show.",
            _echo("userRequestPackage", "-k", "requested_package")),
    _option("-v", "", _enable("show_package_list_only"),
            "List the existing policy packages.",
            _echo("showPackagesList", "-v", "show_package_list_only")),
    _option("-c", "", _enable("show_hit_counts"),
            "Show Access Policy rules hit counts.\nDefault {false}",
            _echo("showRulesHitCounts", "-c", "show_hit_counts")),
    _option("-x", "proxy-settings", _set("proxy"),
            "Proxy settings example: user:password@proxy.server:port",
            _echo("proxy", "-x", "proxy")),
    _option("-t", "path", _set("custom_template_dir"),
            "Custom Template Path.\nPath where the custom templates are stored.\n"
            "The default templates are bundled with the package.",
            _echo("templateDirectory", "-t", "custom_template_dir")),
    _option("-s", "", _apply_info_level,
            "Minimal debug information.",
            lambda cfg: "debug:(-s)=True"),
    _option("-h", "", _apply_help,
            "Usage guide.",
            lambda cfg: "help:(-h)=True"),
]

CATALOG: Dict[str, Option] = {opt.flag: opt for opt in _OPTIONS}


def lookup(flag: str) -> Optional[Option]:
    return CATALOG.get(flag)


def usage_block(option: Option) -> str:
    head = f"[{option.flag} {option.placeholder}]" if option.placeholder else f"[{option.flag}]"
    body = "\n".join(f"\t{line}" for line in option.describe().splitlines())
    return f"{head}\n{body}"


def print_catalog() -> None:
    for option in CATALOG.values():
        typer.echo(usage_block(option))


def print_usage() -> None:
    typer.echo(f"\nshow-package version: {TOOL_VERSION}\n")
    typer.echo("show-package optional-switches\n")
    typer.echo("optional-switches:")
    typer.echo("---------------")
    print_catalog()
    typer.echo("")
