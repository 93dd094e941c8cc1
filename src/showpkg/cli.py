from __future__ import annotations

# ---- Environment bootstrap (MUST be first) ----
from dotenv import load_dotenv

load_dotenv()

# ---- CLI / Pipeline imports ----
from typing import List, Optional, Sequence

import typer
from typer.core import TyperCommand

from .collaborators import PolicySource
from .config import TOOL_VERSION
from .errors import ShowPackageError
from .pipeline import run_export
from .resolver import resolve
from .run_manager import plan_paths
from .schemas import ExportResult
from .templates import load_templates
from .utils.ui import print_error, print_header


app = typer.Typer(add_completion=False, help="Export a policy package as an HTML/tar.gz report")

RAW_ARGS = "showpkg.raw_args"


class RawArgsCommand(TyperCommand):
    """Keeps the argument list exactly as given; `resolve` does its own scanning."""

    def parse_args(self, ctx, args):
        ctx.meta[RAW_ARGS] = list(args)
        return super().parse_args(ctx, args)


def execute(args: Sequence[str], source: Optional[PolicySource] = None) -> ExportResult:
    """
    Resolve flags, validate templates and paths, then run the export.

    Templates and paths are checked before anything is written, so a bad
    `-t` or `-o` never leaves a staging directory behind.
    """
    cfg, debug_summary = resolve(args)
    templates = load_templates(cfg.custom_template_dir)
    cfg.attach_paths(plan_paths(cfg.output_path_hint))
    return run_export(cfg, debug_summary, templates, source=source)


@app.command(
    cls=RawArgsCommand,
    add_help_option=False,
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
)
def main(ctx: typer.Context):
    """
    show-package optional-switches (run with -h for the full list)
    """
    args: List[str] = ctx.meta.get(RAW_ARGS, list(ctx.args))
    print_header("show-package", TOOL_VERSION)
    try:
        result = execute(args)
    except ShowPackageError as e:
        print_error(str(e))
        raise typer.Exit(code=1)

    if result.tar_path is not None:
        typer.echo(f"[OK] result file: {result.tar_path}")
    for name in result.packages:
        typer.echo(f"[OK] package: {name}")
    if not result.cleanup_ok:
        typer.echo(f"[WARN] temporary files were not fully removed from {result.staging_dir}")


if __name__ == "__main__":
    app()
