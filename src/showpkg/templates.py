from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional

from pydantic import BaseModel

from .errors import TemplateError

logger = logging.getLogger(__name__)

RULEBASE_HTML_TEMPLATE = "rulebase.html"
INDEX_HTML_TEMPLATE = "index.html"
OBJECTS_HTML_TEMPLATE = "objects.html"

TEMPLATE_FILES = (RULEBASE_HTML_TEMPLATE, INDEX_HTML_TEMPLATE, OBJECTS_HTML_TEMPLATE)


class TemplateSet(BaseModel):
    source: Path
    pages: Dict[str, str]

    def page(self, name: str) -> str:
        return self.pages[name]


def bundled_template_dir() -> Path:
    return Path(__file__).resolve().parent / "report_templates"


def _read(directory: Path) -> TemplateSet:
    pages = {name: (directory / name).read_text(encoding="utf-8") for name in TEMPLATE_FILES}
    return TemplateSet(source=directory, pages=pages)


def load_templates(custom_dir: Optional[str] = None) -> TemplateSet:
    """
    Load the three report templates.

    A custom directory must exist and hold every template file; otherwise
    the templates bundled with the package are used.
    """
    if not custom_dir:
        return _read(bundled_template_dir())

    directory = Path(custom_dir)
    if not directory.exists():
        raise TemplateError(f"Provided template directory [{directory}] does not exist!", directory)

    missing = [name for name in TEMPLATE_FILES if not (directory / name).is_file()]
    if missing:
        raise TemplateError(
            f"Template files: {RULEBASE_HTML_TEMPLATE}, {INDEX_HTML_TEMPLATE} and "
            f"{OBJECTS_HTML_TEMPLATE} were not found in the directory: '{directory}'. "
            f"Missing: {', '.join(missing)}",
            directory,
            missing=missing,
        )

    logger.debug("using custom templates from %s", directory)
    return _read(directory)
