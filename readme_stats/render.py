from __future__ import annotations

import os
import stat
import tempfile
from pathlib import Path
from typing import Any

from jinja2 import Environment, StrictUndefined, TemplateError

from .models import StatsSummary


class TemplateLoadError(Exception):
    """The README template could not be read."""


class TemplateRenderError(Exception):
    """The README template references something the summary does not provide."""


def _blank_none(value: Any) -> Any:
    return "" if value is None else value


_ENVIRONMENT = Environment(
    undefined=StrictUndefined,
    autoescape=False,
    keep_trailing_newline=True,
    finalize=_blank_none,
)


def load_template(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as error:
        raise TemplateLoadError(f"Error loading template {path}: {error}") from error


def render_document(template_text: str, summary: StatsSummary) -> str:
    try:
        return _ENVIRONMENT.from_string(template_text).render(**summary.as_context())
    except TemplateError as error:
        raise TemplateRenderError(f"Error generating README content: {error}") from error


def write_output(path: Path, content: str) -> Path:
    """Replace ``path`` with ``content`` in one step; the old file survives any failure."""
    path.parent.mkdir(parents=True, exist_ok=True)
    mode = stat.S_IMODE(path.stat().st_mode) if path.exists() else 0o644
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        handle = os.fdopen(fd, "w", encoding="utf-8", newline="")
    except BaseException:
        os.close(fd)
        os.unlink(tmp_name)
        raise
    try:
        with handle:
            handle.write(content)
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    except BaseException:
        os.unlink(tmp_name)
        raise
    return path
