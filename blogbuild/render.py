from __future__ import annotations

import html
import re
from pathlib import Path
from typing import Optional
from xml.sax.saxutils import escape as _sax_escape

import markdown

from .autolink import AutolinkExtension
from .content import normalize_list_spacing

TEMPLATES_DIR = Path(__file__).parent / "templates"
TAG_RE = re.compile(r"<[^>]+>")
PLACEHOLDER_RE = re.compile(r"\{\{(\w+)\}\}")
XML_ENTITIES = {'"': "&quot;", "'": "&apos;"}


def strip_tags(html_text: str) -> str:
    return TAG_RE.sub("", html_text)


def escape_html(text: object) -> str:
    return html.escape(str(text or ""), quote=True)


def escape_xml(text: object) -> str:
    return _sax_escape(str(text or ""), XML_ENTITIES)


def markdown_to_html(text: str) -> str:
    md = markdown.Markdown(
        extensions=["fenced_code", "tables", "codehilite", "smarty", AutolinkExtension()],
        extension_configs={
            "codehilite": {"guess_lang": False},
            "smarty": {"smart_angled_quotes": False},
        },
    )
    return md.convert(normalize_list_spacing(text))


def render_template(template: str, **context: str) -> str:
    return PLACEHOLDER_RE.sub(lambda m: context.get(m.group(1), m.group(0)), template)


def read_template(name: str, templates_dir: Path = TEMPLATES_DIR) -> str:
    return (templates_dir / name).read_text(encoding="utf-8")


def write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def patch_region(text: str, start_marker: str, end_marker: str, replacement: str) -> Optional[str]:
    """Replace everything from ``start_marker`` up to ``end_marker``.

    The start marker is replaced along with the region, so ``replacement``
    should begin with it; the end marker and everything after it are kept.
    Returns None when either marker is missing or they are out of order.
    """
    start = text.find(start_marker)
    if start == -1:
        return None
    end = text.find(end_marker, start + len(start_marker))
    if end == -1:
        return None
    line_start = text.rfind("\n", 0, start) + 1
    if not text[line_start:start].strip():
        start = line_start
    line_start = text.rfind("\n", 0, end) + 1
    if line_start > start and not text[line_start:end].strip():
        end = line_start
    return text[:start] + replacement + text[end:]
