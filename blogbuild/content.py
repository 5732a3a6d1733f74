from __future__ import annotations

import datetime as dt
import re
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .records import DEFAULT_CATEGORIES, ArticleRecord, CategoryTable, SourceKind
from .utils import DEFAULT_DATE, parse_date

LIST_MARKER_RE = re.compile(r"^(?P<indent>[ \t]*)(?:[-+*]|\d+[.)])\s+")
FENCE_RE = re.compile(r"^(?P<indent>[ \t]*)(`{3,}|~{3,})")


@dataclass
class MarkdownSource:
    path: Path
    meta: dict = field(default_factory=dict)
    body: str = ""

    @property
    def filename(self) -> str:
        return self.path.name


def parse_front_matter(text: str) -> tuple[dict, str]:
    clean_text = text.lstrip("\ufeff")
    lines = clean_text.splitlines()
    if not lines or lines[0].strip() != "---":
        return {}, clean_text

    end = None
    for i in range(1, len(lines)):
        if lines[i].strip() == "---":
            end = i
            break
    if end is None:
        return {}, clean_text

    body = "\n".join(lines[end + 1 :])
    try:
        meta = yaml.safe_load("\n".join(lines[1:end]) + "\n")
    except yaml.YAMLError:
        return {}, body
    if not isinstance(meta, dict):
        return {}, body
    return {str(key).strip().lower(): value for key, value in meta.items()}, body


def output_filename(name: str) -> str:
    if name.endswith(".md"):
        return name[: -len(".md")] + ".html"
    return name


def read_sources(content_dir: Path) -> list[MarkdownSource]:
    sources = []
    for path in sorted(content_dir.iterdir(), key=lambda p: p.name):
        if not path.is_file() or path.suffix != ".md":
            continue
        meta, body = parse_front_matter(path.read_text(encoding="utf-8"))
        sources.append(MarkdownSource(path=path, meta=meta, body=body))
    return sources


def meta_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ",".join(meta_text(item) for item in value if item is not None)
    if isinstance(value, (dt.date, dt.datetime)):
        return value.isoformat()
    return str(value).strip()


def record_from_meta(
    meta: dict, filename: str, categories: CategoryTable = DEFAULT_CATEGORIES
) -> ArticleRecord:
    category = categories.resolve(meta_text(meta.get("category")))
    thumbnail = meta_text(meta.get("thumbnail"))
    return ArticleRecord(
        title=meta_text(meta.get("title")),
        date=parse_date(meta.get("date"), DEFAULT_DATE),
        category=category,
        description=meta_text(meta.get("description")),
        keywords=meta_text(meta.get("keywords")),
        filename=output_filename(filename),
        thumbnail=thumbnail or categories.default_image(category),
        source_kind=SourceKind.MARKDOWN,
    )


def normalize_list_spacing(text: str) -> str:
    """Insert the blank line Python-Markdown needs before a top-level list."""
    lines = text.splitlines()
    out: list[str] = []
    in_fence = False
    fence_marker = ""
    for line in lines:
        fence_match = FENCE_RE.match(line)
        if fence_match:
            marker = fence_match.group(2)
            if not in_fence:
                in_fence = True
                fence_marker = marker
            elif marker == fence_marker:
                in_fence = False
                fence_marker = ""
            out.append(line)
            continue
        if in_fence:
            out.append(line)
            continue
        list_match = LIST_MARKER_RE.match(line)
        if list_match and not list_match.group("indent"):
            if out and out[-1].strip() and not LIST_MARKER_RE.match(out[-1]):
                out.append("")
        out.append(line)
    return "\n".join(out)
