from __future__ import annotations

import html
import re
from pathlib import Path

from .cache import write_metadata
from .records import DEFAULT_CATEGORIES, ArticleRecord, CategoryTable, SourceKind, sort_records
from .render import strip_tags
from .utils import DEFAULT_DATE, parse_date

TITLE_RE = re.compile(r"<h1[^>]*>(.*?)</h1>", re.DOTALL)
DATE_RE = re.compile(r'<time datetime="([\d-]+)"')
CATEGORY_RE = re.compile(r'<span class="article-category">(.*?)</span>', re.DOTALL)
DESCRIPTION_RE = re.compile(r'<meta name="description" content="(.*?)"', re.DOTALL)
THUMBNAIL_RE = re.compile(r'<img src="(\.\./images/[^"]*)" alt=')
FALLBACK_CATEGORY = "技術・開発"
FALLBACK_THUMBNAIL = "../images/tech-default.svg"


def extract_metadata(
    html_text: str, filename: str, categories: CategoryTable = DEFAULT_CATEGORIES
) -> ArticleRecord:
    """Recover an article record from a rendered page.

    Pattern matching is best effort; every field falls back to a default
    instead of raising on hand-edited pages.
    """
    _, marker, after = html_text.partition("<article>")
    article_section = after if marker else html_text
    title_match = TITLE_RE.search(article_section)
    title = html.unescape(strip_tags(title_match.group(1))).strip() if title_match else ""
    if not title:
        title = filename[: -len(".html")] if filename.endswith(".html") else filename

    date_match = DATE_RE.search(html_text)
    date = parse_date(date_match.group(1) if date_match else "", DEFAULT_DATE)

    category_match = CATEGORY_RE.search(html_text)
    label = html.unescape(category_match.group(1)).strip() if category_match else FALLBACK_CATEGORY

    desc_match = DESCRIPTION_RE.search(html_text)
    description = html.unescape(desc_match.group(1)) if desc_match else ""

    thumb_match = THUMBNAIL_RE.search(html_text)
    thumbnail = html.unescape(thumb_match.group(1)) if thumb_match else FALLBACK_THUMBNAIL

    return ArticleRecord(
        title=title,
        date=date,
        category=categories.resolve(label),
        description=description,
        filename=filename,
        thumbnail=thumbnail,
        source_kind=SourceKind.PRERENDERED_HTML,
    )


def extract_all(
    articles_dir: Path, metadata_file: Path, categories: CategoryTable = DEFAULT_CATEGORIES
) -> list[ArticleRecord]:
    records = []
    html_files = sorted(articles_dir.glob("*.html"), key=lambda p: p.name) if articles_dir.exists() else []
    for path in html_files:
        if not path.is_file():
            continue
        html_text = path.read_text(encoding="utf-8", errors="replace")
        records.append(extract_metadata(html_text, path.name, categories))
    records = sort_records(records)
    write_metadata(metadata_file, records, categories)
    print(f"Extracted metadata for {len(records)} articles into {metadata_file.name}")
    return records
