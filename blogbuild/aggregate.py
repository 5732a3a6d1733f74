from __future__ import annotations

from .cache import load_metadata
from .config import Site
from .content import read_sources, record_from_meta
from .records import ArticleRecord, sort_records


def markdown_records(site: Site) -> list[ArticleRecord]:
    if not site.content_dir.exists():
        return []
    return [
        record_from_meta(source.meta, source.filename, site.categories)
        for source in read_sources(site.content_dir)
    ]


def collect_articles(site: Site) -> list[ArticleRecord]:
    """Merge extracted HTML articles with pending Markdown articles, newest first.

    A Markdown article replaces an extracted record with the same output
    filename.
    """
    pending = markdown_records(site)
    pending_names = {record.filename for record in pending}
    existing = [
        record
        for record in load_metadata(site.metadata_file, site.categories)
        if record.filename not in pending_names
    ]
    return sort_records(existing + pending)
