from __future__ import annotations

import json
import sys
from pathlib import Path

from .records import DEFAULT_CATEGORIES, ArticleRecord, CategoryTable


def load_metadata(path: Path, categories: CategoryTable = DEFAULT_CATEGORIES) -> list[ArticleRecord]:
    """Read the records of already-rendered articles.

    A missing file means nothing has been extracted yet. A file that is not a
    JSON array is reported and treated as empty.
    """
    if not path.exists():
        return []
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        print(f"Ignoring unreadable metadata file {path}: {exc}", file=sys.stderr)
        return []
    if not isinstance(data, list):
        print(f"Ignoring metadata file {path}: expected a JSON array", file=sys.stderr)
        return []
    return [ArticleRecord.from_json(item, categories) for item in data if isinstance(item, dict)]


def write_metadata(
    path: Path, records: list[ArticleRecord], categories: CategoryTable = DEFAULT_CATEGORIES
) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    data = [record.to_json(categories) for record in records]
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
