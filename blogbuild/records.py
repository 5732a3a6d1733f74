from __future__ import annotations

import datetime as dt
import enum
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from .utils import DEFAULT_DATE, iso_date, parse_date


class Category(enum.Enum):
    TECH = "tech"
    CAREER = "career"
    DATASCIENCE = "datascience"
    MISC = "misc"

    @property
    def slug(self) -> str:
        return self.value


class SourceKind(enum.Enum):
    MARKDOWN = "markdown"
    PRERENDERED_HTML = "prerendered-html"


@dataclass(frozen=True)
class CategoryInfo:
    category: Category
    label: str
    icon: str

    @property
    def slug(self) -> str:
        return self.category.slug

    @property
    def default_image(self) -> str:
        return f"../images/{self.slug}-default.svg"


class CategoryTable:
    """Closed lookup table for the four blog categories.

    Iteration yields entries in index-page order. Unknown labels resolve to
    ``Category.MISC``.
    """

    def __init__(self, entries: list[CategoryInfo], fallback: Category = Category.MISC):
        self._by_category: Mapping[Category, CategoryInfo] = MappingProxyType(
            {entry.category: entry for entry in entries}
        )
        self._by_label: Mapping[str, Category] = MappingProxyType(
            {entry.label: entry.category for entry in entries}
        )
        self._order = tuple(entry.category for entry in entries)
        self.fallback = fallback

    def __iter__(self):
        return (self._by_category[category] for category in self._order)

    def __len__(self) -> int:
        return len(self._order)

    def info(self, category: Category) -> CategoryInfo:
        return self._by_category[category]

    def resolve(self, label: object) -> Category:
        if isinstance(label, Category):
            return label
        return self._by_label.get(str(label or "").strip(), self.fallback)

    def label(self, category: Category) -> str:
        return self._by_category[category].label

    def default_image(self, category: Category) -> str:
        return self._by_category[category].default_image


DEFAULT_CATEGORIES = CategoryTable(
    [
        CategoryInfo(Category.TECH, "技術・開発", "💻"),
        CategoryInfo(Category.CAREER, "キャリア・資格", "👔"),
        CategoryInfo(Category.DATASCIENCE, "データサイエンス", "📊"),
        CategoryInfo(Category.MISC, "雑記", "📝"),
    ]
)


@dataclass
class ArticleRecord:
    title: str
    date: dt.date
    category: Category
    description: str
    filename: str
    thumbnail: str
    keywords: str = ""
    source_kind: SourceKind = SourceKind.MARKDOWN

    @property
    def iso_date(self) -> str:
        return iso_date(self.date)

    def to_json(self, categories: CategoryTable = DEFAULT_CATEGORIES) -> dict:
        return {
            "title": self.title,
            "date": self.iso_date,
            "category": categories.label(self.category),
            "description": self.description,
            "filename": self.filename,
            "thumbnail": self.thumbnail,
        }

    @classmethod
    def from_json(cls, data: dict, categories: CategoryTable = DEFAULT_CATEGORIES) -> "ArticleRecord":
        category = categories.resolve(data.get("category"))
        filename = str(data.get("filename") or "")
        return cls(
            title=str(data.get("title") or ""),
            date=parse_date(data.get("date"), DEFAULT_DATE),
            category=category,
            description=str(data.get("description") or ""),
            filename=filename,
            thumbnail=str(data.get("thumbnail") or "") or categories.default_image(category),
            source_kind=SourceKind.PRERENDERED_HTML,
        )


def sort_records(records: list[ArticleRecord]) -> list[ArticleRecord]:
    return sorted(records, key=lambda record: record.date, reverse=True)
