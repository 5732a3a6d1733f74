"""Tests for the category table and article records."""

import datetime as dt

import pytest

from blogbuild.records import (
    DEFAULT_CATEGORIES,
    ArticleRecord,
    Category,
    SourceKind,
    sort_records,
)


def make_record(filename: str, date: dt.date, kind: SourceKind = SourceKind.MARKDOWN) -> ArticleRecord:
    return ArticleRecord(
        title=filename,
        date=date,
        category=Category.TECH,
        description="",
        filename=filename,
        thumbnail="",
        source_kind=kind,
    )


class TestCategoryTable:
    def test_order_is_fixed(self) -> None:
        assert [info.slug for info in DEFAULT_CATEGORIES] == ["tech", "career", "datascience", "misc"]

    @pytest.mark.parametrize(
        "label, category",
        [
            ("技術・開発", Category.TECH),
            ("キャリア・資格", Category.CAREER),
            ("データサイエンス", Category.DATASCIENCE),
            ("雑記", Category.MISC),
            ("unknown", Category.MISC),
            (None, Category.MISC),
        ],
    )
    def test_resolve(self, label, category) -> None:
        assert DEFAULT_CATEGORIES.resolve(label) is category

    def test_default_image(self) -> None:
        assert DEFAULT_CATEGORIES.default_image(Category.CAREER) == "../images/career-default.svg"


class TestJson:
    def test_to_json_uses_label_and_iso_date(self) -> None:
        record = make_record("a.html", dt.date(2025, 3, 1))
        data = record.to_json()
        assert data == {
            "title": "a.html",
            "date": "2025-03-01",
            "category": "技術・開発",
            "description": "",
            "filename": "a.html",
            "thumbnail": "",
        }

    def test_from_json_tolerates_missing_fields(self) -> None:
        record = ArticleRecord.from_json({"filename": "old.html", "date": "bad"})
        assert record.date == dt.date(2025, 1, 1)
        assert record.category is Category.MISC
        assert record.thumbnail == "../images/misc-default.svg"
        assert record.source_kind is SourceKind.PRERENDERED_HTML


def test_sort_records_newest_first_across_kinds() -> None:
    records = [
        make_record("a.html", dt.date(2024, 5, 1), SourceKind.PRERENDERED_HTML),
        make_record("b.html", dt.date(2025, 2, 1)),
        make_record("c.html", dt.date(2023, 1, 1)),
        make_record("d.html", dt.date(2025, 1, 15), SourceKind.PRERENDERED_HTML),
    ]
    ordered = sort_records(records)
    dates = [record.date for record in ordered]
    assert dates == sorted(dates, reverse=True)
    assert [record.filename for record in ordered] == ["b.html", "d.html", "a.html", "c.html"]
