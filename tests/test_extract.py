"""Tests for reverse-extracting metadata from rendered article pages."""

import datetime as dt
import json

from blogbuild.content import record_from_meta
from blogbuild.extract import extract_all, extract_metadata
from blogbuild.pages import render_article
from blogbuild.records import Category, SourceKind


def test_round_trip_through_rendered_page(site) -> None:
    record = record_from_meta(
        {
            "title": "R&D <notes>",
            "date": "2024-11-20",
            "category": "キャリア・資格",
            "description": 'Say "hello" & more',
            "thumbnail": "../images/career-shot.png",
        },
        "rd.md",
    )
    page = render_article(site, record, "<h2>Body</h2>")

    extracted = extract_metadata(page, "rd.html")

    assert extracted.title == "R&D <notes>"
    assert extracted.date == dt.date(2024, 11, 20)
    assert extracted.category is Category.CAREER
    assert extracted.description == 'Say "hello" & more'
    assert extracted.thumbnail == "../images/career-shot.png"
    assert extracted.source_kind is SourceKind.PRERENDERED_HTML


def test_title_ignores_headings_outside_article() -> None:
    html = "<header><h1>Logo</h1></header><article><h1>Real <em>title</em></h1></article>"
    assert extract_metadata(html, "x.html").title == "Real title"


def test_defaults_for_empty_page() -> None:
    record = extract_metadata("<html><body>hand edited</body></html>", "hand-made.html")
    assert record.title == "hand-made"
    assert record.date == dt.date(2025, 1, 1)
    assert record.category is Category.TECH
    assert record.description == ""
    assert record.thumbnail == "../images/tech-default.svg"
    assert record.filename == "hand-made.html"


def test_unknown_category_label_is_misc() -> None:
    html = '<span class="article-category">旅行</span>'
    assert extract_metadata(html, "t.html").category is Category.MISC


def test_extract_all_writes_sorted_json(tmp_path) -> None:
    articles_dir = tmp_path / "articles"
    articles_dir.mkdir()
    (articles_dir / "old.html").write_text(
        '<article><h1>Old</h1><time datetime="2023-01-01">x</time></article>', encoding="utf-8"
    )
    (articles_dir / "new.html").write_text(
        '<article><h1>New</h1><time datetime="2025-06-01">x</time></article>', encoding="utf-8"
    )
    (articles_dir / "content").mkdir()
    metadata_file = tmp_path / "articles-metadata.json"
    metadata_file.write_text('[{"title": "stale"}]', encoding="utf-8")

    records = extract_all(articles_dir, metadata_file)

    data = json.loads(metadata_file.read_text(encoding="utf-8"))
    assert [item["filename"] for item in data] == ["new.html", "old.html"]
    assert [item["date"] for item in data] == ["2025-06-01", "2023-01-01"]
    assert data[0]["category"] == "技術・開発"
    assert len(records) == 2


def test_extract_all_without_articles_dir(tmp_path) -> None:
    metadata_file = tmp_path / "articles-metadata.json"
    assert extract_all(tmp_path / "missing", metadata_file) == []
    assert json.loads(metadata_file.read_text(encoding="utf-8")) == []


def test_extract_all_tolerates_non_utf8_page(tmp_path) -> None:
    articles_dir = tmp_path / "articles"
    articles_dir.mkdir()
    (articles_dir / "legacy.html").write_bytes(
        '<article><h1>日本語</h1><time datetime="2022-05-05">x</time></article>'.encode("shift_jis")
    )
    metadata_file = tmp_path / "articles-metadata.json"

    records = extract_all(articles_dir, metadata_file)

    assert len(records) == 1
    assert records[0].date == dt.date(2022, 5, 5)
    data = json.loads(metadata_file.read_text(encoding="utf-8"))
    assert [item["filename"] for item in data] == ["legacy.html"]
