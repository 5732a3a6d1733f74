from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from pathlib import Path

from .records import DEFAULT_CATEGORIES, CategoryTable
from .utils import parse_int

try:
    import tomllib as toml
except ImportError:
    try:
        import tomli as toml
    except ImportError:  # pragma: no cover - optional dependency
        toml = None

try:
    import yaml
except ImportError:  # pragma: no cover - optional dependency
    yaml = None

DEFAULTS = {
    "site_name": "MechaToraのブログ",
    "site_description": "社労士×エンジニアのMechaToraが、Web開発・技術・キャリア・データサイエンスについて発信するブログ",
    "articles_description": "MechaToraのブログ記事一覧。技術・開発、キャリア・資格、データサイエンス、雑記など幅広いトピックを発信中。",
    "site_url": "https://blog.mechatora.com",
    "author": "MechaTora",
    "author_bio": (
        "社会保険労務士 × Web開発エンジニア × データサイエンティスト。<br>\n"
        "人事労務の専門知識とプログラミングスキルを活かして、実務に役立つツールやコンテンツを開発・発信しています。"
    ),
    "footer_text": "社労士×エンジニアのMechaToraが運営する技術ブログです。",
    "external_link_url": "https://mechatora.com",
    "external_link_label": "MechaTora（開発ツール）",
    "copyright_year": "2025",
    "content_dir": "articles/content",
    "articles_dir": "articles",
    "metadata_file": "articles-metadata.json",
    "articles_page": "articles.html",
    "homepage": "index.html",
    "feed_file": "feed.xml",
    "sitemap_file": "sitemap.xml",
    "feed_limit": 20,
    "latest_limit": 5,
    "excerpt_length": 150,
}


@dataclass
class Site:
    """Resolved settings shared by every generator."""

    root: Path
    site_name: str = DEFAULTS["site_name"]
    site_description: str = DEFAULTS["site_description"]
    articles_description: str = DEFAULTS["articles_description"]
    site_url: str = DEFAULTS["site_url"]
    author: str = DEFAULTS["author"]
    author_bio: str = DEFAULTS["author_bio"]
    footer_text: str = DEFAULTS["footer_text"]
    external_link_url: str = DEFAULTS["external_link_url"]
    external_link_label: str = DEFAULTS["external_link_label"]
    copyright_year: str = DEFAULTS["copyright_year"]
    content_dir: Path = Path(DEFAULTS["content_dir"])
    articles_dir: Path = Path(DEFAULTS["articles_dir"])
    metadata_file: Path = Path(DEFAULTS["metadata_file"])
    articles_page: Path = Path(DEFAULTS["articles_page"])
    homepage: Path = Path(DEFAULTS["homepage"])
    feed_file: Path = Path(DEFAULTS["feed_file"])
    sitemap_file: Path = Path(DEFAULTS["sitemap_file"])
    feed_limit: int = DEFAULTS["feed_limit"]
    latest_limit: int = DEFAULTS["latest_limit"]
    excerpt_length: int = DEFAULTS["excerpt_length"]
    analytics_html: str = ""
    categories: CategoryTable = field(default=DEFAULT_CATEGORIES)

    def __post_init__(self) -> None:
        self.root = Path(self.root)
        for name in (
            "content_dir",
            "articles_dir",
            "metadata_file",
            "articles_page",
            "homepage",
            "feed_file",
            "sitemap_file",
        ):
            path = Path(getattr(self, name))
            if not path.is_absolute():
                path = self.root / path
            setattr(self, name, path)
        self.site_url = self.site_url.rstrip("/")


def load_config(path: Path) -> dict:
    if not path.exists():
        return {}
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix == ".toml":
        if toml is None:
            print("TOML config requires tomllib (Python 3.11+) or tomli.", file=sys.stderr)
            sys.exit(1)
        try:
            data = toml.loads(text)
        except Exception as exc:  # pragma: no cover - depends on parser
            print(f"Invalid TOML in config file {path}: {exc}", file=sys.stderr)
            sys.exit(1)
        if not isinstance(data, dict):
            print(f"TOML config must be a mapping: {path}", file=sys.stderr)
            sys.exit(1)
        return data
    if suffix in {".yml", ".yaml"}:
        if yaml is None:
            print("YAML config requires PyYAML.", file=sys.stderr)
            sys.exit(1)
        try:
            data = yaml.safe_load(text)
        except Exception as exc:  # pragma: no cover - depends on parser
            print(f"Invalid YAML in config file {path}: {exc}", file=sys.stderr)
            sys.exit(1)
        if data is None:
            return {}
        if not isinstance(data, dict):
            print(f"YAML config must be a mapping: {path}", file=sys.stderr)
            sys.exit(1)
        return data
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        print(f"Invalid JSON in config file {path}: {exc}", file=sys.stderr)
        sys.exit(1)
    if not isinstance(data, dict):
        print(f"JSON config must be a mapping: {path}", file=sys.stderr)
        sys.exit(1)
    return data


def resolve_analytics(config: dict, root: Path) -> str:
    html_snippet = str(config.get("analytics_html") or "").strip()
    if html_snippet:
        return html_snippet
    file_value = str(config.get("analytics_file") or "").strip()
    if not file_value:
        return ""
    path = Path(file_value)
    if not path.is_absolute():
        path = root / path
    if not path.exists():
        print(f"Analytics file not found: {path}", file=sys.stderr)
        return ""
    return path.read_text(encoding="utf-8")


def site_from_config(config: dict, root: Path) -> Site:
    values = {}
    for key, default in DEFAULTS.items():
        value = config.get(key)
        if value is None:
            continue
        if isinstance(default, int):
            values[key] = parse_int(value, default)
        else:
            values[key] = str(value)
    return Site(root=root, analytics_html=resolve_analytics(config, root), **values)
