from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

from .aggregate import collect_articles
from .config import DEFAULTS, Site, load_config, site_from_config
from .extract import extract_all
from .pages import build_articles, build_articles_index, build_rss, build_sitemap, update_homepage
from .utils import parse_int


def run_build_articles(site: Site) -> None:
    try:
        build_articles(site)
    except Exception as exc:
        print(f"Error while building articles: {exc}", file=sys.stderr)
        sys.exit(1)


def run_extract_metadata(site: Site) -> None:
    extract_all(site.articles_dir, site.metadata_file, site.categories)


def run_generate_list(site: Site) -> None:
    records = collect_articles(site)
    build_articles_index(site, records)
    update_homepage(site, records)


def run_generate_rss(site: Site) -> None:
    build_rss(site, collect_articles(site))


def run_generate_sitemap(site: Site) -> None:
    build_sitemap(site, collect_articles(site))


def run_all(site: Site) -> None:
    run_extract_metadata(site)
    run_build_articles(site)
    run_generate_list(site)
    run_generate_rss(site)
    run_generate_sitemap(site)


COMMANDS = {
    "build-articles": (run_build_articles, "Render Markdown articles to HTML pages."),
    "extract-metadata": (run_extract_metadata, "Extract metadata from rendered HTML articles."),
    "generate-list": (run_generate_list, "Generate the article index and refresh the homepage."),
    "generate-rss": (run_generate_rss, "Generate the RSS 2.0 feed."),
    "generate-sitemap": (run_generate_sitemap, "Generate sitemap.xml."),
    "all": (run_all, "Run every step in order."),
}


def build_parser(config: dict, config_path: str) -> argparse.ArgumentParser:
    def cfg_str(key: str, default: str) -> str:
        value = config.get(key)
        return default if value is None else str(value)

    def cfg_int(key: str, default: int) -> int:
        return parse_int(config.get(key), default)

    parser = argparse.ArgumentParser(description="Static build pipeline for the blog.")
    parser.add_argument("--config", default=config_path, help="Path to site config file (TOML/YAML/JSON).")
    parser.add_argument(
        "--root",
        default=cfg_str("root", "."),
        help="Project root that relative paths are resolved against.",
    )
    parser.add_argument(
        "--site-url",
        default=cfg_str("site_url", DEFAULTS["site_url"]),
        help="Public site URL used for links, RSS and sitemap.",
    )
    parser.add_argument(
        "--feed-limit",
        default=cfg_int("feed_limit", DEFAULTS["feed_limit"]),
        type=int,
        help="Maximum number of articles in the RSS feed.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    for name, (_, help_text) in COMMANDS.items():
        subparsers.add_parser(name, help=help_text)
    return parser


def main(argv: list[str] | None = None) -> None:
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument(
        "--config",
        default="site.toml",
        help="Path to site config file (TOML/YAML/JSON).",
    )
    pre_args, _ = pre_parser.parse_known_args(argv)
    config = load_config(Path(pre_args.config))

    parser = build_parser(config, pre_args.config)
    args = parser.parse_args(argv)
    if args.feed_limit < 1:
        parser.error(f"--feed-limit must be at least 1, got {args.feed_limit}")
    config = dict(config, site_url=args.site_url, feed_limit=args.feed_limit)
    site = site_from_config(config, Path(args.root))

    start = time.perf_counter()
    handler, _ = COMMANDS[args.command]
    handler(site)
    elapsed = time.perf_counter() - start
    print(f"Completed {args.command} in {elapsed:.2f}s.")
