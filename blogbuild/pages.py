from __future__ import annotations

import datetime as dt
import json
import sys
from pathlib import Path
from typing import Optional
from urllib.parse import quote, urlencode

from .config import Site
from .content import read_sources, record_from_meta
from .records import ArticleRecord, Category
from .render import (
    escape_html,
    escape_xml,
    markdown_to_html,
    patch_region,
    read_template,
    render_template,
    write_text,
)
from .utils import format_date_ja, join_url, rfc822_date

LATEST_START_MARKER = "<!-- 最新記事セクション -->"
LATEST_END_MARKER = "<!-- カテゴリーセクション -->"
STATIC_PAGES = [
    ("", "daily", "1.0"),
    ("articles.html", "daily", "0.9"),
    ("about.html", "monthly", "0.8"),
    ("contact.html", "monthly", "0.7"),
    ("privacy.html", "monthly", "0.6"),
]


def article_url(site: Site, filename: str) -> str:
    return join_url(site.site_url, f"articles/{filename}")


def build_category_links(site: Site, root: str) -> str:
    items = []
    for info in site.categories:
        items.append(
            f'                        <li><a href="{root}articles.html#{info.slug}">'
            f"{escape_html(info.label)}</a></li>"
        )
    return "\n".join(items)


def build_chrome(site: Site, root: str) -> dict:
    context = {
        "root": root,
        "site_name": escape_html(site.site_name),
    }
    header = render_template(read_template("header.html"), **context)
    footer = render_template(
        read_template("footer.html"),
        category_links=build_category_links(site, root),
        footer_text=escape_html(site.footer_text),
        external_link_url=escape_html(site.external_link_url),
        external_link_label=escape_html(site.external_link_label),
        copyright_year=escape_html(site.copyright_year),
        author=escape_html(site.author),
        **context,
    )
    return {"header": header, "footer": footer}


def script_json(data: dict) -> str:
    text = json.dumps(data, ensure_ascii=False, indent=4)
    text = text.replace("</", "<\\/")
    return "\n".join(f"    {line}" for line in text.splitlines())


def build_posting_json(site: Site, record: ArticleRecord) -> str:
    return script_json(
        {
            "@context": "https://schema.org",
            "@type": "BlogPosting",
            "headline": record.title,
            "description": record.description,
            "author": {"@type": "Person", "name": site.author},
            "datePublished": record.iso_date,
            "dateModified": record.iso_date,
            "mainEntityOfPage": article_url(site, record.filename),
        }
    )


def build_breadcrumb_json(site: Site, record: ArticleRecord) -> str:
    crumbs = [
        ("ホーム", site.site_url + "/"),
        ("記事一覧", join_url(site.site_url, "articles.html")),
        (record.title, article_url(site, record.filename)),
    ]
    return script_json(
        {
            "@context": "https://schema.org",
            "@type": "BreadcrumbList",
            "itemListElement": [
                {"@type": "ListItem", "position": position, "name": name, "item": item}
                for position, (name, item) in enumerate(crumbs, start=1)
            ],
        }
    )


def build_share_urls(site: Site, record: ArticleRecord) -> dict:
    url = article_url(site, record.filename)
    return {
        "share_x": "https://twitter.com/intent/tweet?" + urlencode({"url": url, "text": record.title}),
        "share_facebook": "https://www.facebook.com/sharer/sharer.php?" + urlencode({"u": url}),
        "share_hatena": "https://b.hatena.ne.jp/add?"
        + urlencode({"mode": "confirm", "url": url, "title": record.title}, quote_via=quote),
    }


def render_article(site: Site, record: ArticleRecord, body_html: str) -> str:
    info = site.categories.info(record.category)
    share = {key: escape_html(value) for key, value in build_share_urls(site, record).items()}
    return render_template(
        read_template("article.html"),
        title=escape_html(record.title),
        description=escape_html(record.description),
        keywords=escape_html(record.keywords),
        site_name=escape_html(site.site_name),
        canonical_url=escape_html(article_url(site, record.filename)),
        posting_json=build_posting_json(site, record),
        breadcrumb_json=build_breadcrumb_json(site, record),
        analytics=site.analytics_html,
        category_slug=info.slug,
        category_label=escape_html(info.label),
        iso_date=record.iso_date,
        formatted_date=format_date_ja(record.date),
        hero_image=escape_html(record.thumbnail),
        author=escape_html(site.author),
        author_bio=site.author_bio,
        content=body_html,
        **share,
        **build_chrome(site, "../"),
    )


def build_articles(site: Site) -> list[Path]:
    """Render every Markdown file in the content directory to an HTML page."""
    if not site.content_dir.exists():
        print(f"Content directory {site.content_dir} does not exist, creating it.")
        site.content_dir.mkdir(parents=True, exist_ok=True)
        return []

    sources = read_sources(site.content_dir)
    if not sources:
        print("No Markdown files to convert.")
        return []

    print(f"Converting {len(sources)} Markdown files...")
    written = []
    for source in sources:
        record = record_from_meta(source.meta, source.filename, site.categories)
        page = render_article(site, record, markdown_to_html(source.body))
        output_path = site.articles_dir / record.filename
        write_text(output_path, page)
        written.append(output_path)
        print(f"Built {record.filename} from {source.filename}")
    print(f"Generated {len(written)} articles.")
    return written


def build_article_card(record: ArticleRecord, site: Site) -> str:
    label = escape_html(site.categories.label(record.category))
    title = escape_html(record.title)
    return (
        '                <article class="article-card-grid">\n'
        f'                    <a href="articles/{escape_html(record.filename)}" '
        'style="text-decoration: none; color: inherit; display: block;">\n'
        '                        <div class="article-thumbnail">\n'
        f'                            <img src="{escape_html(record.thumbnail)}" alt="{title}">\n'
        "                        </div>\n"
        '                        <div class="article-card-content">\n'
        '                            <div class="article-meta">\n'
        f'                                <span class="article-category">{label}</span>\n'
        f'                                <time datetime="{record.iso_date}">{format_date_ja(record.date)}</time>\n'
        "                            </div>\n"
        f'                            <h3 class="article-title">{title}</h3>\n'
        f'                            <p class="article-excerpt">{escape_html(record.description)}</p>\n'
        '                            <span class="read-more">続きを読む →</span>\n'
        "                        </div>\n"
        "                    </a>\n"
        "                </article>"
    )


def group_by_category(records: list[ArticleRecord], site: Site) -> dict[Category, list[ArticleRecord]]:
    groups: dict[Category, list[ArticleRecord]] = {info.category: [] for info in site.categories}
    for record in records:
        groups.setdefault(record.category, []).append(record)
    return groups


def render_articles_index(site: Site, records: list[ArticleRecord]) -> str:
    groups = group_by_category(records, site)
    sections = []
    for info in site.categories:
        items = groups[info.category]
        if info.category is Category.MISC and not items:
            continue
        cards = "\n".join(build_article_card(record, site) for record in items)
        sections.append(
            f'            <section id="{info.slug}" style="margin-bottom: 4rem;">\n'
            f'                <h2 class="section-title">{info.icon} {escape_html(info.label)} ({len(items)}記事)</h2>\n'
            '                <div class="articles-grid">\n'
            f"{cards}\n"
            "                </div>\n"
            "            </section>"
        )
    return render_template(
        read_template("articles.html"),
        description=escape_html(site.articles_description),
        site_name=escape_html(site.site_name),
        analytics=site.analytics_html,
        total=str(len(records)),
        content="\n\n".join(sections),
        **build_chrome(site, ""),
    )


def build_articles_index(site: Site, records: list[ArticleRecord]) -> Path:
    write_text(site.articles_page, render_articles_index(site, records))
    print(f"Generated {site.articles_page.name} ({len(records)} articles)")
    return site.articles_page


def excerpt(text: str, length: int) -> str:
    return text[:length] + "..."


def build_latest_card(record: ArticleRecord, index: int, site: Site) -> str:
    url = f"articles/{escape_html(record.filename)}"
    return (
        f"                <!-- 記事カード{index + 1} -->\n"
        '                <article class="article-card">\n'
        '                    <div class="article-meta">\n'
        f'                        <span class="article-category">{escape_html(site.categories.label(record.category))}</span>\n'
        f'                        <time datetime="{record.iso_date}">{format_date_ja(record.date)}</time>\n'
        "                    </div>\n"
        '                    <h3 class="article-title">\n'
        f'                        <a href="{url}">{escape_html(record.title)}</a>\n'
        "                    </h3>\n"
        '                    <p class="article-excerpt">\n'
        f"                        {escape_html(excerpt(record.description, site.excerpt_length))}\n"
        "                    </p>\n"
        f'                    <a href="{url}" class="read-more">続きを読む →</a>\n'
        "                </article>"
    )


def render_latest_section(site: Site, records: list[ArticleRecord]) -> str:
    cards = "\n\n".join(
        build_latest_card(record, index, site) for index, record in enumerate(records[: site.latest_limit])
    )
    return (
        f"            {LATEST_START_MARKER}\n"
        "            <section>\n"
        '                <h2 class="section-title">📝 最新記事</h2>\n'
        "\n"
        f"{cards}\n"
        "\n"
        "            </section>\n"
        "\n"
    )


def update_homepage(site: Site, records: list[ArticleRecord]) -> bool:
    """Replace the latest-articles block of the homepage in place.

    Returns False, leaving the file untouched, when the homepage or either
    marker is missing.
    """
    if not site.homepage.exists():
        print(f"Warning: homepage {site.homepage} not found, skipping update.", file=sys.stderr)
        return False
    original = site.homepage.read_text(encoding="utf-8")
    patched = patch_region(
        original, LATEST_START_MARKER, LATEST_END_MARKER, render_latest_section(site, records)
    )
    if patched is None:
        print(
            f"Warning: latest articles markers not found in {site.homepage.name}, skipping update.",
            file=sys.stderr,
        )
        return False
    if patched != original:
        write_text(site.homepage, patched)
    count = min(len(records), site.latest_limit)
    print(f"Updated {site.homepage.name} (latest {count} articles)")
    return True


def render_rss(site: Site, records: list[ArticleRecord], now: Optional[dt.datetime] = None) -> str:
    now = now or dt.datetime.now(dt.timezone.utc)
    feed_url = join_url(site.site_url, site.feed_file.name)
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<rss version="2.0" xmlns:atom="http://www.w3.org/2005/Atom">',
        "  <channel>",
        f"    <title>{escape_xml(site.site_name)}</title>",
        f"    <link>{escape_xml(site.site_url + '/')}</link>",
        f"    <description>{escape_xml(site.site_description)}</description>",
        "    <language>ja</language>",
        f"    <lastBuildDate>{rfc822_date(now)}</lastBuildDate>",
        f'    <atom:link href="{escape_xml(feed_url)}" rel="self" type="application/rss+xml"/>',
        "",
    ]
    for record in records[: site.feed_limit]:
        link = escape_xml(article_url(site, record.filename))
        lines.extend(
            [
                "    <item>",
                f"      <title>{escape_xml(record.title)}</title>",
                f"      <link>{link}</link>",
                f"      <guid>{link}</guid>",
                f"      <description>{escape_xml(record.description)}</description>",
                f"      <pubDate>{rfc822_date(record.date)}</pubDate>",
                "    </item>",
                "",
            ]
        )
    lines.extend(["  </channel>", "</rss>"])
    return "\n".join(lines)


def build_rss(site: Site, records: list[ArticleRecord], now: Optional[dt.datetime] = None) -> Path:
    write_text(site.feed_file, render_rss(site, records, now))
    print(f"Generated {site.feed_file.name} (latest {min(len(records), site.feed_limit)} articles)")
    return site.feed_file


def sitemap_entry(loc: str, lastmod: str, changefreq: str, priority: str) -> str:
    return "\n".join(
        [
            "    <url>",
            f"        <loc>{escape_xml(loc)}</loc>",
            f"        <lastmod>{lastmod}</lastmod>",
            f"        <changefreq>{changefreq}</changefreq>",
            f"        <priority>{priority}</priority>",
            "    </url>",
        ]
    )


def render_sitemap(site: Site, records: list[ArticleRecord], today: Optional[dt.date] = None) -> str:
    today = today or dt.date.today()
    entries = [
        sitemap_entry(f"{site.site_url}/{path}", today.isoformat(), freq, priority)
        for path, freq, priority in STATIC_PAGES
    ]
    for record in records:
        entries.append(sitemap_entry(article_url(site, record.filename), record.iso_date, "monthly", "0.8"))
    return "\n".join(
        [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9"',
            '        xmlns:image="http://www.google.com/schemas/sitemap-image/1.1">',
            "\n\n".join(entries),
            "</urlset>",
        ]
    )


def build_sitemap(site: Site, records: list[ArticleRecord], today: Optional[dt.date] = None) -> Path:
    write_text(site.sitemap_file, render_sitemap(site, records, today))
    print(f"Generated {site.sitemap_file.name} ({len(records) + len(STATIC_PAGES)} pages)")
    return site.sitemap_file
