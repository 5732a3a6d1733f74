from __future__ import annotations

import re
import xml.etree.ElementTree as etree
from markdown.extensions import Extension
from markdown.inlinepatterns import InlineProcessor

# Bare http(s) URLs and www. hosts. Trailing punctuation stays outside the link.
RE_BARE_URL = (
    r"(?<![\"'=(\[/\w])"
    r"(?P<url>(?:https?://|www\.)[^\s<>\"'\u3000-\u30ff\u4e00-\u9fff]*[^\s<>\"'.,;:!?)\]\u3000-\u30ff\u4e00-\u9fff])"
)
ANCHOR_OPEN_RE = re.compile(r"<a[\s>]", re.IGNORECASE)
ANCHOR_CLOSE_RE = re.compile(r"</a\s*>", re.IGNORECASE)


def inside_raw_anchor(data: str, position: int) -> bool:
    before = data[:position]
    opens = [m.start() for m in ANCHOR_OPEN_RE.finditer(before)]
    if not opens:
        return False
    closes = [m.start() for m in ANCHOR_CLOSE_RE.finditer(before)]
    return not closes or opens[-1] > closes[-1]


class BareUrlProcessor(InlineProcessor):
    def handleMatch(self, m, data):
        # Raw inline HTML is still plain text at this priority.
        if inside_raw_anchor(data, m.start(0)):
            return None, None, None
        url = m.group("url")
        href = url if "://" in url else f"http://{url}"
        el = etree.Element("a")
        el.set("href", href)
        el.text = url
        return el, m.start(0), m.end(0)


class AutolinkExtension(Extension):
    """Turn bare URLs in text into links.

    Registered below the link and ``<url>`` autolink patterns, so URLs those
    already consumed are stashed and never seen here. URLs inside a raw
    ``<a>`` element are left alone.
    """

    def extendMarkdown(self, md):
        md.inlinePatterns.register(BareUrlProcessor(RE_BARE_URL, md), "bare_url", 105)
