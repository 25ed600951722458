"""
Markdown body rendering for cards.

Stages:
- markdown-it parses the body with GitHub-flavoured extensions (tables,
  strikethrough, autolinks).
- A core rule drops raw HTML tokens, so nothing typed as HTML in the body
  reaches the output, and maps strikethrough onto <del>.
- bleach cleans the HTML against the tag/attribute/protocol allow-lists.
- Two stream filters then force safe link targets and remove images whose
  host is not allow-listed.
"""

from __future__ import annotations

import threading
from typing import Iterator

from bleach.html5lib_shim import Filter
from bleach.sanitizer import Cleaner
from markdown_it import MarkdownIt
from markdown_it.rules_core import StateCore

from .card import is_allowed_image_host
from .config import ALLOWED_ATTRIBUTES, ALLOWED_PROTOCOLS, ALLOWED_TAGS

_RAW_HTML_TOKENS = {"html_block", "html_inline"}
_STRIKE_TOKENS = {"s_open", "s_close"}


def drop_raw_html(state: StateCore) -> None:
    kept = []
    for token in state.tokens:
        if token.type in _RAW_HTML_TOKENS:
            continue
        if token.type == "inline" and token.children:
            children = []
            for child in token.children:
                if child.type in _RAW_HTML_TOKENS:
                    continue
                if child.type in _STRIKE_TOKENS:
                    child.tag = "del"
                children.append(child)
            token.children = children
        kept.append(token)
    state.tokens = kept


def _build_parser() -> MarkdownIt:
    md = MarkdownIt("gfm-like", {"typographer": False})
    # Protocols are the sanitizer's call; a rejected link keeps its text.
    md.validateLink = lambda url: True
    md.core.ruler.push("drop_raw_html", drop_raw_html)
    return md


# linkify-it caches the last scanned text on the instance.
_local = threading.local()


def _parser() -> MarkdownIt:
    md = getattr(_local, "md", None)
    if md is None:
        md = _local.md = _build_parser()
    return md


class LinkTargetFilter(Filter):
    def __iter__(self) -> Iterator[dict]:
        for token in Filter.__iter__(self):
            if token["type"] == "StartTag" and token["name"] == "a":
                attrs = dict(token.get("data") or {})
                attrs[(None, "target")] = "_blank"
                attrs[(None, "rel")] = "noopener noreferrer"
                token["data"] = attrs
            yield token


class ImageHostFilter(Filter):
    def __iter__(self) -> Iterator[dict]:
        for token in Filter.__iter__(self):
            if token["type"] in ("StartTag", "EmptyTag") and token["name"] == "img":
                attrs = dict(token.get("data") or {})
                if not is_allowed_image_host(attrs.get((None, "src"))):
                    continue
                attrs[(None, "loading")] = "lazy"
                token["data"] = attrs
            yield token


def _cleaner() -> Cleaner:
    return Cleaner(
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        protocols=ALLOWED_PROTOCOLS,
        strip=True,
        strip_comments=True,
        filters=[LinkTargetFilter, ImageHostFilter],
    )


def render_markdown(markdown: str) -> str:
    """Render an untrusted card body to HTML that is safe to inject as-is."""
    if not markdown or not markdown.strip():
        return ""

    html = _parser().render(markdown)
    # Cleaners keep parser state between calls; one per render.
    return _cleaner().clean(html).strip()
