#!/usr/bin/env python3
from __future__ import annotations

import re

# ---------- Locations

DEFAULT_CARD_PATH = ".ishipped/card.md"
RAW_CONTENT_BASE = "https://raw.githubusercontent.com"

# ---------- Field limits

MAX_TITLE_LEN = 100
MAX_SUMMARY_LEN = 280
MAX_VERSION_LEN = 20
MAX_TAGS = 10
MAX_TAG_LEN = 30
MAX_LINKS = 10
MAX_LINK_LABEL_LEN = 50
MAX_COLLABORATORS = 20
MAX_USERNAME_LEN = 39
MAX_IMAGES = 10

# ---------- Allow-lists

ALLOWED_IMAGE_HOSTS = (
    "raw.githubusercontent.com",
    "user-images.githubusercontent.com",
    "avatars.githubusercontent.com",
    "i.imgur.com",
)

THEMES = (
    "default",
    "ocean",
    "forest",
    "sunset",
    "lavender",
    "midnight",
    "ruby",
)

# h1 is reserved for the card title.
ALLOWED_TAGS = frozenset(
    [
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "p",
        "br",
        "hr",
        "ul",
        "ol",
        "li",
        "blockquote",
        "pre",
        "code",
        "a",
        "strong",
        "em",
        "del",
        "img",
        "table",
        "thead",
        "tbody",
        "tr",
        "th",
        "td",
        "span",
    ]
)

ALLOWED_ATTRIBUTES = {
    "a": ["href", "title"],
    "img": ["src", "alt", "title", "loading"],
    "code": ["class"],
    "span": ["class"],
    "pre": ["class"],
}

ALLOWED_PROTOCOLS = frozenset(["https"])

# ---------- Regexes

FRONTMATTER_DELIMITER = "---"
ISO_DATE_RE = re.compile(
    r"^\d{4}-\d{2}-\d{2}"
    r"(T\d{2}:\d{2}:\d{2}(\.\d{3})?(Z|[+-]\d{2}:\d{2})?)?$"
)
REPO_NAME_RE = re.compile(r"^[a-zA-Z0-9_-]+$")
# Lenient: consecutive hyphens pass although GitHub itself forbids them.
GITHUB_USERNAME_RE = re.compile(r"^[a-zA-Z0-9](?:[a-zA-Z0-9-]*[a-zA-Z0-9])?$")
URL_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")
ABSOLUTE_ASSET_RE = re.compile(r"^(?:https?://|data:)", re.IGNORECASE)
UNSAFE_URL_CHARS_RE = re.compile(r"[\s\\]")
