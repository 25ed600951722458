"""
Card frontmatter parsing and validation.

A card document is YAML frontmatter between `---` lines followed by a
Markdown body. Only the title is mandatory; every other field is checked on
its own and dropped or clamped when invalid, so one bad link never blocks
the rest of the card from rendering.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional
from urllib.parse import urlparse

import yaml

from .config import (
    ALLOWED_IMAGE_HOSTS,
    GITHUB_USERNAME_RE,
    ISO_DATE_RE,
    MAX_COLLABORATORS,
    MAX_IMAGES,
    MAX_LINK_LABEL_LEN,
    MAX_LINKS,
    MAX_SUMMARY_LEN,
    MAX_TAG_LEN,
    MAX_TAGS,
    MAX_TITLE_LEN,
    MAX_USERNAME_LEN,
    MAX_VERSION_LEN,
    REPO_NAME_RE,
    THEMES,
    UNSAFE_URL_CHARS_RE,
    URL_SCHEME_RE,
)
from .utils import clip_text, load_frontmatter_yaml, split_frontmatter

logger = logging.getLogger(__name__)

CardErrorCode = Literal["INVALID_FORMAT", "MISSING_TITLE"]


class CardParseError(ValueError):
    def __init__(self, message: str, code: CardErrorCode):
        super().__init__(message)
        self.code = code


# ---------- Model


def _drop_none(value):
    if isinstance(value, dict):
        return {k: _drop_none(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [_drop_none(v) for v in value]
    return value


@dataclass(frozen=True)
class CardAuthor:
    name: str
    github: Optional[str] = None
    url: Optional[str] = None
    avatar: Optional[str] = None


@dataclass(frozen=True)
class CardLink:
    label: str
    url: str
    primary: bool = False


@dataclass(frozen=True)
class CardImage:
    url: str
    alt: Optional[str] = None
    caption: Optional[str] = None


@dataclass(frozen=True)
class CardRepo:
    owner: str
    name: str


@dataclass(frozen=True)
class CardFrontmatter:
    title: str
    author: CardAuthor
    summary: Optional[str] = None
    hero: Optional[str] = None
    icon: Optional[str] = None
    shipped: Optional[str] = None
    version: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    links: List[CardLink] = field(default_factory=list)
    repo: Optional[CardRepo] = None
    collaborators: List[str] = field(default_factory=list)
    images: List[CardImage] = field(default_factory=list)
    theme: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none(asdict(self))


@dataclass(frozen=True)
class ParsedCard:
    frontmatter: CardFrontmatter
    body: str

    def to_dict(self) -> Dict[str, Any]:
        return {"frontmatter": self.frontmatter.to_dict(), "body": self.body}


# ---------- URL checks


def is_valid_https_url(value: Any) -> bool:
    if not isinstance(value, str) or UNSAFE_URL_CHARS_RE.search(value):
        return False
    try:
        parsed = urlparse(value)
        host = parsed.hostname
    except ValueError:
        return False
    return parsed.scheme == "https" and bool(host)


def is_allowed_image_host(value: Any) -> bool:
    if not is_valid_https_url(value):
        return False
    host = urlparse(value).hostname or ""
    return any(host == h or host.endswith(f".{h}") for h in ALLOWED_IMAGE_HOSTS)


def is_valid_image_url(value: Any) -> bool:
    """Relative repo path without traversal, or an allow-listed https URL."""
    if not isinstance(value, str) or not value:
        return False
    # Any scheme counts as absolute here, so `foo:bar.png` must pass the host
    # check. The resolver only passes http(s) and data through untouched.
    if not URL_SCHEME_RE.match(value):
        return ".." not in value
    return is_allowed_image_host(value)


# ---------- Field validators


def _validate_image_field(value: Any, name: str) -> Optional[str]:
    if not isinstance(value, str) or not value.strip():
        return None
    value = value.strip()
    if not is_valid_image_url(value):
        logger.debug("dropping %s %r: not a relative path or allowed host", name, value)
        return None
    return value


def _validate_shipped(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    if not ISO_DATE_RE.match(value):
        logger.debug("dropping shipped %r: not ISO 8601", value)
        return None
    try:
        if "T" in value:
            datetime.fromisoformat(value.replace("Z", "+00:00"))
        else:
            date.fromisoformat(value)
    except ValueError:
        logger.debug("dropping shipped %r: not a calendar date", value)
        return None
    return value


def _validate_tags(tags: Any) -> List[str]:
    if not isinstance(tags, list):
        return []
    cleaned = [t.strip() for t in tags if isinstance(t, str)]
    kept = [t for t in cleaned if 0 < len(t) <= MAX_TAG_LEN]
    if len(kept) != len(tags) or len(kept) > MAX_TAGS:
        logger.debug("clamped tags from %d to %d", len(tags), min(len(kept), MAX_TAGS))
    return kept[:MAX_TAGS]


def _validate_author(author: Any, repo_owner: str) -> CardAuthor:
    if not author:
        return CardAuthor(name=repo_owner, github=repo_owner)

    if isinstance(author, str):
        return CardAuthor(name=author, github=repo_owner)

    if isinstance(author, dict):
        name = author.get("name")
        github = author.get("github")
        url = author.get("url")
        avatar = author.get("avatar")
        return CardAuthor(
            name=(name.strip() if isinstance(name, str) else "") or repo_owner,
            github=(github.strip() if isinstance(github, str) else "") or repo_owner,
            url=url if is_valid_https_url(url) else None,
            avatar=avatar if is_valid_https_url(avatar) else None,
        )

    return CardAuthor(name=repo_owner, github=repo_owner)


def _validate_links(links: Any) -> List[CardLink]:
    if not isinstance(links, list):
        return []

    validated: List[CardLink] = []
    has_primary = False

    for li in links[:MAX_LINKS]:
        if not isinstance(li, dict):
            continue
        label = li.get("label")
        url = li.get("url")
        label = label.strip() if isinstance(label, str) else ""
        url = url.strip() if isinstance(url, str) else ""

        if not label or not url or len(label) > MAX_LINK_LABEL_LEN:
            logger.debug("dropping link %r: missing or oversized label/url", label)
            continue
        if not is_valid_https_url(url):
            logger.debug("dropping link %r: url must be https", label)
            continue

        is_primary = li.get("primary") is True and not has_primary
        if is_primary:
            has_primary = True

        validated.append(CardLink(label=label, url=url, primary=is_primary))

    return validated


def _validate_repo(repo: Any) -> Optional[CardRepo]:
    if not isinstance(repo, dict):
        return None
    owner = repo.get("owner")
    name = repo.get("name")
    owner = owner.strip() if isinstance(owner, str) else ""
    name = name.strip() if isinstance(name, str) else ""
    if not (REPO_NAME_RE.match(owner) and REPO_NAME_RE.match(name)):
        logger.debug("dropping repo override %r/%r", owner, name)
        return None
    return CardRepo(owner=owner, name=name)


def _validate_collaborators(collaborators: Any) -> List[str]:
    if not isinstance(collaborators, list):
        return []
    kept = []
    for c in collaborators:
        if not isinstance(c, str):
            continue
        c = c.strip()
        if len(c) <= MAX_USERNAME_LEN and GITHUB_USERNAME_RE.match(c):
            kept.append(c)
        else:
            logger.debug("dropping collaborator %r", c)
    return kept[:MAX_COLLABORATORS]


def _validate_images(images: Any) -> List[CardImage]:
    if not isinstance(images, list):
        return []

    validated: List[CardImage] = []
    for img in images[:MAX_IMAGES]:
        if not isinstance(img, dict):
            continue
        url = _validate_image_field(img.get("url"), "image")
        if url is None:
            continue
        validated.append(
            CardImage(
                url=url,
                alt=clip_text(img.get("alt")),
                caption=clip_text(img.get("caption")),
            )
        )
    return validated


def _validate_theme(theme: Any) -> Optional[str]:
    if not isinstance(theme, str):
        return None
    theme = theme.strip().lower()
    return theme if theme in THEMES else None


# ---------- Parsing


def parse_card(content: str, repo_owner: str) -> ParsedCard:
    """Parse a raw card document fetched for a repository owned by `repo_owner`.

    Raises CardParseError with code INVALID_FORMAT when the frontmatter is
    missing, is not a YAML mapping or has an oversized title, and with
    MISSING_TITLE when the title is absent or blank.
    """
    split = split_frontmatter(content)
    if split is None:
        raise CardParseError(
            "Card must have YAML frontmatter between --- delimiters",
            "INVALID_FORMAT",
        )
    fm_text, body = split

    # The YAML composer recurses once per nesting level.
    try:
        raw = load_frontmatter_yaml(fm_text)
    except (yaml.YAMLError, RecursionError) as exc:
        raise CardParseError("Invalid YAML in frontmatter", "INVALID_FORMAT") from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise CardParseError("Frontmatter must be a mapping", "INVALID_FORMAT")

    title = raw.get("title")
    title = title.strip() if isinstance(title, str) else ""
    if not title:
        raise CardParseError("Card must have a title", "MISSING_TITLE")
    if len(title) > MAX_TITLE_LEN:
        raise CardParseError(
            f"Title must be {MAX_TITLE_LEN} characters or less", "INVALID_FORMAT"
        )

    frontmatter = CardFrontmatter(
        title=title,
        summary=clip_text(raw.get("summary"), MAX_SUMMARY_LEN),
        hero=_validate_image_field(raw.get("hero"), "hero"),
        icon=_validate_image_field(raw.get("icon"), "icon"),
        shipped=_validate_shipped(raw.get("shipped")),
        version=clip_text(raw.get("version"), MAX_VERSION_LEN),
        tags=_validate_tags(raw.get("tags")),
        author=_validate_author(raw.get("author"), repo_owner),
        links=_validate_links(raw.get("links")),
        repo=_validate_repo(raw.get("repo")),
        collaborators=_validate_collaborators(raw.get("collaborators")),
        images=_validate_images(raw.get("images")),
        theme=_validate_theme(raw.get("theme")),
    )

    return ParsedCard(frontmatter=frontmatter, body=body.strip())


# ---------- Display helpers

_MONTHS = (
    "January", "February", "March", "April", "May", "June", "July",
    "August", "September", "October", "November", "December",
)


def format_shipped_date(shipped: str) -> str:
    # Only the date part; a timestamp must not shift the day.
    d = date.fromisoformat(shipped.split("T")[0])
    return f"{_MONTHS[d.month - 1]} {d.day}, {d.year}"


def format_stars(count: int) -> str:
    if count >= 1000:
        return f"{count / 1000:.1f}k"
    return str(count)
