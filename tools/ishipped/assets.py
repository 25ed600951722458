from __future__ import annotations

import dataclasses
from typing import List, Optional, Sequence

from .card import CardFrontmatter, CardImage
from .config import ABSOLUTE_ASSET_RE, DEFAULT_CARD_PATH, RAW_CONTENT_BASE


def is_relative_asset(url: Optional[str]) -> bool:
    if not url:
        return False
    return not ABSOLUTE_ASSET_RE.match(url)


def card_dir(card_path: str) -> str:
    head, sep, _ = card_path.rpartition("/")
    return head if sep else ""


def resolve_asset_url(
    url: Optional[str],
    owner: str,
    repo: str,
    ref: str,
    card_path: str = DEFAULT_CARD_PATH,
) -> Optional[str]:
    """
    Returns an absolute URL for a card image field.

    Absolute URLs come back untouched. Relative paths are anchored at the
    directory holding the card document and served from raw content, e.g.
    `./hero.png` in `docs/card.md` becomes
    `https://raw.githubusercontent.com/<owner>/<repo>/<ref>/docs/hero.png`.
    """
    if not url:
        return None
    if not is_relative_asset(url):
        return url

    rel = url[2:] if url.startswith("./") else url
    base = card_dir(card_path)
    path = f"{base}/{rel}" if base else rel
    return f"{RAW_CONTENT_BASE}/{owner}/{repo}/{ref}/{path}"


def resolve_hero_url(
    hero: Optional[str],
    owner: str,
    repo: str,
    ref: str,
    card_path: str = DEFAULT_CARD_PATH,
) -> Optional[str]:
    return resolve_asset_url(hero, owner, repo, ref, card_path)


def resolve_icon_url(
    icon: Optional[str],
    owner: str,
    repo: str,
    ref: str,
    card_path: str = DEFAULT_CARD_PATH,
) -> Optional[str]:
    return resolve_asset_url(icon, owner, repo, ref, card_path)


def resolve_image_urls(
    images: Optional[Sequence[CardImage]],
    owner: str,
    repo: str,
    ref: str,
    card_path: str = DEFAULT_CARD_PATH,
) -> List[CardImage]:
    resolved: List[CardImage] = []
    for img in images or []:
        url = resolve_asset_url(img.url, owner, repo, ref, card_path)
        if url is None:
            continue
        resolved.append(dataclasses.replace(img, url=url))
    return resolved


def resolve_card_urls(
    fm: CardFrontmatter,
    owner: str,
    repo: str,
    ref: str,
    card_path: str = DEFAULT_CARD_PATH,
) -> CardFrontmatter:
    """Copy of `fm` with hero, icon and gallery images made absolute."""
    return dataclasses.replace(
        fm,
        hero=resolve_hero_url(fm.hero, owner, repo, ref, card_path),
        icon=resolve_icon_url(fm.icon, owner, repo, ref, card_path),
        images=resolve_image_urls(fm.images, owner, repo, ref, card_path),
    )
