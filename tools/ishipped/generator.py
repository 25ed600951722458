from __future__ import annotations

from typing import Any, Dict

from .card import CardFrontmatter
from .utils import yaml_frontmatter_block


def _author_block(fm: CardFrontmatter) -> Dict[str, str]:
    author = fm.author
    out = {"name": author.name}
    for key in ("github", "url", "avatar"):
        value = getattr(author, key)
        if value:
            out[key] = value
    return out


def card_frontmatter_dict(fm: CardFrontmatter) -> Dict[str, Any]:
    """Frontmatter mapping with only the fields that carry a value."""
    data: Dict[str, Any] = {"title": fm.title}

    for key in ("summary", "hero", "icon", "shipped", "version"):
        value = getattr(fm, key)
        if value:
            data[key] = value

    if fm.tags:
        data["tags"] = list(fm.tags)

    data["author"] = _author_block(fm)

    if fm.links:
        links = []
        for li in fm.links:
            entry: Dict[str, Any] = {"label": li.label, "url": li.url}
            if li.primary:
                entry["primary"] = True
            links.append(entry)
        data["links"] = links

    if fm.repo:
        data["repo"] = {"owner": fm.repo.owner, "name": fm.repo.name}

    if fm.collaborators:
        data["collaborators"] = list(fm.collaborators)

    if fm.images:
        images = []
        for img in fm.images:
            entry = {"url": img.url}
            if img.alt:
                entry["alt"] = img.alt
            if img.caption:
                entry["caption"] = img.caption
            images.append(entry)
        data["images"] = images

    if fm.theme:
        data["theme"] = fm.theme

    return data


def generate_card_markdown(fm: CardFrontmatter, body: str = "") -> str:
    text = yaml_frontmatter_block(card_frontmatter_dict(fm))
    body = body.strip()
    if body:
        text += body + "\n"
    return text
