from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import yaml

from .config import FRONTMATTER_DELIMITER


class CardYamlLoader(yaml.SafeLoader):
    """SafeLoader that leaves timestamps as plain strings."""


CardYamlLoader.yaml_implicit_resolvers = {
    first: [
        (tag, regexp)
        for tag, regexp in resolvers
        if tag != "tag:yaml.org,2002:timestamp"
    ]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def _is_delimiter(line: str) -> bool:
    if line.endswith("\r"):
        line = line[:-1]
    return line == FRONTMATTER_DELIMITER


def split_frontmatter(text: str) -> Optional[Tuple[str, str]]:
    """Return (yaml_text, body) or None when the text has no frontmatter."""
    lines = text.split("\n")
    if not _is_delimiter(lines[0]):
        return None
    for i in range(1, len(lines)):
        if _is_delimiter(lines[i]):
            return "\n".join(lines[1:i]), "\n".join(lines[i + 1 :])
    return None


def load_frontmatter_yaml(fm_text: str) -> Any:
    return yaml.load(fm_text, Loader=CardYamlLoader)


def clip_text(value: Any, limit: Optional[int] = None) -> Optional[str]:
    if not isinstance(value, str):
        return None
    return value.strip()[:limit] or None


def yaml_frontmatter_block(data: Dict[str, Any]) -> str:
    dumped = yaml.safe_dump(
        data, sort_keys=False, allow_unicode=True, width=10_000
    ).rstrip()
    return f"---\n{dumped}\n---\n\n"
