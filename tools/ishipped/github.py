from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional
from urllib.parse import urlparse

from .config import DEFAULT_CARD_PATH, RAW_CONTENT_BASE

GitHubErrorCode = Literal[
    "INVALID_URL",
    "CARD_NOT_FOUND",
    "PRIVATE_REPO",
    "RATE_LIMITED",
    "FETCH_FAILED",
]


class GitHubURLError(ValueError):
    """Raised for unusable GitHub URLs; the other codes belong to fetchers."""

    def __init__(self, code: GitHubErrorCode):
        super().__init__(code)
        self.code = code


@dataclass(frozen=True)
class ParsedGitHubURL:
    owner: str
    repo: str
    ref: Optional[str] = None
    path: Optional[str] = None
    is_file_path: bool = False


def parse_github_url(url: str) -> ParsedGitHubURL:
    """
    Accepts https://github.com/<owner>/<repo>, optionally followed by
    /tree/<ref> or /blob/<ref>/<path>.md.
    """
    try:
        parsed = urlparse(url.strip())
        host = parsed.hostname
    except ValueError as exc:
        raise GitHubURLError("INVALID_URL") from exc

    if parsed.scheme != "https" or host != "github.com":
        raise GitHubURLError("INVALID_URL")

    segments = [s for s in parsed.path.split("/") if s]
    if len(segments) < 2:
        raise GitHubURLError("INVALID_URL")
    owner = segments[0]
    repo = segments[1]
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    if not repo:
        raise GitHubURLError("INVALID_URL")

    ref = None
    path = None
    is_file_path = False

    if len(segments) > 2 and segments[2] in ("blob", "tree"):
        ref = segments[3] if len(segments) > 3 else None
        if segments[2] == "blob" and len(segments) > 4:
            path = "/".join(segments[4:])
            is_file_path = path.endswith(".md")
            # Only markdown documents can be cards.
            if not is_file_path:
                raise GitHubURLError("INVALID_URL")

    return ParsedGitHubURL(
        owner=owner, repo=repo, ref=ref, path=path, is_file_path=is_file_path
    )


def card_path_for(parsed: ParsedGitHubURL) -> str:
    if parsed.is_file_path and parsed.path:
        return parsed.path
    return DEFAULT_CARD_PATH


def construct_fetch_url(parsed: ParsedGitHubURL, ref: str) -> str:
    return f"{RAW_CONTENT_BASE}/{parsed.owner}/{parsed.repo}/{ref}/{card_path_for(parsed)}"
