#!/usr/bin/env python3
"""
Render a card document from disk.

- Parses and validates the frontmatter (author defaults to --owner)
- Resolves relative hero/icon/gallery images against the card's location
  in its repository (--repo/--ref/--card-path, or --github-url)
- Renders the Markdown body to sanitized HTML
- Writes JSON {frontmatter, body, html}, or only the HTML with --html-only
"""

from __future__ import annotations

import argparse
import json
import logging
import pathlib
import sys
from typing import Any, Dict, List, Optional

from .assets import resolve_card_urls
from .card import CardParseError, parse_card
from .config import DEFAULT_CARD_PATH
from .github import GitHubURLError, card_path_for, parse_github_url
from .markdown_processing import render_markdown


def process_card(
    text: str,
    owner: str,
    repo: Optional[str] = None,
    ref: str = "main",
    card_path: str = DEFAULT_CARD_PATH,
) -> Dict[str, Any]:
    card = parse_card(text, owner)
    fm = card.frontmatter
    if repo:
        fm = resolve_card_urls(fm, owner, repo, ref, card_path)
    return {
        "frontmatter": fm.to_dict(),
        "body": card.body,
        "html": render_markdown(card.body),
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ishipped-render", description="Render an iShipped card document."
    )
    parser.add_argument("card", type=pathlib.Path, help="path to card.md")
    parser.add_argument("--owner", help="repository owner (default author)")
    parser.add_argument("--repo", help="repository name for resolving images")
    parser.add_argument("--ref", help="branch or tag (default: main)")
    parser.add_argument(
        "--card-path", help=f"card location in the repo (default: {DEFAULT_CARD_PATH})"
    )
    parser.add_argument(
        "--github-url",
        help="GitHub URL of the card; fills owner/repo/ref/card-path",
    )
    parser.add_argument("--out", type=pathlib.Path, help="write here, not stdout")
    parser.add_argument("--html-only", action="store_true")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    owner, repo, ref, card_path = args.owner, args.repo, args.ref, args.card_path
    if args.github_url:
        try:
            parsed = parse_github_url(args.github_url)
        except GitHubURLError as exc:
            print(f"ERROR: {exc.code}: {args.github_url}", file=sys.stderr)
            return 1
        owner = owner or parsed.owner
        repo = repo or parsed.repo
        ref = ref or parsed.ref
        card_path = card_path or card_path_for(parsed)
    ref = ref or "main"
    card_path = card_path or DEFAULT_CARD_PATH

    if not owner:
        print("ERROR: --owner or --github-url is required", file=sys.stderr)
        return 1

    if not args.card.exists():
        print(f"ERROR: {args.card} does not exist", file=sys.stderr)
        return 1

    text = args.card.read_text(encoding="utf-8")
    try:
        result = process_card(text, owner, repo, ref, card_path)
    except CardParseError as exc:
        print(f"ERROR: {exc.code}: {exc}", file=sys.stderr)
        return 1

    output = (
        result["html"]
        if args.html_only
        else json.dumps(result, indent=2, ensure_ascii=False)
    )
    if args.out:
        args.out.parent.mkdir(parents=True, exist_ok=True)
        args.out.write_text(output + "\n", encoding="utf-8")
    else:
        sys.stdout.write(output + "\n")

    print(f"✓ rendered card {result['frontmatter']['title']!r}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
