"""CLI tool for Readability: extract articles from the command line.

Usage:
    python -m app.cli extract https://example.com/post
    python -m app.cli -o html extract https://example.com/post > post.html
    python -m app.cli file saved-page.html --url https://example.com/post
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path


def _setup_logging(verbose: bool = False):
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _print_article(article, output: str) -> None:
    from app.services.render import render_article

    if output == "html":
        print(render_article(article))
    else:
        print(json.dumps(article.to_json(), indent=2, ensure_ascii=False))


async def _cmd_extract(args) -> int:
    """Fetch a URL and extract its article."""
    from app.core.exceptions import ReadabilityError
    from app.services.pipeline import readability

    try:
        result = await readability(args.url)
    except ReadabilityError as e:
        print(f"[{e.code}] {e.message}", file=sys.stderr)
        return 1
    _print_article(result.article, args.output)
    return 0


def _cmd_file(args) -> int:
    """Extract the article from a saved HTML file."""
    from app.core.exceptions import ReadabilityError
    from app.services.pipeline import build_article

    html = Path(args.path).read_bytes()
    try:
        article = build_article(html, args.url)
    except ReadabilityError as e:
        print(f"[{e.code}] {e.message}", file=sys.stderr)
        return 1
    _print_article(article, args.output)
    return 0


def main():
    parser = argparse.ArgumentParser(
        prog="readability",
        description="Readability CLI: extract the readable article from a web page",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "-o", "--output", default="json",
        choices=["json", "html"],
        help="Output format (default: json)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # --- extract ---
    extract_parser = subparsers.add_parser("extract", help="Fetch and extract a URL")
    extract_parser.add_argument("url", help="URL of the article")

    # --- file ---
    file_parser = subparsers.add_parser("file", help="Extract from a saved HTML file")
    file_parser.add_argument("path", help="Path to the HTML file")
    file_parser.add_argument(
        "--url", required=True,
        help="URL the page was saved from (base for relative links and site fixes)",
    )

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    _setup_logging(args.verbose)

    if args.command == "extract":
        sys.exit(asyncio.run(_cmd_extract(args)))
    elif args.command == "file":
        sys.exit(_cmd_file(args))


if __name__ == "__main__":
    main()
