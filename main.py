"""Command-line access to a few batched wiki queries.

Examples:
    python main.py categories "Dream Theater" "Rush (band)"
    python main.py exists "Dream Theater" "No such page 123"
    python main.py category-members "Category:Progressive metal musical groups" --cap 50

Configuration comes from WIKI_* environment variables (see `config.py`).
Results are printed as JSON on stdout.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Callable

import multi_query
from batch import BatchCoordinator
from config import load_wiki_config_from_env
from wiki import Wiki

BATCHED_COMMANDS: dict[str, Callable[[BatchCoordinator, list[str]], Any]] = {
    "categories": multi_query.categories_on_page,
    "category-size": multi_query.category_size,
    "exists": multi_query.exists,
    "page-text": multi_query.page_text,
    "redirects": multi_query.resolve_redirects,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Batched MediaWiki API queries")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log requests (DEBUG level)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name in BATCHED_COMMANDS:
        sub = subparsers.add_parser(name, help=f"Batched {name} lookup for one or more titles")
        sub.add_argument("titles", nargs="+", help="Page titles, exactly as you would type them on the wiki")

    members = subparsers.add_parser("category-members", help="List the titles in a category")
    members.add_argument("category", help='Category title, with or without the "Category:" prefix')
    members.add_argument("--cap", type=int, default=-1, help="Maximum number of titles (default: all)")
    members.add_argument(
        "--namespace",
        type=int,
        action="append",
        default=[],
        help="Only include titles in this namespace id (repeatable)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    config = load_wiki_config_from_env()
    with Wiki(config) as wiki:
        if args.command == "category-members":
            if args.cap == 0:
                parser.error("--cap must be positive, or -1 for all")
            result: Any = wiki.category_members(args.category, cap=args.cap, namespaces=args.namespace)
        else:
            result = BATCHED_COMMANDS[args.command](wiki.coordinator, args.titles)

    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
