"""
Command line interface.

Commands::

    tweet-importer fetch-media VALUE [--by status|user]
    tweet-importer create-post USERNAME [--post-title T] [--post-status S] [--post-author N]
    tweet-importer search {username,keywords,tweet} QUERY
    tweet-importer import-file PATH

Every command exits with status 1 and prints ``Error: <message>`` when the
operation fails.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .import_tool import MediaImportTool
from .settings import CONFIG_FILE, load_settings
from .utils.errors import ImporterError


def cmd_fetch_media(tool: MediaImportTool, args: argparse.Namespace) -> int:
    print(f"Fetching media for '{args.value}' by '{args.by}'...")
    if args.by == "user":
        media = tool.get_media_by_user(args.value)
    else:
        media = tool.get_media_by_status(args.value)
    print("Success: Media found!")
    print(f"Type: {media.type}")
    print(f"URL: {media.src}")
    if media.poster:
        print(f"Poster: {media.poster}")
    return 0


def cmd_create_post(tool: MediaImportTool, args: argparse.Namespace) -> int:
    print(f"Fetching latest media for user: {args.username}...")
    post_id = tool.create_post_from_user(
        args.username,
        post_title=args.post_title,
        post_status=args.post_status,
        post_author=args.post_author,
    )
    print(f"Success: Successfully created post #{post_id}.")
    return 0


def cmd_search(tool: MediaImportTool, args: argparse.Namespace) -> int:
    results = tool.search_videos(args.type, args.query)
    if not results:
        print("No videos found.")
        return 0
    for r in results:
        state = f"imported: {r.post_url}" if r.is_imported else "new"
        print(f"{r.id}\t{r.user_name}\t{r.views}\t{state}")
    return 0


def cmd_import_file(tool: MediaImportTool, args: argparse.Namespace) -> int:
    with open(args.path, "r", encoding="utf-8") as f:
        summary = tool.import_from_lines(f.read())
    for entry in summary["results"]:
        if not entry["success"]:
            print(f"Failed: {entry['line']} ({entry['message']})")
    print(f"Import complete: {summary['success']} succeeded, {summary['failed']} failed.")
    return 0 if summary["failed"] == 0 else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tweet-importer",
        description="Fetch media from the media API and import it as posts.",
    )
    parser.add_argument("--config", default=CONFIG_FILE, help="Path to the JSON settings file.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("fetch-media", help="Show the media of a status or a user's latest post.")
    p.add_argument("value", help="Status URL/ID or username.")
    p.add_argument("--by", choices=["status", "user"], default="status")
    p.set_defaults(func=cmd_fetch_media)

    p = sub.add_parser("create-post", help="Create a post from a user's latest media.")
    p.add_argument("username")
    p.add_argument("--post-title", default=None)
    p.add_argument("--post-status", default="draft")
    p.add_argument("--post-author", type=int, default=1)
    p.set_defaults(func=cmd_create_post)

    p = sub.add_parser("search", help="Search videos and show their import state.")
    p.add_argument("type", choices=["username", "keywords", "tweet"])
    p.add_argument("query")
    p.set_defaults(func=cmd_search)

    p = sub.add_parser("import-file", help="Bulk import 'url|title' lines from a file.")
    p.add_argument("path")
    p.set_defaults(func=cmd_import_file)

    return parser


def main(argv: Optional[List[str]] = None, tool: Optional[MediaImportTool] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )
    try:
        if tool is None:
            tool = MediaImportTool(load_settings(args.config))
        return args.func(tool, args)
    except ImporterError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
