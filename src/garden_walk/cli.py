"""
Command-line interface for the application.

This module provides the main entry point for the CLI.
"""

from __future__ import annotations

import argparse
import functools
import http.server
import logging
import sys

from garden_walk import __version__
from garden_walk.config import get_settings
from garden_walk.flows.build import build_all
from garden_walk.flows.fetch import fetch_all


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="garden-walk",
        description="Procedural SVG garden drawn from a daily-log export",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("info", help="Show application info")

    # 'refresh' command - fetch export and build site
    refresh_parser = subparsers.add_parser("refresh", help="Fetch export and build site")
    refresh_parser.add_argument(
        "--force",
        action="store_true",
        help="Fetch even if the cached export is still fresh",
    )

    # 'build' command - build site from cache only
    subparsers.add_parser("build", help="Build site from the cached export")

    # 'serve' command - serve built site locally
    serve_parser = subparsers.add_parser("serve", help="Serve site locally")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to serve on (default: api_port from settings)",
    )

    return parser


def cmd_info(_args: argparse.Namespace) -> int:
    """Handle the 'info' command."""
    settings = get_settings()
    print(f"Application: {settings.app_name}")
    print(f"Version: {__version__}")
    print(f"Environment: {settings.app_env}")
    print(f"Debug: {settings.debug}")
    print(f"Endpoint: {settings.endpoint or '(not set)'}")
    print(f"Bot: {settings.bot}  Limit: {settings.limit}")
    print(f"Route: {settings.route_mode}  Transport: {settings.transport}")
    print(f"Data dir: {settings.data_dir}")
    return 0


def cmd_refresh(args: argparse.Namespace) -> int:
    """Handle the 'refresh' command: fetch export then build site."""
    settings = get_settings()
    if not settings.cache_enabled:
        # Nothing is cached between fetch and build, so build from a live fetch.
        print(f"Cache disabled; building from a live fetch for bot {settings.bot}...")
        result = build_all(live=True)
        print("Done.")
        return 0 if result.get("ok") else 1

    print(f"Fetching export for bot {settings.bot}...")
    summary = fetch_all(force=args.force)

    print("Building site...")
    build_all()

    print("Done.")
    return 0 if summary.get("ok") else 1


def cmd_build(_args: argparse.Namespace) -> int:
    """Handle the 'build' command: render the cached export without fetching."""
    result = build_all()
    print(f"Site built: {result['output']}")
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Handle the 'serve' command: serve the built site locally."""
    settings = get_settings()
    port = args.port if args.port is not None else settings.api_port
    site_dir = settings.data_dir / "derived" / "site"

    if not site_dir.exists():
        print("No site directory found. Run 'garden-walk build' first.", file=sys.stderr)
        return 1

    handler = functools.partial(http.server.SimpleHTTPRequestHandler, directory=str(site_dir))

    with http.server.HTTPServer(("", port), handler) as server:
        print(f"Serving site on http://localhost:{port}/ (Ctrl+C to stop)")
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            print("\nServer stopped.")

    return 0


def main() -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args()

    settings = get_settings()
    debug = args.debug or settings.debug
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "info": cmd_info,
        "refresh": cmd_refresh,
        "build": cmd_build,
        "serve": cmd_serve,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
