from __future__ import annotations

import argparse
import logging
from pathlib import Path

from .config import load_config
from .pipeline import resolve_discussion_stream
from .server import create_app


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="discussion-redirector",
        description="Resolve TV episodes to their Reddit discussion threads.",
    )
    parser.add_argument("--config", type=Path, default=None, help="Path to config.toml")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the Stremio add-on HTTP server")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)

    resolve = subparsers.add_parser("resolve", help="Resolve one episode id and print the URL")
    resolve.add_argument("identifier", help="Episode id such as tt0903747:1:3")
    resolve.add_argument("--type", dest="content_type", default="series")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = load_config(args.config)
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "serve":
        host = args.host or config.host
        port = args.port or config.port
        app = create_app(config)
        print(f"Add-on manifest available at http://{host}:{port}/manifest.json")
        app.run(host=host, port=port)
        return 0

    result = resolve_discussion_stream(args.content_type, args.identifier, config)
    streams = result["streams"]
    if not streams:
        print("No discussion thread found.")
        return 1
    print(streams[0]["externalUrl"])
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
