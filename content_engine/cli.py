# content_engine/cli.py
"""Command-line interface: index maintenance, snapshots and the API server."""

import argparse
import json
import logging
import os
import sys
from typing import List, Optional

import anyio
import uvicorn

from .config import Config, load_config
from .exceptions import ContentEngineError
from .index.content_index import ContentIndexManager
from .metadata.exif import PillowExifExtractor
from .storage import build_snapshot, create_storage_adapter

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="content-engine",
        description="Zero-configuration content engine for galleries, posts and pages",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to settings YAML (default: configs/settings.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("rebuild", help="Rescan all content and rewrite the index")
    subparsers.add_parser("invalidate", help="Delete the persisted index")
    subparsers.add_parser("show", help="Print index statistics")

    snapshot = subparsers.add_parser(
        "snapshot", help="Write a read-only snapshot of a local content folder"
    )
    snapshot.add_argument("source", help="Local content folder")
    snapshot.add_argument("output", help="Snapshot JSON file to write")

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", type=str, default=None, help="Host (default: from config)")
    serve.add_argument("--port", type=int, default=None, help="Port (default: from config)")
    serve.add_argument(
        "--reload", action="store_true", help="Enable auto-reload for development"
    )

    return parser


async def _with_manager(config: Config, command: str) -> None:
    storage = await create_storage_adapter(config.storage)
    try:
        manager = ContentIndexManager(storage, config, extractor=PillowExifExtractor())

        if command == "rebuild":
            index = await manager.rebuild()
            _print_stats(index.stats.to_json_dict())
        elif command == "invalidate":
            await manager.invalidate()
            print("Content index invalidated")
        elif command == "show":
            age = await manager.get_index_age()
            index = await manager.get()
            if age is None:
                print("No cached index found; rebuilt from storage")
            else:
                print(f"Index age: {int(age.total_seconds())}s")
            print(f"Updated at: {index.updated_at.isoformat()}")
            _print_stats(index.stats.to_json_dict())
    finally:
        await storage.close()


async def _write_snapshot(source: str, output: str) -> None:
    snapshot = await build_snapshot(source)
    text = json.dumps(snapshot.to_json_dict(), indent=2, ensure_ascii=False)
    await anyio.Path(output).write_text(text)
    print(f"Wrote {len(snapshot.files)} files to {output}")


def _print_stats(stats: dict) -> None:
    for key, value in stats.items():
        print(f"  {key}: {value}")


def _serve(config: Config, args: argparse.Namespace) -> None:
    host = args.host or config.api.host
    port = args.port or config.api.port

    if args.config:
        # The app factory loads its own config in the server process
        os.environ["CONTENT_CONFIG"] = args.config

    print(f"Starting Content Engine API on http://{host}:{port}")
    print(f"  - Swagger UI: http://{host}:{port}/docs")
    print(f"  - Health: http://{host}:{port}/health")

    uvicorn.run(
        "content_engine.api.main:create_app",
        factory=True,
        host=host,
        port=port,
        reload=args.reload,
        log_level="debug" if args.verbose else "info",
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "snapshot":
            anyio.run(_write_snapshot, args.source, args.output)
            return 0

        config = anyio.run(load_config, args.config)
        if args.command == "serve":
            _serve(config, args)
        else:
            anyio.run(_with_manager, config, args.command)
    except (ContentEngineError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
