"""Command-line access to schema resolution.

Prints what an authoring form would render, without a browser:

Usage:
    app-authoring types
    app-authoring fields --type game
    app-authoring fields --record 5f3c... --record-version 2
    app-authoring serve --port 8000
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import sys
from argparse import ArgumentParser

from dotenv import load_dotenv

from app_authoring.client import MarketplaceClient, Settings
from app_authoring.errors import LookupFailure, SchemaDepthError
from app_authoring.form import FormSettings, SchemaResolutionEngine


def configure_logging(fmt: str | None = None) -> None:
    """Root logging for the entry points; level from APP_AUTHORING_LOG_LEVEL (default WARNING)."""
    level = os.getenv("APP_AUTHORING_LOG_LEVEL", "WARNING").strip().upper()
    if fmt:
        logging.basicConfig(level=level, format=fmt)
    else:
        logging.basicConfig(level=level)


async def _list_types(client: MarketplaceClient) -> int:
    engine = SchemaResolutionEngine(client, FormSettings.from_env())
    for type_id in await engine.load_type_items():
        print(type_id)
    return 0


async def _print_fields(client: MarketplaceClient, type_id: str | None, record_id: str | None, version: int | None) -> int:
    engine = SchemaResolutionEngine(client, FormSettings.from_env())
    if record_id:
        try:
            record = await engine.load_record(record_id, version)
            if not record:
                print(f"App {record_id} version {version} not found", file=sys.stderr)
                return 1
            fields = await engine.resolve_for_record(record)
        except (LookupFailure, SchemaDepthError) as e:
            print(f"Can't resolve fields: {e}", file=sys.stderr)
            return 1
    else:
        fields = await engine.resolve_for_type(type_id or "")

    print(json.dumps([f.to_dict() for f in fields], indent=2, default=str))
    return 0


async def _run(args) -> int:
    client = MarketplaceClient(Settings.from_env())
    try:
        if args.command == "types":
            return await _list_types(client)
        return await _print_fields(client, args.type, args.record, args.record_version)
    finally:
        await client.close()


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    configure_logging("%(levelname)s: %(message)s")

    parser = ArgumentParser(
        prog="app-authoring",
        description="Resolve marketplace application-type schemas into form fields",
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    sub.add_parser("types", help="List enabled application type ids")

    fields_p = sub.add_parser("fields", help="Print the resolved field list as JSON")
    target = fields_p.add_mutually_exclusive_group(required=True)
    target.add_argument("--type", help="Application type id (new app)")
    target.add_argument("--record", help="App id (existing app version)")
    fields_p.add_argument("--record-version", type=int, default=None, metavar="N", help="App version number")

    serve_p = sub.add_parser("serve", help="Run the HTTP API")
    serve_p.add_argument("--host", default="0.0.0.0")
    serve_p.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)

    if args.command == "serve":
        from app_authoring.api import serve

        serve(host=args.host, port=args.port)
        return 0
    if args.command == "fields" and args.record and args.record_version is None:
        parser.error("--record requires --record-version")
    if args.command in ("types", "fields"):
        return asyncio.run(_run(args))

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
