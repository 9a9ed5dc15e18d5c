"""Main CLI entry point."""

import argparse
import json
import logging
import sys
from pathlib import Path


def main(argv: list[str] | None = None) -> None:
    """Parse args and dispatch to subcommands."""
    parser = argparse.ArgumentParser(
        prog="cin7-hubspot-sync",
        description="Sync Cin7 sales orders into HubSpot orders",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # sync
    sync_parser = subparsers.add_parser("sync", help="Run one Cin7 -> HubSpot sync")
    sync_parser.add_argument(
        "--since",
        type=str,
        default=None,
        help="Override the lookback window with an ISO UTC cutoff (e.g. 2026-01-21T00:00:00Z)",
    )
    sync_parser.add_argument(
        "--mode",
        choices=["batch", "search"],
        default=None,
        help="Upsert mode (default: HUBSPOT_UPSERT_MODE or batch)",
    )
    sync_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write the JSON summary to file (default: stdout)",
    )

    # serve
    serve_parser = subparsers.add_parser("serve", help="Serve the webhook and sync endpoints")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Bind port")

    # properties
    subparsers.add_parser("properties", help="List HubSpot order property names")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "sync":
        _run_sync(args)
    elif args.command == "serve":
        _run_serve(args)
    elif args.command == "properties":
        _run_properties(args)
    else:
        parser.print_help()


def _run_sync(args: argparse.Namespace) -> None:
    """Run sync command. Exits 1 on fatal error."""
    from cin7_hubspot_sync.config import parse_since
    from cin7_hubspot_sync.errors import ConfigError
    from cin7_hubspot_sync.sync import run_from_env

    overrides = {}
    if args.since:
        try:
            overrides["force_since"] = parse_since(args.since)
        except ConfigError:
            raise SystemExit("Invalid --since format. Use ISO UTC, e.g. 2026-01-21T00:00:00Z.")
    if args.mode:
        overrides["upsert_mode"] = args.mode

    ok, payload = run_from_env(**overrides)
    output = json.dumps(payload, indent=2)

    if args.output:
        args.output.write_text(output, encoding="utf-8")
        print(f"Wrote sync summary to {args.output}")
    else:
        print(output)

    if not ok:
        raise SystemExit(1)


def _run_serve(args: argparse.Namespace) -> None:
    """Run serve command."""
    import uvicorn

    uvicorn.run("cin7_hubspot_sync.api.app:app", host=args.host, port=args.port)


def _run_properties(args: argparse.Namespace) -> None:
    """Print HubSpot order property names, one per line."""
    import httpx

    from cin7_hubspot_sync.config import SyncConfig
    from cin7_hubspot_sync.connectors import HubSpotClient
    from cin7_hubspot_sync.errors import SyncError

    try:
        hubspot = HubSpotClient.from_config(SyncConfig.from_env())
        try:
            names = hubspot.get_property_names()
        finally:
            hubspot.close()
    except (SyncError, httpx.HTTPError) as e:
        print(str(e), file=sys.stderr)
        raise SystemExit(1)
    for name in sorted(names):
        print(name)


if __name__ == "__main__":
    main()
