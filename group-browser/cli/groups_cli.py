#!/usr/bin/env python3
"""Group Browser CLI

Command-line tool for inspecting vector groups in a Group Browser database.
Every command prints JSON to stdout.

Usage:
    python cli/groups_cli.py list <tenant> [--page N] [--page-size N] [--sort KEY] [filters]
    python cli/groups_cli.py stats <tenant>
    python cli/groups_cli.py metadata <tenant> <cluster_id>
    python cli/groups_cli.py members <tenant> <cluster_id> [--cursor ID] [--limit N]
    python cli/groups_cli.py page-names <tenant>

Examples:
    python cli/groups_cli.py list acme --media-type VIDEO --min-duplicates 5
    python cli/groups_cli.py list acme --sort newest --page 2
    python cli/groups_cli.py members acme 42 --limit 20
"""

import argparse
import asyncio
import json
import sys
from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from enum import Enum
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from config import ConfigError, ConfigManager
from services import GroupFilters, GroupQueryService
from services.errors import GroupQueryError
from storage import GroupStore


def _json_default(value):
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Not JSON serializable: {type(value).__name__}")


def _print_json(result) -> None:
    if is_dataclass(result):
        result = asdict(result)
    elif isinstance(result, (list, tuple)):
        result = [asdict(r) if is_dataclass(r) else r for r in result]
    print(json.dumps(result, indent=2, default=_json_default))


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected YYYY-MM-DD, got '{value}'")


async def cmd_list(service: GroupQueryService, args):
    """List one page of groups."""
    filters = GroupFilters.build(
        page_name=args.page_name,
        start_date=args.start_date,
        end_date=args.end_date,
        media_type=args.media_type,
        description=args.description,
        min_duplicates=args.min_duplicates,
        max_duplicates=args.max_duplicates,
    )
    return await service.list_groups(
        args.tenant, filters, page=args.page, page_size=args.page_size, sort=args.sort
    )


async def cmd_stats(service: GroupQueryService, args):
    """Show duplicates count bounds."""
    return await service.get_stats(args.tenant)


async def cmd_metadata(service: GroupQueryService, args):
    """Show live aggregate for one group."""
    return await service.get_group_metadata(args.cluster_id, args.tenant)


async def cmd_members(service: GroupQueryService, args):
    """List a group's creatives."""
    return await service.list_group_members(
        args.cluster_id,
        args.tenant,
        cursor=args.cursor,
        limit=args.limit,
        exclude_id=args.exclude,
    )


async def cmd_page_names(service: GroupQueryService, args):
    """List page names with group counts."""
    return await service.list_page_names(args.tenant)


async def _run(args) -> int:
    try:
        config = ConfigManager(Path(args.config_dir) if args.config_dir else None).get_config()
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    store = GroupStore(args.db or config.database.path)
    service = GroupQueryService.from_config(config, store=store)
    try:
        await store.initialize()
        result = await args.func(service, args)
    except GroupQueryError as e:
        print(f"{type(e).__name__}: {e}", file=sys.stderr)
        return 1

    _print_json(result)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Group Browser - inspect vector groups",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s list acme --media-type VIDEO     Video groups, largest first
  %(prog)s stats acme                       Duplicates count bounds
  %(prog)s metadata acme 42                 Live aggregate for group 42
  %(prog)s members acme 42 --limit 20       First 20 creatives of group 42
  %(prog)s page-names acme                  Page name filter options
        """
    )
    parser.add_argument("--db", help="SQLite database path (default: from config)")
    parser.add_argument("--config-dir", help="Configuration directory (default: ~/.groupbrowser)")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # List command
    list_parser = subparsers.add_parser("list", help="List groups")
    list_parser.add_argument("tenant", help="Tenant ID")
    list_parser.add_argument("--page", type=int, default=1, help="Page number (default: 1)")
    list_parser.add_argument("--page-size", type=int, default=None, help="Groups per page")
    list_parser.add_argument("--sort", choices=["duplicates_desc", "newest", "oldest"], default=None)
    list_parser.add_argument("--page-name", help="Only groups with a creative from this page")
    list_parser.add_argument("--start-date", type=_parse_date, help="Displayed from (YYYY-MM-DD)")
    list_parser.add_argument("--end-date", type=_parse_date, help="Displayed until (YYYY-MM-DD)")
    list_parser.add_argument("--media-type", help="IMAGE, VIDEO or ALL")
    list_parser.add_argument("--description", help="Text in the group description")
    list_parser.add_argument("--min-duplicates", type=int, help="Minimum duplicates count")
    list_parser.add_argument("--max-duplicates", type=int, help="Maximum duplicates count")
    list_parser.set_defaults(func=cmd_list)

    # Stats command
    stats_parser = subparsers.add_parser("stats", help="Duplicates count bounds")
    stats_parser.add_argument("tenant", help="Tenant ID")
    stats_parser.set_defaults(func=cmd_stats)

    # Metadata command
    metadata_parser = subparsers.add_parser("metadata", help="Live aggregate for one group")
    metadata_parser.add_argument("tenant", help="Tenant ID")
    metadata_parser.add_argument("cluster_id", type=int, help="Cluster ID")
    metadata_parser.set_defaults(func=cmd_metadata)

    # Members command
    members_parser = subparsers.add_parser("members", help="List a group's creatives")
    members_parser.add_argument("tenant", help="Tenant ID")
    members_parser.add_argument("cluster_id", type=int, help="Cluster ID")
    members_parser.add_argument("--cursor", help="Continue after this external ID")
    members_parser.add_argument("--limit", type=int, default=None, help="Creatives per page (default: 60)")
    members_parser.add_argument("--exclude", help="External ID to leave out")
    members_parser.set_defaults(func=cmd_members)

    # Page names command
    names_parser = subparsers.add_parser("page-names", help="Page names with group counts")
    names_parser.add_argument("tenant", help="Tenant ID")
    names_parser.set_defaults(func=cmd_page_names)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    return asyncio.run(_run(args))


if __name__ == "__main__":
    sys.exit(main())
