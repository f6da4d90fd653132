"""
Command line entry point

Usage:
    # Show who searches what (no browser)
    social-search plan --credentials credentials.json --records records.json

    # Log every account in once and store its session
    social-search login --credentials credentials.json

    # Log in, partition and open every assigned search
    social-search run --credentials credentials.json --records records.json --group-by company
"""
import argparse
import asyncio
import json
import sys
from typing import Dict, List, Optional, Sequence

from .browser import BrowserEngine
from .config import SearchConfig
from .credentials import check_unique_keys, load_credentials, load_investigation_records
from .models import Credential, SearchGrouping
from .pacing import Pacer
from .partition import partition_search_strings
from .runner import run_assigned_searches
from .search_logging import configure_logging
from .search_strings import generate_by_grouping
from .session import get_session_results_by_credential_key, get_sessions_by_credential_key
from .storage import SessionStateStore


def build_plan(
    credentials: Sequence[Credential],
    records_path: str,
    grouping: SearchGrouping,
) -> Dict[str, object]:
    """Search strings plus the per-credential assignment."""
    records = load_investigation_records(records_path)
    search_strings = generate_by_grouping(records, grouping)
    return {
        "search_strings": search_strings,
        "assignment": partition_search_strings(credentials, search_strings),
    }


def cmd_plan(args: argparse.Namespace, config: SearchConfig) -> int:
    credentials = load_credentials(args.credentials or config.credentials_file)
    check_unique_keys(credentials, strict=args.strict)
    plan = build_plan(credentials, args.records, SearchGrouping(args.group_by))
    print(json.dumps(plan, indent=2))
    return 0


async def _login(credentials: List[Credential], config: SearchConfig) -> int:
    engine = BrowserEngine(config)
    store = SessionStateStore(config.storage_dir)
    results = await get_session_results_by_credential_key(engine, credentials, store)

    for key, result in results.items():
        if result.ok:
            print(f"✅ {key}")
            await asyncio.to_thread(engine.close, result.session)
        else:
            print(f"❌ {key}: {result.error}")

    return 0 if all(result.ok for result in results.values()) else 1


def cmd_login(args: argparse.Namespace, config: SearchConfig) -> int:
    credentials = load_credentials(args.credentials or config.credentials_file)
    check_unique_keys(credentials, strict=args.strict)
    return asyncio.run(_login(credentials, config))


async def _run(credentials: List[Credential], args: argparse.Namespace, config: SearchConfig) -> int:
    plan = build_plan(credentials, args.records, SearchGrouping(args.group_by))

    engine = BrowserEngine(config)
    store = SessionStateStore(config.storage_dir)
    sessions = await get_sessions_by_credential_key(engine, credentials, store)
    try:
        visited = await run_assigned_searches(
            engine, sessions, plan["assignment"], plan["search_strings"],
            Pacer(config.max_random_delay),
        )
    finally:
        for session in sessions.values():
            await asyncio.to_thread(engine.close, session)

    for key, urls in visited.items():
        print(f"{key}: {len(urls)} searches")
    return 0


def cmd_run(args: argparse.Namespace, config: SearchConfig) -> int:
    credentials = load_credentials(args.credentials or config.credentials_file)
    check_unique_keys(credentials, strict=args.strict)
    return asyncio.run(_run(credentials, args, config))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="social-search",
        description="Spread investigation searches across logged-in social media accounts",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_common(sub: argparse.ArgumentParser, records: bool) -> None:
        sub.add_argument("--credentials", help="Credentials JSON file (default: $CREDENTIALS_FILE)")
        sub.add_argument("--strict", action="store_true",
                         help="Fail when two credentials share a platform and username")
        if records:
            sub.add_argument("--records", required=True, help="Investigation records JSON file")
            sub.add_argument(
                "--group-by",
                choices=[grouping.value for grouping in SearchGrouping],
                default=SearchGrouping.BY_INCIDENT.value,
                help="incident: one search per keyword combination; "
                     "company: one per company/product, keywords combined per session",
            )

    plan = subparsers.add_parser("plan", help="Print search strings and their assignment")
    add_common(plan, records=True)
    plan.set_defaults(func=cmd_plan)

    login = subparsers.add_parser("login", help="Log in every account and store sessions")
    add_common(login, records=False)
    login.set_defaults(func=cmd_login)

    run = subparsers.add_parser("run", help="Log in and open every assigned search")
    add_common(run, records=True)
    run.set_defaults(func=cmd_run)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    configure_logging()
    args = build_parser().parse_args(argv)
    config = SearchConfig()
    try:
        return args.func(args, config)
    except (OSError, ValueError) as e:
        print(f"❌ {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
