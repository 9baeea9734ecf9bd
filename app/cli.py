"""CLI interface for the Hive stats bot.

Run the same lookups as the Telegram commands from a terminal.

Usage:
    python -m app.cli user alice
    python -m app.cli --output json user alice
    python -m app.cli ping
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import List, Optional

from app.cli_output import CLIOutput, OutputFormat
from app.config import load_settings
from app.handlers.commands import MISSING_ACCOUNT_TEXT, PONG_TEXT
from app.hive.nodes import NodeProvider
from app.report import build_user_report, normalize_account_name
from app.services.reputation import ReputationClient
from app.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Hive account stats without Telegram",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m app.cli user alice
  python -m app.cli --output json user alice
  python -m app.cli --verbose user @alice
        """,
    )
    parser.add_argument(
        "-o",
        "--output",
        choices=[f.value for f in OutputFormat],
        default="text",
        help="Output format (default: text)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show debug information",
    )

    sub = parser.add_subparsers(dest="command")
    user = sub.add_parser("user", help="Show stats for a Hive account")
    user.add_argument("account", help="Hive account name, with or without '@'")
    sub.add_parser("ping", help="Liveness check")
    return parser


async def run_user(
    provider: NodeProvider,
    reputation: ReputationClient,
    account: str,
    output: CLIOutput,
    window_days: int,
    sentinel: str,
) -> int:
    """Build and print one report; return the process exit code."""
    output.status(f"Looking up @{account} via {provider.current().url}")
    report = await build_user_report(
        provider, reputation, account, window_days=window_days, sentinel=sentinel
    )
    output.report(report)
    return 0 if report.found else 2


async def main(argv: Optional[List[str]] = None) -> int:
    """CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)
    output = CLIOutput(format=OutputFormat(args.output), verbose=args.verbose)

    if args.command is None:
        parser.print_help()
        return 1

    if args.command == "ping":
        output.text(PONG_TEXT)
        return 0

    account = normalize_account_name(args.account)
    if not account:
        output.error(MISSING_ACCOUNT_TEXT)
        return 1

    try:
        settings = load_settings()
    except RuntimeError as exc:
        output.error(f"Failed to load settings: {exc}")
        return 1

    # stdout is reserved for the report itself.
    configure_logging("DEBUG" if args.verbose else "WARNING", stream=sys.stderr)

    provider = NodeProvider(settings.hive_nodes, timeout=settings.hive_request_timeout)
    reputation = ReputationClient(
        str(settings.reputation_api_url) if settings.reputation_api_url else None,
        window_days=settings.history_window_days,
    )
    try:
        return await run_user(
            provider,
            reputation,
            account,
            output,
            window_days=settings.history_window_days,
            sentinel=settings.reward_app_account,
        )
    finally:
        await reputation.aclose()
        await provider.aclose()


def cli_main() -> None:
    """Synchronous wrapper for CLI entry."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli_main()
