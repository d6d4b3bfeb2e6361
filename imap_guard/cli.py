"""
Command Line Interface for IMAP Guard.

Lists mailboxes or runs a Python rules file against a logged-in guard.
"""

import argparse
import runpy
import sys
from typing import List, Optional

from . import __version__
from .config import ConfigManager
from .exceptions import ConfigurationError
from .guard import Guard
from .query import Query


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the imap-guard command."""
    parser = argparse.ArgumentParser(
        prog="imap-guard",
        description="Move or delete IMAP messages according to search rules.",
    )
    parser.add_argument("--config", default="config.json", help="Configuration file (default: config.json)")
    parser.add_argument("--local-config", default="config.local.json",
                        help="Local overrides file (default: config.local.json)")
    parser.add_argument("--dry-run", action="store_true", default=None,
                        help="Search and report only; never modify the mailbox")
    parser.add_argument("--verbose", action="store_true", default=None, help="Print informational messages")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("list", help="List all mailboxes")
    run = commands.add_parser("run", help="Run a rules file")
    run.add_argument("rules", help="Python file using the pre-bound `guard` and `Query`")
    return parser


def run_rules(guard: Guard, rules_file: str) -> None:
    """Execute a rules file with ``guard`` and ``Query`` in its globals."""
    runpy.run_path(rules_file, init_globals={"guard": guard, "Query": Query}, run_name="__rules__")


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point for IMAP Guard."""
    args = build_parser().parse_args(argv)

    try:
        print(f"IMAP Guard v{__version__}")
        print("=" * 40)

        config_manager = ConfigManager(args.config, args.local_config)
        settings = config_manager.get_settings(read_only=args.dry_run, verbose=args.verbose)

        with Guard(settings) as guard:
            if args.command == "list":
                for name in guard.list():
                    print(name)
            else:
                run_rules(guard, args.rules)

        if settings.read_only:
            print("[note] DRY-RUN enabled, no changes were made. Set read_only=false in config.json to execute.")
        print("[done] Disconnected")
        return 0

    except ConfigurationError as e:
        print(f"[!] Configuration error: {e}")
        return 1
    except KeyboardInterrupt:
        print("\n[!] Interrupted by user")
        return 1


if __name__ == "__main__":
    sys.exit(main())
