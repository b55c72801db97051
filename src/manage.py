"""OrderDesk database management CLI.

Creates and drops the relational schemas the order desk uses: the
provider tables of the orderdesk domain and the fulfillment scoreboard.

Usage:
    python src/manage.py setup-db                   # Create all tables
    python src/manage.py drop-db                    # Drop all tables
    python src/manage.py setup-db --no-scoreboard   # Provider tables only
"""

import argparse
import sys


def setup_databases(include_scoreboard: bool = True) -> None:
    from orderdesk.domain import orderdesk
    from orderdesk.utils.db import setup_db

    print("Initializing orderdesk domain...")
    orderdesk.init()
    print("Creating orderdesk database schema...")
    setup_db(orderdesk, include_scoreboard=include_scoreboard)
    print("Done.")


def drop_databases(include_scoreboard: bool = True) -> None:
    from orderdesk.domain import orderdesk
    from orderdesk.utils.db import drop_db

    print("Initializing orderdesk domain...")
    orderdesk.init()
    print("Dropping orderdesk database schema...")
    drop_db(orderdesk, include_scoreboard=include_scoreboard)
    print("Done.")


def main(argv=None):
    parser = argparse.ArgumentParser(description="OrderDesk database management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (("setup-db", "Create all database tables"), ("drop-db", "Drop all database tables")):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument(
            "--no-scoreboard",
            action="store_true",
            help="Leave the fulfillment scoreboard table alone",
        )

    args = parser.parse_args(argv)

    if args.command == "setup-db":
        setup_databases(include_scoreboard=not args.no_scoreboard)
    elif args.command == "drop-db":
        drop_databases(include_scoreboard=not args.no_scoreboard)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
