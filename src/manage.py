"""Review moderation database management CLI.

Creates and drops the relational schema for the moderation domain.
Only relational providers (SQLite, PostgreSQL) are touched; the default
in-memory provider needs no schema.

Usage:
    PROTEAN_ENV=production python src/manage.py setup-db   # Create all tables
    PROTEAN_ENV=production python src/manage.py drop-db    # Drop all tables
"""

import argparse
import sys


def setup_database():
    from moderation.domain import moderation
    from moderation.utils.db import setup_db

    print("Initializing moderation domain...")
    moderation.init()
    print("Creating moderation database schema...")
    setup_db(moderation)
    print("Done.")


def drop_database():
    from moderation.domain import moderation
    from moderation.utils.db import drop_db

    print("Initializing moderation domain...")
    moderation.init()
    print("Dropping moderation database schema...")
    drop_db(moderation)
    print("Done.")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Review moderation database management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    args = parser.parse_args(argv)

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
