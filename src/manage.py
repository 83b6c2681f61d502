"""Marketplace database management CLI.

Creates and drops the tables of every aggregate and entity on the relational
providers configured for the current PROTEAN_ENV.

Usage:
    PROTEAN_ENV=production python src/manage.py setup-db   # Create all tables
    PROTEAN_ENV=production python src/manage.py drop-db    # Drop all tables
"""

import argparse
import sys

import structlog

logger = structlog.get_logger(__name__)


def setup_database():
    """Create the marketplace schema."""
    from marketplace.domain import marketplace
    from marketplace.utils.db import setup_db

    marketplace.init()
    logger.info("Creating marketplace database schema")
    setup_db(marketplace)
    logger.info("Marketplace schema ready")


def drop_database():
    """Drop the marketplace schema."""
    from marketplace.domain import marketplace
    from marketplace.utils.db import drop_db

    marketplace.init()
    logger.info("Dropping marketplace database schema")
    drop_db(marketplace)
    logger.info("Marketplace schema dropped")


def main(argv=None):
    from marketplace.utils.logging import configure_logging

    configure_logging()

    parser = argparse.ArgumentParser(description="Marketplace database management")
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
