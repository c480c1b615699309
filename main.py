#!/usr/bin/env python3
"""
Command-line entry point for the FAQ chatbot backend.

Usage examples:
    # Create the database schema
    python main.py bootstrap
    python main.py bootstrap --status

    # Run a chatbot search against the database
    python main.py search acme.edu "admission requirements"
    python main.py search acme.edu "dining" --category campus_life

    # List categories with active FAQs for a school
    python main.py categories acme.edu

    # Preview keywords derived for a question/answer pair (no database)
    python main.py keywords "What dining options exist?" "Several cafeterias."
"""

import argparse
import json
import sys
from datetime import datetime

from core.config import get_database_settings
from core.faq_search import FaqSearchEngine
from core.keywords import derive_keywords
from core.schemas import FaqCategory
from core.storage_faq import FaqStorageClient
from utils.bootstrap_db import DatabaseBootstrap
from utils.logger import get_logger, set_log_level

logger = get_logger(__name__)

DB_COMMANDS = {"bootstrap", "search", "categories"}


def setup_argparse() -> argparse.ArgumentParser:
    """
    Configure and return the argument parser for the CLI.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        description="FAQ Chatbot Backend - search, schema and keyword tooling",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="INFO",
        help="Set logging level (default: INFO)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    bootstrap_parser = subparsers.add_parser(
        "bootstrap", help="Create or inspect the database schema"
    )
    bootstrap_group = bootstrap_parser.add_mutually_exclusive_group()
    bootstrap_group.add_argument(
        "--status", action="store_true", help="Show current database status"
    )
    bootstrap_group.add_argument(
        "--dry-run", action="store_true", help="Show what would be done"
    )
    bootstrap_group.add_argument(
        "--full-reset",
        action="store_true",
        help="Drop and recreate all tables (WARNING: deletes all data!)",
    )

    search_parser = subparsers.add_parser("search", help="Run a chatbot search")
    search_parser.add_argument("domain", help="School domain (e.g., acme.edu)")
    search_parser.add_argument("query", help="Free-text query")
    search_parser.add_argument(
        "--category",
        choices=[c.value for c in FaqCategory],
        default=None,
        help="Restrict results to one category",
    )

    categories_parser = subparsers.add_parser(
        "categories", help="List categories with active FAQs for a school"
    )
    categories_parser.add_argument("domain", help="School domain")

    keywords_parser = subparsers.add_parser(
        "keywords", help="Show keywords derived from a question and answer"
    )
    keywords_parser.add_argument("question")
    keywords_parser.add_argument("answer")

    return parser


def command_bootstrap(args: argparse.Namespace) -> int:
    """Execute the bootstrap command. Returns the process exit code."""
    logger.info("=" * 80)
    logger.info("COMMAND: DATABASE BOOTSTRAP")
    logger.info("=" * 80)

    if args.status:
        DatabaseBootstrap(dry_run=False).check_status()
    elif args.dry_run:
        logger.info("Running in DRY-RUN mode (no changes will be made)")
        DatabaseBootstrap(dry_run=True).setup_database()
    elif args.full_reset:
        logger.warning("WARNING: FULL RESET MODE - this will DELETE ALL FAQ DATA")
        response = input("Type 'yes' to confirm full reset: ")
        if response.lower() != "yes":
            logger.info("Reset cancelled")
            return 0
        DatabaseBootstrap(dry_run=False).setup_database(full_reset=True)
    else:
        DatabaseBootstrap(dry_run=False).setup_database()
        logger.info("Database bootstrap complete")
    return 0


def command_search(args: argparse.Namespace) -> int:
    """Run a search and print the result as JSON."""
    engine = FaqSearchEngine(FaqStorageClient())
    result = engine.search(args.domain, args.query, category=args.category)
    print(result.model_dump_json(indent=2))
    return 0


def command_categories(args: argparse.Namespace) -> int:
    """Print available categories for a school, one per line."""
    engine = FaqSearchEngine(FaqStorageClient())
    for category in engine.available_categories(args.domain):
        print(category.value)
    return 0


def command_keywords(args: argparse.Namespace) -> int:
    """Print derived keywords as a JSON array."""
    print(json.dumps(derive_keywords(args.question, args.answer)))
    return 0


COMMANDS = {
    "bootstrap": command_bootstrap,
    "search": command_search,
    "categories": command_categories,
    "keywords": command_keywords,
}


def main(argv=None) -> int:
    """
    Main entry point for the CLI application.

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = setup_argparse()
    args = parser.parse_args(argv)

    set_log_level(args.log_level)

    if not args.command:
        parser.print_help()
        return 1

    start_time = datetime.now()
    logger.debug(f"Command: {args.command}")

    if args.command in DB_COMMANDS:
        try:
            get_database_settings()
            logger.debug("Database configuration loaded successfully")
        except Exception as e:
            logger.error(f"Configuration error: {str(e)}")
            logger.error("Please ensure DB_HOST, DB_USER, DB_PASSWORD and DB_NAME are set (or in .env)")
            return 1

    try:
        exit_code = COMMANDS[args.command](args)
    except KeyboardInterrupt:
        logger.warning("Operation cancelled by user")
        exit_code = 130
    except Exception as e:
        logger.error(f"{args.command} failed: {str(e)}", exc_info=True)
        exit_code = 1

    duration = (datetime.now() - start_time).total_seconds()
    logger.debug(f"Completed in {duration:.2f} seconds (exit code {exit_code})")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
