"""Command line interface for SectionHound."""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from core.exceptions import SectionHoundError
from sectionhound.core.config import SectionHoundConfig


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the CLI.

    Args:
        verbose: Whether to enable verbose logging
    """
    logger.remove()

    if verbose:
        logger.add(
            sys.stderr,
            level="DEBUG",
            format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
        )
    else:
        logger.add(
            sys.stderr,
            level="INFO",
            format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>"
        )


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        prog="sectionhound",
        description="Index documents into topical sections and search them semantically",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  sectionhound index ./docs
  sectionhound index ./docs --include "*.md" --continue-on-error
  sectionhound search "how do I rotate the API key" --limit 5
  sectionhound search "deployment steps" --context
        """,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    index_parser = subparsers.add_parser("index", help="Index a directory of documents")
    index_parser.add_argument("path", type=Path, help="Directory to index")
    _add_database_argument(index_parser)
    index_parser.add_argument("--include", nargs="*", help="File patterns to include")
    index_parser.add_argument("--exclude", nargs="*", help="File patterns to exclude")
    index_parser.add_argument(
        "--continue-on-error", action="store_true", default=None,
        help="Keep indexing remaining files after a file fails"
    )

    search_parser = subparsers.add_parser("search", help="Search indexed documents")
    search_parser.add_argument("query", help="Natural language query")
    _add_database_argument(search_parser)
    search_parser.add_argument("-k", "--limit", type=int, help="Maximum number of chunks to match")
    search_parser.add_argument(
        "--context", action="store_true",
        help="Print matching sections as a context block instead of a result list"
    )

    return parser


def _add_database_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--db", type=Path, help="DuckDB database path")


def load_config(args: argparse.Namespace) -> SectionHoundConfig:
    """Load the hierarchical configuration and apply command line overrides."""
    config = SectionHoundConfig.load_hierarchical()

    if getattr(args, "db", None):
        config.database.path = str(args.db)
    if getattr(args, "include", None):
        config.indexing.include_patterns = list(args.include)
    if getattr(args, "exclude", None) is not None:
        config.indexing.exclude_patterns = list(args.exclude)
    if getattr(args, "continue_on_error", None):
        config.indexing.continue_on_error = True

    return config


async def index_command(args: argparse.Namespace, config: SectionHoundConfig) -> None:
    """Index every matching file under a directory."""
    from providers.sources import DirectoryFileSourceProvider
    from registry import ProviderRegistry

    registry = ProviderRegistry(config)
    try:
        provider = DirectoryFileSourceProvider(
            args.path,
            include_patterns=config.indexing.include_patterns,
            exclude_patterns=config.indexing.exclude_patterns,
        )
        coordinator = registry.create_indexing_coordinator()
        stats = await coordinator.consume_all(provider, continue_on_error=config.indexing.continue_on_error)

        print(f"Processed: {stats['processed']} files")
        print(f"Unchanged: {stats['skipped']} files")
        if stats["errors"]:
            print(f"Errors: {stats['errors']} files")
            for name in stats["failed"]:
                print(f"  - {name}")
    finally:
        await registry.shutdown()


async def search_command(args: argparse.Namespace, config: SectionHoundConfig) -> None:
    """Run a semantic query against the index."""
    from registry import ProviderRegistry

    registry = ProviderRegistry(config)
    try:
        search_service = registry.create_search_service()
        k = args.limit or config.search.max_results
        result = await search_service.search_knowledge(args.query, k)

        if result.is_empty:
            print("No results found")
            return

        if args.context:
            print(result.to_context_string(), end="")
            return

        for rank, entry in enumerate(result.sections, 1):
            section = entry.item
            metrics = entry.relevance
            print(
                f"{rank}. section {section.section_index} of file {section.file_id} "
                f"(relevance {metrics.relevance_score}, normalized {metrics.normalized_score:.0f})"
            )
            preview = section.to_string().strip().replace("\n", " ")
            print(f"   {preview[:200]}")
    finally:
        await registry.shutdown()


async def async_main(argv: Optional[list[str]] = None) -> int:
    """Async main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    setup_logging(args.verbose)

    if args.command == "index" and not args.path.is_dir():
        logger.error(f"Invalid path: {args.path}")
        return 1

    try:
        config = load_config(args)
        if args.command == "index":
            await index_command(args, config)
        elif args.command == "search":
            await search_command(args, config)
        else:
            logger.error(f"Unknown command: {args.command}")
            return 1
    except SectionHoundError as e:
        logger.error(f"Command failed: {e}")
        return 1

    return 0


def main() -> None:
    """Main entry point for the CLI."""
    try:
        sys.exit(asyncio.run(async_main()))
    except KeyboardInterrupt:
        sys.exit(0)


if __name__ == "__main__":
    main()
