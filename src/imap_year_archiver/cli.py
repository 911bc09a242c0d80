"""Command-line interface (CLI) entrypoint.

Objective:
    Provide a human-friendly CLI wrapper around
    :class:`src.imap_year_archiver.orchestrator.ArchiveOrchestrator`.

Responsibilities:
    - Parse arguments (a single positional server address).
    - Load settings (credentials from ``IMAP_USERNAME``/``IMAP_PASSWORD``)
      and fail fast when they are missing.
    - Configure logging (including suppressing noisy IMAP protocol logs).
    - Invoke the orchestrator and print a readable summary of the run.

High-level call tree:
    - :func:`main`
        - :func:`get_settings`
        - :func:`setup_logging`
            - installs :class:`_ImapProtocolToDebugFilter`
        - instantiate :class:`ArchiveOrchestrator`
        - :meth:`ArchiveOrchestrator.run`
        - :func:`print_summary`

Operational notes:
    - This module supports being run both as a package module
      (``python -m src.imap_year_archiver.cli``) and as a script
      (``python src/imap_year_archiver/cli.py``). The import fallback handles
      the script case.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

try:
    from .orchestrator import ArchiveOrchestrator
    from .config import get_settings
    from .exceptions import ArchiverError, ConfigError
except ImportError:  # pragma: no cover
    src_root = Path(__file__).resolve().parents[1]
    if str(src_root) not in sys.path:
        sys.path.insert(0, str(src_root))

    from imap_year_archiver.orchestrator import ArchiveOrchestrator
    from imap_year_archiver.config import get_settings
    from imap_year_archiver.exceptions import ArchiverError, ConfigError


class _ImapProtocolToDebugFilter(logging.Filter):
    """Filter to suppress imapclient's per-command protocol logs.

    ``imapclient`` logs every command and response it exchanges. This filter
    hides those messages unless the root logger is in DEBUG mode.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """Determine whether a log record should be emitted.

        Args:
            record: Log record emitted by the logging framework.

        Returns:
            bool: True to allow emission, False to suppress.
        """
        if record.name.startswith("imapclient") and record.levelno <= logging.INFO:
            return logging.getLogger().isEnabledFor(logging.DEBUG)
        return True


def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the application.

    This sets the root logger level and installs the
    :class:`_ImapProtocolToDebugFilter` on all root handlers.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR).
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )

    root_logger = logging.getLogger()
    protocol_filter = _ImapProtocolToDebugFilter()
    for handler in root_logger.handlers:
        handler.addFilter(protocol_filter)


def print_summary(summary, verbose: bool = False) -> None:
    """
    Print a run summary to console.

    Output format:
        - One line per archive year with the number of messages moved.
        - Folders created during the run.
        - Messages left in place because they belong to the current year.

    Args:
        summary: RunSummary returned by the orchestrator.
        verbose: If True, also list every batch move.
    """
    if not summary.results:
        print(f"\nNothing to archive in {summary.mailbox} "
              f"({summary.total_messages} messages scanned).")
        return

    print(f"\n{'='*60}")
    print(f"ARCHIVE RESULTS: {summary.archived_count} of "
          f"{summary.total_messages} messages in {summary.mailbox}")
    print(f"{'='*60}\n")

    for year, count in summary.by_year.items():
        print(f"  {year}: {count} messages")

    if verbose:
        print()
        for result in summary.results:
            marker = " (new folder)" if result.created_folder else ""
            print(f"    -> {result.folder}: {result.count}{marker}")

    created = summary.created_folders
    if created:
        print(f"\nCreated folders: {', '.join(created)}")

    print(f"\n{'='*60}")
    print(f"SUMMARY: {summary.archived_count} archived in {summary.batches} batches, "
          f"{summary.skipped_current_year} left from the current year")
    print(f"{'='*60}\n")


def main(args: Optional[list[str]] = None) -> int:
    """
    Main CLI entry point.

    This function is structured to be testable: pass an explicit ``args`` list
    instead of relying on ``sys.argv``.

    It delegates all business logic to the orchestrator.

    Args:
        args: Command line arguments (uses sys.argv if None).

    Returns:
        int: Exit code (0 for success, 1 for error).
    """
    parser = argparse.ArgumentParser(
        description="IMAP Year Archiver - move last years' mail into Archives/<year>",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment:
  IMAP_USERNAME, IMAP_PASSWORD   Mailbox credentials (required)
  IMAP_PORT, IMAP_MAILBOX        Optional, default 143 and INBOX
  LOG_LEVEL                      Optional, default INFO

Examples:
  %(prog)s imap.example.com
        """,
    )

    parser.add_argument(
        "server",
        type=str,
        help="IMAP server address",
    )

    parsed_args = parser.parse_args(args)

    try:
        settings = get_settings()
    except ConfigError as e:
        print(f"\nError: {e}\n", file=sys.stderr)
        return 1

    setup_logging(settings.log_level)
    logger = logging.getLogger(__name__)

    try:
        orchestrator = ArchiveOrchestrator(settings=settings)
        summary = orchestrator.run(parsed_args.server)

        print_summary(summary, verbose=settings.log_level.upper() == "DEBUG")
        return 0

    except ArchiverError as e:
        logger.exception(f"Archiving aborted: {type(e).__name__}")
        print(f"\nError: {e}\n", file=sys.stderr)
        return 1
    except Exception as e:
        logger.exception("Fatal error")
        print(f"\nError: {e}\n", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
