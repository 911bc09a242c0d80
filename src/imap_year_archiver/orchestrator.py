"""Workflow orchestrator.

Objective:
    Coordinate the end-to-end workflow:
    1) Connect to the IMAP server (STARTTLS, login, MOVE capability)
    2) Select the source mailbox and enumerate every UID
    3) Split the UIDs into batches
    4) For each batch, fetch internal dates and group UIDs by year
    5) For each year, ensure the archive folder exists, then move the UIDs
    6) Return a run summary suitable for the CLI

Responsibilities:
    - Compose the core components (mail client, folder manager with its
      cache, archiver).
    - Provide an imperative API (:meth:`ArchiveOrchestrator.run`) that can be
      called from the CLI or other scripts.

High-level call tree:
    - :class:`ArchiveOrchestrator`
        - :meth:`ArchiveOrchestrator.run`
            - :meth:`MailClient.connect`
            - :meth:`MailClient.select_mailbox`
            - :meth:`MailClient.search_all`
            - :func:`batch_uids`
            - for each batch:
                - :meth:`ArchiveOrchestrator.process_batch`
                    - :meth:`MailClient.fetch_metadata`
                    - :func:`classify_messages`
                    - for each year:
                        - :meth:`FolderManager.ensure_folder`
                        - :meth:`Archiver.archive`
            - :meth:`MailClient.logout`
    - :func:`run_archiver` convenience wrapper

Operational notes:
    - Batches are processed strictly in sequence over one session.
    - The first error aborts the run; there is no per-year isolation and no
      retry. A re-run picks up where this one stopped, since moved messages
      no longer show up in the source mailbox.
    - The folder cache lives as long as the orchestrator and is not persisted.
"""

import logging
from typing import Optional

from .archiver import Archiver
from .batching import batch_uids, create_uid_set
from .classifier import classify_messages
from .config import MAX_UIDS, Settings, get_settings
from .folder_manager import FolderCache, FolderManager
from .mail_client import MailClient
from .models import ArchiveResult, RunSummary

logger = logging.getLogger(__name__)


class ArchiveOrchestrator:
    """
    Orchestrates the archiving workflow.

    This class is "glue" code: it connects the mail client, classifier,
    folder manager and archiver without embedding business rules.

    Attributes:
        settings: Application settings.
        client: IMAP session client.
        cache: Folder existence cache for this run.
        folder_manager: Archive folder provisioning.
        archiver: Message mover.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[MailClient] = None,
        cache: Optional[FolderCache] = None,
    ) -> None:
        """
        Initialize orchestrator with all components.

        Args:
            settings: Application settings (loads from env if None).
            client: Mail client (built from settings if None).
            cache: Folder cache to share (a new one if None).
        """
        self.settings = settings or get_settings()

        self.client = client or MailClient(self.settings)
        self.cache = cache if cache is not None else FolderCache()
        self.folder_manager = FolderManager(self.client, self.cache)
        self.archiver = Archiver(self.client)

    def process_batch(
        self,
        uids: list[int],
        current_year: Optional[int] = None,
    ) -> tuple[list[ArchiveResult], int]:
        """
        Archive one batch of messages.

        For each year found in the batch the folder is ensured before the
        messages are moved. Errors are not caught here.

        Args:
            uids: UIDs of the batch.
            current_year: Year to leave in place (defaults to the current UTC
                year).

        Returns:
            tuple[list[ArchiveResult], int]: One result per year moved, and
            the number of current-year messages skipped.
        """
        logger.info(f"Processing {len(uids)} messages")

        records = self.client.fetch_metadata(create_uid_set(uids))
        classified = classify_messages(records, current_year=current_year)

        results = []
        for year, year_uids in classified.groups.items():
            created = self.folder_manager.ensure_folder(year)
            folder = self.archiver.archive(year, year_uids)
            logger.info(f"Archived {len(year_uids)} messages to {folder}")
            results.append(
                ArchiveResult(
                    year=year,
                    folder=folder,
                    uids=year_uids,
                    created_folder=created,
                )
            )

        return results, classified.skipped

    def run(self, server: str, current_year: Optional[int] = None) -> RunSummary:
        """Run the archiving workflow against ``server``.

        Args:
            server: Hostname of the IMAP server.
            current_year: Year to leave in place (defaults to the current UTC
                year, evaluated per batch).

        Returns:
            RunSummary: What was moved where.
        """
        mailbox = self.settings.imap_mailbox
        summary = RunSummary(mailbox=mailbox)

        try:
            self.client.connect(server)
            self.client.select_mailbox(mailbox)

            uids = self.client.search_all()
            summary.total_messages = len(uids)

            if not uids:
                logger.info("No messages to process")
                return summary

            logger.info(f"Found {len(uids)} messages in {mailbox}")

            for batch in batch_uids(uids, MAX_UIDS):
                results, skipped = self.process_batch(batch, current_year=current_year)
                summary.results.extend(results)
                summary.skipped_current_year += skipped
                summary.batches += 1
        finally:
            self.client.logout()

        logger.info(
            f"Completed: {summary.archived_count} archived, "
            f"{summary.skipped_current_year} left in {mailbox}"
        )
        return summary


def run_archiver(server: str, settings: Optional[Settings] = None) -> RunSummary:
    """Convenience wrapper to run the archiver.

    This is a thin wrapper around :class:`ArchiveOrchestrator` for scripts
    that do not need to hold on to the orchestrator.

    Args:
        server: Hostname of the IMAP server.
        settings: Application settings (loads from env if None).

    Returns:
        RunSummary: What was moved where.
    """
    orchestrator = ArchiveOrchestrator(settings=settings)
    return orchestrator.run(server)
