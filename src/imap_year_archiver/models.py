"""Pydantic data models used across the application.

Objective:
    Centralize the strongly-typed data structures representing:
    - Message metadata returned by an IMAP ``UID FETCH (UID INTERNALDATE)``
    - Folder entries returned by an IMAP ``LIST``
    - Per-year move results and the run summary produced by the orchestrator

Design notes:
    - Only the UID and INTERNALDATE of a message are ever read; message
      content is never fetched.
    - ``internal_date`` accepts either a parsed ``datetime`` (what
      ``imapclient`` returns) or the raw IMAP string form, e.g.
      ``"17-Jul-2019 02:44:25 -0700"``. The classifier handles both.

Call tree usage:
    - :class:`src.imap_year_archiver.mail_client.MailClient`:
        - builds :class:`MessageMetadata` and :class:`FolderEntry`
    - :class:`src.imap_year_archiver.orchestrator.ArchiveOrchestrator`:
        - returns :class:`RunSummary` made of :class:`ArchiveResult`
"""

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class MessageMetadata(BaseModel):
    """
    UID and internal date of one message.

    Both fields are optional on purpose: a server may omit either, and the
    classifier reports that as a typed error rather than failing validation.

    Attributes:
        uid: Server-assigned UID.
        internal_date: Server-recorded delivery timestamp.
    """

    uid: Optional[int] = None
    internal_date: Optional[Union[datetime, str]] = Field(default=None, alias="internalDate")

    model_config = ConfigDict(populate_by_name=True)


class FolderEntry(BaseModel):
    """One mailbox returned by LIST."""

    flags: tuple[str, ...] = ()
    delimiter: Optional[str] = None
    name: str


class ArchiveResult(BaseModel):
    """
    Result of moving one year's messages out of one batch.

    Attributes:
        year: Archive year.
        folder: Destination folder name.
        uids: UIDs moved.
        created_folder: Whether the folder was created during this call.
    """

    year: int
    folder: str
    uids: list[int] = Field(default_factory=list)
    created_folder: bool = False

    @property
    def count(self) -> int:
        """Number of messages moved."""
        return len(self.uids)


class RunSummary(BaseModel):
    """
    Outcome of a full archiving run.

    This is the primary output type returned to the CLI.

    Attributes:
        mailbox: Source mailbox.
        total_messages: UIDs found by the initial search.
        batches: Number of batches processed.
        skipped_current_year: Messages left in place because they belong to
            the current year.
        results: One entry per (batch, year) move.
    """

    mailbox: str
    total_messages: int = 0
    batches: int = 0
    skipped_current_year: int = 0
    results: list[ArchiveResult] = Field(default_factory=list)

    @property
    def archived_count(self) -> int:
        """Total number of messages moved."""
        return sum(r.count for r in self.results)

    @property
    def by_year(self) -> dict[int, int]:
        """Messages moved per year, ordered by year."""
        totals: dict[int, int] = {}
        for result in self.results:
            totals[result.year] = totals.get(result.year, 0) + result.count
        return dict(sorted(totals.items()))

    @property
    def created_folders(self) -> list[str]:
        """Folders created during the run."""
        return [r.folder for r in self.results if r.created_folder]
