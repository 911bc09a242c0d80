"""IMAP Year Archiver package.

Objective:
    Move every message older than the current year out of an IMAP mailbox
    into per-year folders (``Archives/<year>``), creating the folders on
    demand.

Key modules:
    - :mod:`src.imap_year_archiver.mail_client`:
        IMAP session wrapper (STARTTLS, login, LIST/CREATE/SEARCH/FETCH/MOVE).
    - :mod:`src.imap_year_archiver.batching`:
        UID batching and UID-set serialisation.
    - :mod:`src.imap_year_archiver.classifier`:
        Grouping of fetched messages by internal-date year.
    - :mod:`src.imap_year_archiver.folder_manager`:
        Folder existence cache and on-demand folder creation.
    - :mod:`src.imap_year_archiver.archiver`:
        Batched UID MOVE into the archive folder.
    - :mod:`src.imap_year_archiver.orchestrator`:
        End-to-end workflow coordination.
    - :mod:`src.imap_year_archiver.cli`:
        Command-line entrypoint.
"""

__version__ = "0.1.0"
