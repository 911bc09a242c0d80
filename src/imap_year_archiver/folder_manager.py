"""Archive folder provisioning.

Objective:
    Make sure the ``Archives/<year>`` folder exists before messages are moved
    into it, talking to the server as little as possible.

Responsibilities:
    - Map a year to its archive folder name.
    - Remember, for the lifetime of a run, which years are known to have a
      folder (:class:`FolderCache`).
    - Look a folder up with an exact-name LIST and create it when absent
      (:meth:`FolderManager.ensure_folder`).

Caching strategy:
    The cache only ever grows, and a year is inserted only after its folder
    was listed or successfully created. Together with the fast path this
    means the server sees at most one LIST and one CREATE per year per run.

    The whole check-list-create-insert sequence runs under the cache lock,
    so concurrent callers never issue two CREATEs for the same folder.

High-level call tree:
    - :class:`FolderManager`
        - :meth:`ensure_folder`
            - :meth:`MailClient.list_folders`
            - :meth:`MailClient.create_folder`

Operational notes:
    - A failed CREATE leaves the year uncached, so a later call in the same
      run tries again.
    - More than one LIST match for an exact name is never disambiguated; it
      raises :class:`ProtocolInvariantViolation`.
"""

import logging
import threading
from typing import Optional

from imapclient.exceptions import IMAPClientError

from .config import ARCHIVE_ROOT
from .exceptions import FolderCreateError, ProtocolInvariantViolation

logger = logging.getLogger(__name__)


def year_to_folder(year: int) -> str:
    """Return the archive folder name for a year, e.g. ``Archives/2019``."""
    return f"{ARCHIVE_ROOT}/{int(year)}"


class FolderCache:
    """
    Years whose archive folder is confirmed to exist.

    Attributes:
        lock: Guards the cache. Callers hold it across the full
            check-then-create sequence.
    """

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self._years: set[int] = set()

    def __contains__(self, year: int) -> bool:
        return year in self._years

    def __len__(self) -> int:
        return len(self._years)

    def add(self, year: int) -> None:
        """Record a confirmed year. Callers must hold :attr:`lock`."""
        self._years.add(year)

    def years(self) -> list[int]:
        """Sorted snapshot of cached years."""
        with self.lock:
            return sorted(self._years)


class FolderManager:
    """
    Ensures archive folders exist.

    Attributes:
        client: Mail session used for LIST and CREATE.
        cache: Folder existence cache shared for the run.
    """

    def __init__(self, client, cache: Optional[FolderCache] = None) -> None:
        """
        Initialize folder manager.

        Args:
            client: Mail session exposing ``list_folders`` and
                ``create_folder``.
            cache: Existing cache to share; a fresh one is created if None.
        """
        self.client = client
        self.cache = cache if cache is not None else FolderCache()

    def ensure_folder(self, year: int) -> bool:
        """
        Ensure the archive folder for ``year`` exists, creating it if needed.

        Args:
            year: Archive year.

        Returns:
            bool: True if the folder was created by this call, False if it
            already existed (cached or listed).

        Raises:
            ProtocolInvariantViolation: If LIST matched more than one folder.
            FolderCreateError: If the server rejected the CREATE.
            TransportError: If the LIST was refused or the connection failed.
        """
        with self.cache.lock:
            if year in self.cache:
                return False

            folder_name = year_to_folder(year)
            folders = self.client.list_folders(folder_name)

            if len(folders) > 1:
                raise ProtocolInvariantViolation(
                    f"LIST for {folder_name!r} matched {len(folders)} folders"
                )

            if folders:
                logger.info(f"Caching existing folder for year {year}")
                self.cache.add(year)
                return False

            logger.info(f"Creating missing folder for year {year}")
            try:
                self.client.create_folder(folder_name)
            except IMAPClientError as e:
                logger.error(f"Failed to create folder {folder_name}: {e}")
                raise FolderCreateError(
                    f"Failed to create folder {folder_name}: {e}",
                    year=year,
                    folder=folder_name,
                ) from e

            self.cache.add(year)
            return True
