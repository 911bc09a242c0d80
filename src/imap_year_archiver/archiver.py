"""Move a year's messages into its archive folder."""

import logging

from imapclient.exceptions import IMAPClientError

from .batching import create_uid_set
from .exceptions import MoveError
from .folder_manager import year_to_folder

logger = logging.getLogger(__name__)


class Archiver:
    """
    Issues one UID MOVE per (batch, year) pair.

    The archiver does not check that the destination exists; callers run
    :meth:`FolderManager.ensure_folder` for the same year first.

    Attributes:
        client: Mail session exposing ``move_messages``.
    """

    def __init__(self, client) -> None:
        self.client = client

    def archive(self, year: int, uids: list[int]) -> str:
        """
        Move ``uids`` into ``Archives/<year>``.

        The move is all-or-nothing from the caller's point of view and is
        never retried here.

        Args:
            year: Archive year.
            uids: UIDs to move.

        Returns:
            str: Destination folder name.

        Raises:
            MoveError: If the server rejected the move.
        """
        uid_set = create_uid_set(uids)
        folder_name = year_to_folder(year)

        try:
            self.client.move_messages(uid_set, folder_name)
        except IMAPClientError as e:
            logger.error(f"Failed to move {len(uids)} messages to {folder_name}: {e}")
            raise MoveError(
                f"Failed to move {len(uids)} messages to {folder_name}: {e}",
                year=year,
                folder=folder_name,
                count=len(uids),
            ) from e

        logger.debug(f"Moved {len(uids)} messages to {folder_name}")
        return folder_name
