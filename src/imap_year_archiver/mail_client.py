"""IMAP session client for archive operations.

Objective:
    Provide a thin wrapper around the ``imapclient`` library exposing only
    the IMAP commands this project needs. This module centralizes connection
    setup (STARTTLS, login, capability negotiation), translation of
    transport failures, and Pydantic validation of responses.

Responsibilities:
    - Connect with STARTTLS and authenticate.
    - Select the source mailbox and verify UIDVALIDITY.
    - Search, fetch ``UID INTERNALDATE`` metadata, list and create folders,
      and move messages.

High-level call tree:
    - Public API:
        - :meth:`MailClient.connect`
        - :meth:`MailClient.select_mailbox` -> UIDVALIDITY
        - :meth:`MailClient.search_all` -> list of UIDs
        - :meth:`MailClient.fetch_metadata` -> :class:`src.imap_year_archiver.models.MessageMetadata`
        - :meth:`MailClient.list_folders` -> :class:`src.imap_year_archiver.models.FolderEntry`
        - :meth:`MailClient.create_folder`
        - :meth:`MailClient.move_messages`
        - :meth:`MailClient.logout`
    - Internal helpers:
        - :meth:`MailClient._require_session`
        - :func:`_transport_errors` (socket/abort/rejection -> TransportError)

IMAP commands used:
    - ``STARTTLS``, ``LOGIN``, ``CAPABILITY``
    - ``SELECT <mailbox>``
    - ``UID SEARCH ALL``
    - ``UID FETCH <set> (UID INTERNALDATE)``
    - ``LIST "" <name>``
    - ``CREATE <name>``
    - ``UID MOVE <set> <folder>``

Error handling:
    - Connection drops and socket errors raise :class:`TransportError`, as
      do server rejections of LOGIN, CAPABILITY, SELECT, SEARCH, FETCH and
      LIST.
    - Server ``NO``/``BAD`` replies to CREATE and MOVE propagate as
      ``imapclient.exceptions.IMAPClientError``; the folder manager and
      archiver turn them into typed errors with context.
"""

import logging
import ssl
from contextlib import contextmanager
from typing import Optional

from imapclient import IMAPClient
from imapclient.exceptions import IMAPClientAbortError, IMAPClientError

from .config import REQUIRED_CAPABILITY, Settings
from .exceptions import ProtocolInvariantViolation, TransportError
from .models import FolderEntry, MessageMetadata

logger = logging.getLogger(__name__)

FETCH_FIELDS = ["UID", "INTERNALDATE"]


def _decode(value) -> str:
    """Decode a bytes value from the server, passing strings through."""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


@contextmanager
def _transport_errors(action: str, rejections: bool = False):
    """Translate connection-level failures into :class:`TransportError`.

    With ``rejections=True`` a server ``NO``/``BAD`` reply is translated as
    well; otherwise it propagates for the caller to type.
    """
    try:
        yield
    except IMAPClientAbortError as e:
        raise TransportError(f"Connection lost while trying to {action}: {e}") from e
    except OSError as e:
        raise TransportError(f"Network error while trying to {action}: {e}") from e
    except IMAPClientError as e:
        if not rejections:
            raise
        raise TransportError(f"Server refused to {action}: {e}") from e


class MailClient:
    """
    Client for the IMAP operations used by the archiver.

    The underlying :class:`imapclient.IMAPClient` is created lazily by
    :meth:`connect`, or can be injected for testing.

    Attributes:
        settings: Application settings.
    """

    def __init__(self, settings: Settings, imap: Optional[IMAPClient] = None) -> None:
        """
        Initialize mail client.

        Args:
            settings: Application settings.
            imap: Pre-built ``IMAPClient`` (mainly for tests).
        """
        self.settings = settings
        self._imap = imap

    def _require_session(self) -> IMAPClient:
        if self._imap is None:
            raise TransportError("Not connected; call connect() first")
        return self._imap

    def connect(self, server: str) -> None:
        """Open a STARTTLS session, log in and check capabilities.

        Internal dates are kept in the timezone the server reports them in
        (``normalise_times = False``), so the derived year matches the
        server's view.

        Args:
            server: Hostname of the IMAP server.

        Raises:
            TransportError: If the connection, TLS upgrade or login fails.
            ProtocolInvariantViolation: If the server lacks ``MOVE``.
        """
        port = self.settings.imap_port
        logger.info(f"Connecting to {server}:{port}")

        with _transport_errors(f"connect to {server}"):
            try:
                if self._imap is None:
                    self._imap = IMAPClient(
                        server,
                        port=port,
                        ssl=False,
                        timeout=self.settings.imap_timeout,
                    )
                self._imap.normalise_times = False
                self._imap.starttls(ssl.create_default_context())
            except IMAPClientError as e:
                raise TransportError(f"STARTTLS negotiation with {server} failed: {e}") from e

        with _transport_errors("log in"):
            try:
                self._imap.login(
                    self.settings.imap_username, self.settings.imap_password
                )
            except IMAPClientError as e:
                raise TransportError(
                    f"Failed IMAP login for {self.settings.imap_username}: {e}"
                ) from e

        logger.info(f"Logged in as {self.settings.imap_username}")

        with _transport_errors("read capabilities", rejections=True):
            has_move = self._imap.has_capability(REQUIRED_CAPABILITY)

        if not has_move:
            raise ProtocolInvariantViolation(
                f"Server {server} does not support the {REQUIRED_CAPABILITY} capability"
            )

    def select_mailbox(self, mailbox: str) -> int:
        """Select ``mailbox`` read-write and return its UIDVALIDITY.

        Raises:
            ProtocolInvariantViolation: If the server reports no UIDVALIDITY.
        """
        imap = self._require_session()
        with _transport_errors(f"select {mailbox}", rejections=True):
            response = imap.select_folder(mailbox)

        uid_validity = response.get(b"UIDVALIDITY")
        if uid_validity is None:
            raise ProtocolInvariantViolation(f"Mailbox {mailbox} has no UIDVALIDITY")

        exists = response.get(b"EXISTS")
        logger.info(f"Selected {mailbox} (exists={exists}, uidvalidity={uid_validity})")
        return int(uid_validity)

    def search_all(self) -> list[int]:
        """Return every UID in the selected mailbox in ascending order."""
        imap = self._require_session()
        with _transport_errors("search mailbox", rejections=True):
            uids = imap.search("ALL")
        logger.debug(f"Search returned {len(uids)} messages")
        return sorted(int(uid) for uid in uids)

    def fetch_metadata(self, uid_set: str) -> list[MessageMetadata]:
        """Fetch the UID and INTERNALDATE of the messages in ``uid_set``.

        Args:
            uid_set: Comma-separated UIDs.

        Returns:
            list[MessageMetadata]: One record per returned message.
        """
        imap = self._require_session()
        with _transport_errors("fetch message metadata", rejections=True):
            response = imap.fetch(uid_set, FETCH_FIELDS)

        records = []
        for msg_id, data in response.items():
            records.append(
                MessageMetadata(uid=data.get(b"UID", msg_id), internal_date=data.get(b"INTERNALDATE"))
            )

        logger.debug(f"Fetched metadata for {len(records)} messages")
        return records

    def list_folders(self, name: str) -> list[FolderEntry]:
        """List folders matching ``name`` exactly.

        Args:
            name: Full folder name used as the LIST pattern.

        Returns:
            list[FolderEntry]: Matching folders (normally zero or one).
        """
        imap = self._require_session()
        with _transport_errors(f"list {name}", rejections=True):
            folders = imap.list_folders(pattern=name)

        return [
            FolderEntry(
                flags=tuple(_decode(flag) for flag in flags),
                delimiter=_decode(delimiter) if delimiter is not None else None,
                name=_decode(folder_name),
            )
            for flags, delimiter, folder_name in folders
        ]

    def create_folder(self, name: str) -> None:
        """Create a folder.

        Raises:
            IMAPClientError: If the server rejected the CREATE.
        """
        imap = self._require_session()
        with _transport_errors(f"create {name}"):
            imap.create_folder(name)
        logger.debug(f"Created folder: {name}")

    def move_messages(self, uid_set: str, folder: str) -> None:
        """Move the messages in ``uid_set`` to ``folder`` with UID MOVE.

        Raises:
            IMAPClientError: If the server rejected the MOVE.
        """
        imap = self._require_session()
        with _transport_errors(f"move messages to {folder}"):
            imap.move(uid_set, folder)

    def logout(self) -> None:
        """Close the session. Failures are logged, never raised."""
        if self._imap is None:
            return

        try:
            self._imap.logout()
            logger.info("Logged out")
        except (IMAPClientError, OSError) as e:
            logger.warning(f"Logout failed: {e}")
        finally:
            self._imap = None
