"""Error taxonomy for the archiver.

Objective:
    Give every failure mode of a run a distinct, typed exception so callers
    (the CLI, tests, future batch runners) can observe and react to it
    instead of the process aborting.

Hierarchy:
    - :class:`ArchiverError`
        - :class:`ConfigError`: missing credentials or argument
        - :class:`ProtocolInvariantViolation`: the server broke an
          assumption (ambiguous LIST, no MOVE capability, no UIDVALIDITY)
        - :class:`TransportError`: connection or login failure
        - :class:`RecordError`: malformed FETCH record
            - :class:`MissingDate`
            - :class:`MissingIdentifier`
            - :class:`DateParseError`
        - :class:`FolderCreateError`
        - :class:`MoveError`

Operational notes:
    - All of these are fatal for a run. Nothing is retried automatically.
    - Transport library errors are chained with ``raise ... from e``.
"""

from typing import Optional


class ArchiverError(Exception):
    """Base class for all archiver errors."""


class ConfigError(ArchiverError):
    """Required configuration is missing or invalid."""


class ProtocolInvariantViolation(ArchiverError):
    """The server returned something the archiver cannot reason about."""


class TransportError(ArchiverError):
    """Connecting to or authenticating with the server failed."""


class RecordError(ArchiverError):
    """A fetched metadata record is unusable.

    Attributes:
        uid: UID of the offending record, when known.
    """

    def __init__(self, message: str, uid: Optional[int] = None) -> None:
        super().__init__(message)
        self.uid = uid


class MissingDate(RecordError):
    """A fetched record has no INTERNALDATE."""


class MissingIdentifier(RecordError):
    """A fetched record has no UID."""


class DateParseError(RecordError):
    """The year of an INTERNALDATE could not be parsed."""

    def __init__(self, message: str, uid: Optional[int] = None, value: object = None) -> None:
        super().__init__(message, uid=uid)
        self.value = value


class FolderCreateError(ArchiverError):
    """The server rejected a CREATE for an archive folder."""

    def __init__(self, message: str, year: int, folder: str) -> None:
        super().__init__(message)
        self.year = year
        self.folder = folder


class MoveError(ArchiverError):
    """The server rejected a UID MOVE into an archive folder."""

    def __init__(self, message: str, year: int, folder: str, count: int) -> None:
        super().__init__(message)
        self.year = year
        self.folder = folder
        self.count = count
