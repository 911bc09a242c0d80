"""Year classification of fetched message metadata.

Objective:
    Turn the ``(UID, INTERNALDATE)`` records of one batch into a mapping of
    archive year -> UIDs, leaving the current year's messages out.

Responsibilities:
    - Derive a message's year from its server-recorded internal date.
    - Reject malformed records with a typed error instead of skipping them;
      silently misfiling mail is worse than aborting the run.
    - Group the remaining UIDs by year, preserving first-seen order and
      collapsing duplicates.

High-level call tree:
    - :func:`classify_messages`
        - :func:`current_utc_year` (once per call)
        - :func:`message_year` (per record)
            - :func:`_parse_year`

Operational notes:
    - Current-year messages are skipped on purpose: they are treated as
      active mail. Each skip is logged at DEBUG and counted in the returned
      :class:`ClassifiedBatch` so the run summary can report them.
    - The year of a ``datetime`` is taken in whatever timezone the server
      reported; no conversion to local time happens here.
"""

import logging
from datetime import datetime, timezone
from typing import Iterable, NamedTuple, Optional

from imapclient.datetime_util import parse_to_datetime

from .exceptions import DateParseError, MissingDate, MissingIdentifier
from .models import MessageMetadata

logger = logging.getLogger(__name__)

YearGroup = dict[int, list[int]]


class ClassifiedBatch(NamedTuple):
    """Year groups for one batch plus the number of current-year skips."""

    groups: YearGroup
    skipped: int


def current_utc_year() -> int:
    """Return the current calendar year in UTC."""
    return datetime.now(timezone.utc).year


def _parse_year(value, uid: Optional[int]) -> int:
    """Extract the year from a datetime or a raw IMAP INTERNALDATE string.

    Raw strings (``DD-Mon-YYYY HH:MM:SS +ZZZZ``) are parsed with imapclient's
    own INTERNALDATE parser, keeping the reported timezone.
    """
    if not isinstance(value, datetime):
        try:
            value = parse_to_datetime(str(value).strip().encode("latin-1"), normalise=False)
        except (ValueError, UnicodeEncodeError) as e:
            raise DateParseError(
                f"Cannot parse internal date {value!r} for UID {uid}",
                uid=uid,
                value=value,
            ) from e

    return int(value.strftime("%Y"))


def message_year(record: MessageMetadata) -> int:
    """
    Return the archive year of a fetched message.

    Args:
        record: Fetched UID and internal date.

    Returns:
        int: Four-digit calendar year.

    Raises:
        MissingDate: If the record has no internal date.
        MissingIdentifier: If the record has no UID.
        DateParseError: If the year cannot be parsed as an integer.
    """
    if record.internal_date is None:
        raise MissingDate(f"Message has no date (UID {record.uid})", uid=record.uid)
    if record.uid is None:
        raise MissingIdentifier("Message has no UID")

    return _parse_year(record.internal_date, record.uid)


def classify_messages(
    records: Iterable[MessageMetadata],
    current_year: Optional[int] = None,
) -> ClassifiedBatch:
    """
    Group a batch of fetched records by year.

    Messages from the current year are left out. The first malformed record
    aborts classification of the whole batch.

    Args:
        records: Metadata fetched for one batch.
        current_year: Year treated as active mail (defaults to the current
            UTC year, computed once for the batch).

    Returns:
        ClassifiedBatch: Year groups in first-seen order, and the number of
        skipped current-year messages.
    """
    if current_year is None:
        current_year = current_utc_year()

    groups: YearGroup = {}
    seen: dict[int, set[int]] = {}
    skipped = 0

    for record in records:
        year = message_year(record)

        if year == current_year:
            logger.debug(f"Skipping UID {record.uid} from current year {year}")
            skipped += 1
            continue

        uids = seen.setdefault(year, set())
        if record.uid in uids:
            continue
        uids.add(record.uid)
        groups.setdefault(year, []).append(record.uid)

    return ClassifiedBatch(groups=groups, skipped=skipped)
