"""UID batching and UID-set serialisation.

Splits the full list of mailbox UIDs into bounded batches so no single
FETCH or MOVE request grows without limit, and renders UID lists in the
comma-separated form IMAP expects on the wire.
"""

from typing import Iterable, Iterator

from .config import MAX_UIDS


def batch_uids(uids: Iterable[int], size: int = MAX_UIDS) -> Iterator[list[int]]:
    """Yield consecutive batches of at most ``size`` UIDs.

    Order is preserved. Every batch is full except possibly the last, and an
    empty batch is never yielded.

    Args:
        uids: UIDs in mailbox order.
        size: Maximum batch length.

    Yields:
        list[int]: The next batch.

    Raises:
        ValueError: If ``size`` is smaller than 1.
    """
    if size < 1:
        raise ValueError(f"Batch size must be positive, got {size}")

    batch: list[int] = []
    for uid in uids:
        batch.append(uid)
        if len(batch) == size:
            yield batch
            batch = []

    if batch:
        yield batch


def create_uid_set(uids: Iterable[int]) -> str:
    """Join UIDs into an IMAP sequence set, e.g. ``"101,102,205"``."""
    return ",".join(str(uid) for uid in uids)
