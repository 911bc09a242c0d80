import logging

from src.imap_year_archiver.cli import _ImapProtocolToDebugFilter


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(
        name=name,
        level=level,
        pathname=__file__,
        lineno=1,
        msg="> b'ABCD1 UID FETCH 1,2,3 (UID INTERNALDATE)'",
        args=(),
        exc_info=None,
    )


def test_imap_protocol_logs_are_downgraded_to_debug() -> None:
    """Ensure imapclient protocol logs are suppressed unless running at DEBUG."""

    record = _record("imapclient.imaplib", logging.INFO)

    root_logger = logging.getLogger()
    previous_level = root_logger.level

    try:
        root_logger.setLevel(logging.INFO)
        f = _ImapProtocolToDebugFilter()
        assert f.filter(record) is False

        root_logger.setLevel(logging.DEBUG)
        assert f.filter(record) is True
    finally:
        root_logger.setLevel(previous_level)


def test_imap_warnings_and_own_logs_pass_through() -> None:
    root_logger = logging.getLogger()
    previous_level = root_logger.level

    try:
        root_logger.setLevel(logging.INFO)
        f = _ImapProtocolToDebugFilter()
        assert f.filter(_record("imapclient.imapclient", logging.WARNING)) is True
        assert f.filter(_record("src.imap_year_archiver.orchestrator", logging.INFO)) is True
    finally:
        root_logger.setLevel(previous_level)
