"""
Tests for the folder_manager module.
"""

import threading
import time

import pytest
from unittest.mock import MagicMock

from imapclient.exceptions import IMAPClientError

from src.imap_year_archiver.exceptions import FolderCreateError, ProtocolInvariantViolation
from src.imap_year_archiver.folder_manager import FolderCache, FolderManager, year_to_folder
from src.imap_year_archiver.models import FolderEntry


@pytest.fixture
def mock_mail_client():
    """Create mock mail client."""
    client = MagicMock()
    client.list_folders.return_value = []
    return client


def _entry(name):
    return FolderEntry(flags=("\\HasNoChildren",), delimiter="/", name=name)


def test_year_to_folder():
    """Folder names are Archives/<year> with no padding."""
    assert year_to_folder(2019) == "Archives/2019"
    assert year_to_folder(987) == "Archives/987"


class TestEnsureFolderExisting:
    """Tests for folders that already exist on the server."""

    def test_existing_folder_is_cached(self, mock_mail_client):
        """An existing folder is listed once and never created."""
        mock_mail_client.list_folders.return_value = [_entry("Archives/2019")]

        manager = FolderManager(mock_mail_client)
        created = manager.ensure_folder(2019)

        assert created is False
        assert 2019 in manager.cache
        mock_mail_client.list_folders.assert_called_once_with("Archives/2019")
        mock_mail_client.create_folder.assert_not_called()

    def test_second_call_is_cache_hit(self, mock_mail_client):
        """Two calls for the same year make one LIST and at most one CREATE."""
        manager = FolderManager(mock_mail_client)

        assert manager.ensure_folder(2020) is True
        assert manager.ensure_folder(2020) is False

        assert mock_mail_client.list_folders.call_count == 1
        assert mock_mail_client.create_folder.call_count == 1

    def test_ambiguous_listing_is_fatal(self, mock_mail_client):
        """Two LIST matches raise and never CREATE."""
        mock_mail_client.list_folders.return_value = [
            _entry("Archives/2020"),
            _entry("Archives/2020"),
        ]

        manager = FolderManager(mock_mail_client)

        with pytest.raises(ProtocolInvariantViolation):
            manager.ensure_folder(2020)

        mock_mail_client.create_folder.assert_not_called()
        assert 2020 not in manager.cache


class TestEnsureFolderCreation:
    """Tests for folder creation."""

    def test_missing_folder_is_created(self, mock_mail_client):
        manager = FolderManager(mock_mail_client)

        created = manager.ensure_folder(2018)

        assert created is True
        mock_mail_client.create_folder.assert_called_once_with("Archives/2018")
        assert manager.cache.years() == [2018]

    def test_failed_create_is_not_cached(self, mock_mail_client):
        """A rejected CREATE raises and a retry goes back to the server."""
        mock_mail_client.create_folder.side_effect = [
            IMAPClientError("create failed: NO [ALREADYEXISTS]"),
            None,
        ]

        manager = FolderManager(mock_mail_client)

        with pytest.raises(FolderCreateError) as exc_info:
            manager.ensure_folder(2017)

        assert exc_info.value.year == 2017
        assert exc_info.value.folder == "Archives/2017"
        assert isinstance(exc_info.value.__cause__, IMAPClientError)
        assert 2017 not in manager.cache

        assert manager.ensure_folder(2017) is True
        assert mock_mail_client.list_folders.call_count == 2
        assert 2017 in manager.cache

    def test_lock_released_after_failure(self, mock_mail_client):
        mock_mail_client.create_folder.side_effect = IMAPClientError("NO")
        manager = FolderManager(mock_mail_client)

        with pytest.raises(FolderCreateError):
            manager.ensure_folder(2016)

        assert not manager.cache.lock.locked()

    def test_shared_cache_between_managers(self, mock_mail_client):
        """A cache passed in is reused rather than replaced."""
        cache = FolderCache()
        FolderManager(mock_mail_client, cache).ensure_folder(2015)

        other_client = MagicMock()
        FolderManager(other_client, cache).ensure_folder(2015)

        other_client.list_folders.assert_not_called()
        assert len(cache) == 1


class TestEnsureFolderConcurrency:
    """Tests for concurrent callers."""

    def test_concurrent_calls_create_once(self):
        """Racing callers for one year produce a single LIST and CREATE."""
        created_names = []

        def slow_list(name):
            time.sleep(0.01)
            return [_entry(name)] if name in created_names else []

        client = MagicMock()
        client.list_folders.side_effect = slow_list
        client.create_folder.side_effect = created_names.append

        manager = FolderManager(client)
        results = []

        threads = [
            threading.Thread(target=lambda: results.append(manager.ensure_folder(2019)))
            for _ in range(8)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert client.create_folder.call_count == 1
        assert client.list_folders.call_count == 1
        assert sorted(results) == [False] * 7 + [True]
