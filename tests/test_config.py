import pytest

from src.imap_year_archiver.config import Settings, get_settings
from src.imap_year_archiver.exceptions import ConfigError


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Run without IMAP_* variables and away from any local .env file."""

    monkeypatch.chdir(tmp_path)
    for name in ("IMAP_USERNAME", "IMAP_PASSWORD", "IMAP_PORT", "IMAP_MAILBOX", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_settings_from_environment(clean_env) -> None:
    clean_env.setenv("IMAP_USERNAME", "user@example.com")
    clean_env.setenv("IMAP_PASSWORD", "secret")

    settings = get_settings()

    assert settings.imap_username == "user@example.com"
    assert settings.imap_password == "secret"
    assert settings.imap_port == 143
    assert settings.imap_mailbox == "INBOX"
    assert settings.log_level == "INFO"


def test_missing_password_names_env_var(clean_env) -> None:
    clean_env.setenv("IMAP_USERNAME", "user@example.com")

    with pytest.raises(ConfigError) as exc_info:
        get_settings()

    assert "IMAP_PASSWORD" in str(exc_info.value)
    assert "IMAP_USERNAME" not in str(exc_info.value)


def test_missing_both_credentials(clean_env) -> None:
    with pytest.raises(ConfigError) as exc_info:
        get_settings()

    message = str(exc_info.value)
    assert "IMAP_USERNAME" in message
    assert "IMAP_PASSWORD" in message


def test_empty_username_is_rejected(clean_env) -> None:
    clean_env.setenv("IMAP_USERNAME", "")
    clean_env.setenv("IMAP_PASSWORD", "secret")

    with pytest.raises(ConfigError):
        get_settings()


def test_settings_reads_dotenv(clean_env, tmp_path) -> None:
    (tmp_path / ".env").write_text(
        "IMAP_USERNAME=dotenv-user\nIMAP_PASSWORD=dotenv-pass\nIMAP_MAILBOX=Archive-Me\n",
        encoding="utf-8",
    )

    settings = Settings()

    assert settings.imap_username == "dotenv-user"
    assert settings.imap_mailbox == "Archive-Me"
