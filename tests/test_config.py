"""Tests for SrsCleanupConfig."""

import pytest

import srs_cleanup
from srs_cleanup import SrsCleanupConfig


@pytest.fixture(autouse=True)
def no_dotenv(monkeypatch):
    monkeypatch.setattr(srs_cleanup, 'load_dotenv', lambda: None)
    for name in ('CALENDAR_ID', 'TIMEZONE', 'GOOGLE_TOKEN_FILE'):
        monkeypatch.delenv(name, raising=False)


def test_config_defaults():
    config = SrsCleanupConfig()
    assert config.calendar_id == 'primary'
    assert config.timezone == 'UTC'
    assert config.token_file == 'token.json'


def test_config_from_env(monkeypatch):
    monkeypatch.setenv('CALENDAR_ID', 'srs@group.calendar.google.com')
    monkeypatch.setenv('TIMEZONE', 'Europe/Berlin')
    monkeypatch.setenv('GOOGLE_TOKEN_FILE', '/secrets/token.json')

    config = SrsCleanupConfig.from_env()
    assert config.calendar_id == 'srs@group.calendar.google.com'
    assert config.timezone == 'Europe/Berlin'
    assert config.token_file == '/secrets/token.json'
    assert config.tz.zone == 'Europe/Berlin'


def test_config_from_env_defaults():
    assert SrsCleanupConfig.from_env() == SrsCleanupConfig()


def test_config_from_env_overrides_win_before_validation(monkeypatch):
    monkeypatch.setenv('TIMEZONE', 'Bad/Zone')

    config = SrsCleanupConfig.from_env(timezone='Asia/Tokyo', calendar_id=None)
    assert config.timezone == 'Asia/Tokyo'
    assert config.calendar_id == 'primary'


def test_config_invalid_timezone():
    with pytest.raises(ValueError, match='Unknown timezone: Mars/Olympus'):
        SrsCleanupConfig(timezone='Mars/Olympus')


def test_config_empty_calendar_id():
    with pytest.raises(ValueError, match='calendar_id must not be empty'):
        SrsCleanupConfig(calendar_id='')
