from concerndesk.config import Settings, get_settings


def test_defaults():
    settings = get_settings()
    assert settings.poller.owner_interval_seconds == 10.0
    assert settings.poller.unread_interval_seconds == 60.0
    assert settings.retry.max_attempts == 3
    assert settings.retry.base_delay_seconds == 1.0


def test_env_override(monkeypatch):
    monkeypatch.setenv("CONCERNDESK_LOG_LEVEL", "DEBUG")
    assert Settings().log_level == "DEBUG"
