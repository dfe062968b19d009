"""Tests for configuration settings."""
import pytest

from bigbean.config import SchedulerSettings, Settings, settings


def test_settings_defaults():
    """Test default scheduling values."""
    defaults = SchedulerSettings()
    assert defaults.base_word_min_degree == 4
    assert defaults.max_cards_per_anchor == 3
    assert defaults.min_partner_degree == 2
    assert defaults.max_bridge_length == 10
    assert defaults.history_limit == 500


def test_global_settings_are_valid():
    """Test that the module-level settings passed validation."""
    settings.validate()
    assert settings.database.url.startswith("sqlite")


def test_seed_from_env(monkeypatch):
    """Test that the scheduler seed is read when the settings are created."""
    monkeypatch.setenv("SCHEDULER_SEED", "42")
    assert SchedulerSettings().seed == 42

    monkeypatch.delenv("SCHEDULER_SEED")
    assert SchedulerSettings().seed is None


@pytest.mark.parametrize(
    "field, value",
    [
        ("base_word_min_degree", 0),
        ("max_cards_per_anchor", 0),
        ("min_partner_degree", -1),
        ("max_bridge_length", 0),
        ("history_limit", 0),
    ],
)
def test_invalid_scheduler_settings(field, value):
    """Test that nonsensical scheduling values are rejected."""
    invalid = Settings(scheduler=SchedulerSettings(**{field: value}))
    with pytest.raises(ValueError):
        invalid.validate()


def test_missing_database_url():
    """Test that an empty database URL is rejected."""
    invalid = Settings()
    invalid.database.url = ""
    with pytest.raises(ValueError):
        invalid.validate()
