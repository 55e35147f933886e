"""Unit tests for configuration."""

from config import Settings


def test_default_settings(monkeypatch):
    """Test that default settings are loaded correctly."""
    monkeypatch.delenv("DATABASE_URL", raising=False)
    settings = Settings(_env_file=None)

    assert settings.app_name == "CigarConsensus"
    assert settings.debug is False
    assert settings.database_url == "sqlite:///./cigar_consensus.db"
    assert settings.rating_min == 0.0
    assert settings.rating_max == 100.0
    assert settings.top_n_default == 5
    assert settings.top_n_flavor_profile == 10


def test_custom_settings(monkeypatch):
    """Test that custom settings can be loaded from environment."""
    monkeypatch.setenv("APP_NAME", "TestApp")
    monkeypatch.setenv("DEBUG", "True")
    monkeypatch.setenv("TOP_N_FLAVOR_PROFILE", "15")
    monkeypatch.setenv("RATING_MAX", "5")

    settings = Settings(_env_file=None)

    assert settings.app_name == "TestApp"
    assert settings.debug is True
    assert settings.top_n_flavor_profile == 15
    assert settings.rating_max == 5.0
