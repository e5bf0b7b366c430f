"""
Tests for configuration loading.
"""

from pathlib import Path

from techwiki.config import Settings, get_settings, load_config


class TestConfigFile:
    """Tests for config.yaml loading."""

    def test_loads_config_from_yaml(self):
        """Test that the project config has every section."""
        config = load_config()

        assert config["database"]["path"] == "data/techwiki.db"
        assert config["search"]["max_results"] == 25
        assert config["graph"]["max_cross_edges"] == 1500
        assert config["graph"]["cache_ms"] == 300000

    def test_yaml_values_flow_into_settings(self, monkeypatch):
        """Test that settings are built from config.yaml without an override."""
        monkeypatch.delenv("TECHWIKI_DATABASE_PATH", raising=False)

        settings = get_settings()

        assert Path(settings.database_path).parts[-2:] == ("data", "techwiki.db")
        assert Path(settings.database_path).is_absolute()
        assert settings.search_max_results == 25
        assert settings.snippet_tokens == 18
        assert settings.graph_max_cross_edges == 1500
        assert settings.graph_cache_ms == 300000
        assert settings.log_level == "INFO"


class TestEnvironmentOverrides:
    """Tests for TECHWIKI_* environment variables."""

    def test_database_path_override(self, monkeypatch, tmp_path):
        """Test that TECHWIKI_DATABASE_PATH wins over config.yaml."""
        override = str(tmp_path / "override.db")
        monkeypatch.setenv("TECHWIKI_DATABASE_PATH", override)

        assert get_settings().database_path == override

    def test_prefixed_fields(self, monkeypatch):
        """Test that any field can be set through its prefixed name."""
        monkeypatch.setenv("TECHWIKI_GRAPH_MAX_CROSS_EDGES", "10")
        monkeypatch.setenv("TECHWIKI_GRAPH_CACHE_MS", "0")

        settings = Settings()

        assert settings.graph_max_cross_edges == 10
        assert settings.graph_cache_ms == 0

    def test_defaults(self, monkeypatch):
        """Test built-in defaults."""
        monkeypatch.delenv("TECHWIKI_SEARCH_MAX_RESULTS", raising=False)

        settings = Settings()

        assert settings.search_max_results == 25
        assert settings.api_title == "TechWiki API"
