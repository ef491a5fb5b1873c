"""
Tests for Configuration Loader.

Tests loading and validating renderer configuration.
"""
import pytest
from pathlib import Path

from rss2html.config import ConfigLoader, ConfigError
from rss2html.models import LogLevel, RenderConfig, RenderMode


@pytest.fixture
def valid_config_yaml():
    """Valid configuration YAML."""
    return """
feeds:
  - "https://planet.example.org/rss.xml"
  - "https://blog.example.org/feed.xml"

render_mode: headlines

plain_text_authors:
  - "Xavier Leroy"

truncation_threshold: 800
post_limit: 10
headline_image_url: "/img/custom.png"
email_archive_url: "https://lists.example.org/arc/list"

log_level: "debug"
"""


@pytest.fixture
def write_config(tmp_path):
    """Write YAML content to a temporary config file."""
    def _write(content: str) -> Path:
        path = tmp_path / "config.yaml"
        path.write_text(content)
        return path
    return _write


@pytest.fixture(autouse=True)
def clear_log_level_env(monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)


class TestConfigLoader:
    """Test suite for ConfigLoader."""

    def test_load_valid_config(self, write_config, valid_config_yaml):
        """Test loading valid configuration."""
        config = ConfigLoader(write_config(valid_config_yaml)).load()

        assert isinstance(config, RenderConfig)
        assert config.feeds == (
            "https://planet.example.org/rss.xml",
            "https://blog.example.org/feed.xml",
        )
        assert config.render_mode == RenderMode.HEADLINES
        assert config.plain_text_authors == frozenset(["Xavier Leroy"])
        assert config.truncation_threshold == 800
        assert config.post_limit == 10
        assert config.headline_image_url == "/img/custom.png"
        assert config.email_archive_url == "https://lists.example.org/arc/list"
        assert config.log_level == LogLevel.DEBUG

    def test_defaults(self, write_config):
        """Unspecified options take their defaults."""
        config = ConfigLoader(write_config('feeds: ["https://a.example.org/rss"]')).load()

        assert config.render_mode == RenderMode.POSTS
        assert config.plain_text_authors == frozenset()
        assert config.truncation_threshold == 1200
        assert config.post_limit is None
        assert config.headline_page_url == "/community/planet.html"
        assert config.log_level == LogLevel.INFO

    def test_missing_config_file_raises_error(self):
        """Test that missing config file raises error."""
        with pytest.raises(ConfigError, match="not found"):
            ConfigLoader(Path("nonexistent.yaml")).load()

    def test_invalid_yaml_raises_error(self, write_config):
        """Test that invalid YAML raises error."""
        with pytest.raises(ConfigError, match="Failed to parse"):
            ConfigLoader(write_config("invalid: yaml: content: [[[")).load()

    def test_empty_file_raises_error(self, write_config):
        with pytest.raises(ConfigError, match="empty"):
            ConfigLoader(write_config("")).load()

    def test_invalid_feed_url(self, write_config):
        with pytest.raises(ConfigError, match="Invalid feed URL"):
            ConfigLoader(write_config('feeds: ["ftp://example.org/rss"]')).load()

    def test_invalid_render_mode(self, write_config):
        with pytest.raises(ConfigError, match="render_mode"):
            ConfigLoader(write_config("render_mode: everything")).load()

    def test_invalid_log_level(self, write_config):
        with pytest.raises(ConfigError, match="log_level"):
            ConfigLoader(write_config("log_level: loud")).load()

    def test_log_level_env_override(self, write_config, monkeypatch):
        """LOG_LEVEL takes precedence over the file."""
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        config = ConfigLoader(write_config("log_level: debug")).load()
        assert config.log_level == LogLevel.ERROR

    @pytest.mark.parametrize("value", [0, -5, "ten", 1.5])
    def test_invalid_threshold(self, write_config, value):
        with pytest.raises(ConfigError, match="truncation_threshold"):
            ConfigLoader(write_config(f"truncation_threshold: {value}")).load()

    @pytest.mark.parametrize("value", [0, -1, "all"])
    def test_invalid_post_limit(self, write_config, value):
        with pytest.raises(ConfigError, match="post_limit"):
            ConfigLoader(write_config(f"post_limit: {value}")).load()

    def test_plain_text_authors_must_be_list(self, write_config):
        with pytest.raises(ConfigError, match="plain_text_authors"):
            ConfigLoader(write_config("plain_text_authors: Jane")).load()
