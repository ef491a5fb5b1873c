"""
Configuration Loader for rss2html.

Loads and validates configuration from YAML files.
"""
import os
import logging
from pathlib import Path
from typing import Any, Dict, Optional
import yaml
from urllib.parse import urlparse

from rss2html.models import (
    DEFAULT_EMAIL_ARCHIVE_URL,
    DEFAULT_FEED_ICON_URL,
    DEFAULT_HEADLINE_IMAGE_URL,
    DEFAULT_HEADLINE_PAGE_URL,
    DEFAULT_TRUNCATION_THRESHOLD,
    LogLevel,
    RenderConfig,
    RenderMode,
)

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Configuration error."""
    pass


class ConfigLoader:
    """
    Loads and validates renderer configuration.

    Supports:
    - Loading from YAML file
    - Environment variable override of the log level
    - Validation of feed URLs and numeric options
    """

    def __init__(self, config_path: Path):
        """
        Initialize config loader.

        Args:
            config_path: Path to config.yaml file
        """
        self.config_path = Path(config_path)

    def load(self) -> RenderConfig:
        """
        Load and validate configuration.

        Returns:
            RenderConfig object

        Raises:
            ConfigError: If config is invalid or missing
        """
        if not self.config_path.exists():
            raise ConfigError(f"Configuration file not found: {self.config_path}")

        try:
            with open(self.config_path, "r") as f:
                config_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse YAML: {e}")

        if not config_data:
            raise ConfigError("Configuration file is empty")

        if not isinstance(config_data, dict):
            raise ConfigError("Configuration must be a mapping")

        try:
            return self._parse_config(config_data)
        except ConfigError:
            raise
        except Exception as e:
            raise ConfigError(f"Invalid configuration: {e}")

    def _parse_config(self, data: Dict[str, Any]) -> RenderConfig:
        """
        Parse and validate configuration data.

        Args:
            data: Parsed YAML data

        Returns:
            RenderConfig object

        Raises:
            ConfigError: If validation fails
        """
        feeds = data.get("feeds") or []
        if not isinstance(feeds, list):
            raise ConfigError("feeds must be a list of URLs")
        for url in feeds:
            if not self._is_valid_url(url):
                raise ConfigError(f"Invalid feed URL: {url}")

        mode_str = str(data.get("render_mode", RenderMode.POSTS.value)).lower()
        try:
            render_mode = RenderMode(mode_str)
        except ValueError:
            valid_modes = [mode.value for mode in RenderMode]
            raise ConfigError(f"Invalid render_mode '{mode_str}'. Valid values: {valid_modes}")

        log_level_str = os.getenv("LOG_LEVEL", data.get("log_level", "info")).lower()
        try:
            log_level = LogLevel(log_level_str)
        except ValueError:
            valid_levels = [level.value for level in LogLevel]
            raise ConfigError(f"Invalid log_level '{log_level_str}'. Valid values: {valid_levels}")

        plain_text_authors = data.get("plain_text_authors") or []
        if not isinstance(plain_text_authors, list):
            raise ConfigError("plain_text_authors must be a list of names")

        threshold = data.get("truncation_threshold", DEFAULT_TRUNCATION_THRESHOLD)
        if type(threshold) is not int or threshold < 1:
            raise ConfigError(f"truncation_threshold must be a positive integer, got: {threshold}")

        post_limit = self._parse_post_limit(data.get("post_limit"))

        logger.info(
            f"Loaded configuration with {len(feeds)} feeds, mode '{render_mode.value}'"
        )

        return RenderConfig(
            feeds=tuple(feeds),
            render_mode=render_mode,
            plain_text_authors=frozenset(str(a) for a in plain_text_authors),
            truncation_threshold=threshold,
            post_limit=post_limit,
            headline_image_url=data.get("headline_image_url", DEFAULT_HEADLINE_IMAGE_URL),
            headline_page_url=data.get("headline_page_url", DEFAULT_HEADLINE_PAGE_URL),
            feed_icon_url=data.get("feed_icon_url", DEFAULT_FEED_ICON_URL),
            email_archive_url=data.get("email_archive_url", DEFAULT_EMAIL_ARCHIVE_URL),
            output=data.get("output"),
            log_level=log_level,
        )

    def _parse_post_limit(self, value: Any) -> Optional[int]:
        if value is None:
            return None
        if type(value) is not int or value < 1:
            raise ConfigError(f"post_limit must be a positive integer, got: {value}")
        return value

    def _is_valid_url(self, url: str) -> bool:
        """
        Validate URL format.

        Args:
            url: URL to validate

        Returns:
            True if valid HTTP/HTTPS URL, False otherwise
        """
        if not isinstance(url, str):
            return False
        try:
            result = urlparse(url)
            if result.scheme not in ("http", "https"):
                logger.warning(f"URL has invalid scheme '{result.scheme}': {url}")
                return False
            return bool(result.netloc)
        except ValueError as e:
            logger.warning(f"Failed to parse URL '{url}': {e}")
            return False
