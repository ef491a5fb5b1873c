"""
Feed fetcher with retry logic and error handling.
"""
import time
import logging
import requests
from typing import Optional

logger = logging.getLogger(__name__)


class RSSFetcher:
    """
    Fetches feeds and outline documents.

    Features:
    - Configurable timeout and retry count
    - Exponential backoff on failures
    - Custom User-Agent header
    """

    DEFAULT_USER_AGENT = "rss2html/1.0 (static site feed renderer)"

    def __init__(self, timeout: int = 30, max_retries: int = 3, user_agent: Optional[str] = None):
        """
        Initialize fetcher.

        Args:
            timeout: Request timeout in seconds
            max_retries: Maximum number of attempts
            user_agent: Custom User-Agent string
        """
        self.timeout = timeout
        self.max_retries = max_retries
        self.user_agent = user_agent or self.DEFAULT_USER_AGENT

    def fetch(self, url: str) -> bytes:
        """
        Download a document.

        Args:
            url: Document URL

        Returns:
            Response body

        Raises:
            ValueError: If URL is empty
            requests.RequestException: If all attempts fail
        """
        if not url:
            raise ValueError("URL cannot be empty")

        last_error = None

        for attempt in range(self.max_retries):
            try:
                logger.info(f"Fetching {url} (attempt {attempt + 1}/{self.max_retries})")

                headers = {"User-Agent": self.user_agent}
                response = requests.get(url, timeout=self.timeout, headers=headers)
                response.raise_for_status()
                return response.content

            except requests.RequestException as e:
                last_error = e
                logger.warning(f"Fetch attempt {attempt + 1} failed: {e}")

                if attempt < self.max_retries - 1:
                    # Exponential backoff
                    sleep_time = 2 ** attempt
                    logger.info(f"Retrying in {sleep_time} seconds...")
                    time.sleep(sleep_time)

        logger.error(f"Failed to fetch {url} after {self.max_retries} attempts")
        raise last_error
