"""
Main Orchestration Script for rss2html.

Coordinates all components to:
1. Fetch feeds (or outline documents)
2. Merge and sort their items
3. Normalize items into posts
4. Render posts, headlines, email threads or subscribers as HTML
5. Write the HTML fragment to stdout or a file

Designed to run from a static site build (single execution, then exit).
"""
import sys
import logging
import argparse
from dataclasses import replace
from pathlib import Path
from typing import List, Optional, Sequence, TextIO

import requests

from rss2html import opml
from rss2html.aggregator import FeedErrors, InvalidInputError, aggregate, channel_from_document
from rss2html.config import ConfigError, ConfigLoader
from rss2html.html_tree import HtmlNode, serialize
from rss2html.models import Contributor, Post, RenderConfig, RenderMode
from rss2html.normalizer import normalize
from rss2html.renderer import EmailThreadRenderer, HeadlineRenderer, PostRenderer
from rss2html.rss_fetcher import RSSFetcher
from rss2html.toggle import IdGenerator, toggle_script

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)


class Rss2Html:
    """
    Main orchestration.

    Coordinates all components to fetch, merge, normalize and render.
    """

    def __init__(
        self,
        config: RenderConfig,
        fetcher: Optional[RSSFetcher] = None,
        ids: Optional[IdGenerator] = None,
    ):
        """
        Initialize renderer pipeline.

        Args:
            config: Render configuration
            fetcher: Optional RSSFetcher (for testing)
            ids: Optional id generator for toggles (one per run by default)
        """
        self.config = config
        self.fetcher = fetcher or RSSFetcher()
        self.ids = ids or IdGenerator()
        self.errors: FeedErrors = []

    def load_posts(self, urls: Sequence[str]) -> List[Post]:
        """
        Fetch, merge and normalize the posts of all feeds.

        A feed that cannot be fetched is logged and skipped, as are the
        items that could not be parsed.

        Raises:
            InvalidInputError: If there is no URL, or no feed could be fetched
        """
        if not urls:
            raise InvalidInputError("No feed URL given")

        channels = []
        for url in urls:
            try:
                document = self.fetcher.fetch(url)
            except requests.RequestException as e:
                logger.error(f"Failed to fetch feed '{url}': {e}")
                self.errors.append((url, str(e)))
                continue

            channel, errors = channel_from_document(document, url)
            for source, message in errors:
                logger.warning(f"RSS error (URL={source}): {message}")
            self.errors.extend(errors)
            channels.append(channel)

        if not channels:
            raise InvalidInputError("None of the feeds could be fetched")

        channel = aggregate(channels, limit=self.config.post_limit)
        return [normalize(item) for item in channel.items]

    def load_contributors(self, urls: Sequence[str]) -> List[Contributor]:
        """
        Fetch every outline document and collect its contributors.

        An outline document that cannot be fetched is logged and skipped.
        A malformed one raises OutlineError.

        Raises:
            InvalidInputError: If there is no URL, or no document could be fetched
        """
        if not urls:
            raise InvalidInputError("No outline URL given")

        contributors = []
        fetched = 0
        for url in urls:
            try:
                document = self.fetcher.fetch(url)
            except requests.RequestException as e:
                logger.error(f"Failed to fetch outline '{url}': {e}")
                self.errors.append((url, str(e)))
                continue

            fetched += 1
            contributors.extend(opml.parse_contributors(document, source=url))

        if not fetched:
            raise InvalidInputError("None of the outline documents could be fetched")
        return contributors

    def render(self) -> List[HtmlNode]:
        """
        Build the HTML for the configured mode.

        Returns:
            HTML nodes ready to be serialized
        """
        config = self.config
        mode = config.render_mode
        logger.info(f"Rendering {len(config.feeds)} sources as {mode.value}")

        if mode is RenderMode.SUBSCRIBERS:
            return opml.render(self.load_contributors(config.feeds))

        posts = self.load_posts(config.feeds)
        logger.info(f"Rendering {len(posts)} posts")

        if mode is RenderMode.POSTS:
            renderer = PostRenderer(
                self.ids,
                plain_text_authors=config.plain_text_authors,
                truncation_threshold=config.truncation_threshold,
                feed_icon_url=config.feed_icon_url,
            )
            return toggle_script() + renderer.render(posts)
        if mode is RenderMode.HEADLINES:
            return HeadlineRenderer(
                image_url=config.headline_image_url,
                page_url=config.headline_page_url,
            ).render(posts)
        if mode is RenderMode.EMAIL_THREADS:
            return EmailThreadRenderer(
                image_url=config.headline_image_url,
                archive_url=config.email_archive_url,
            ).render(posts)
        raise ValueError(f"Unknown render mode: {mode}")

    def run(self, out: TextIO) -> None:
        """Render and write the HTML fragment to out."""
        out.write(serialize(self.render()))


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rss2html",
        description="Render RSS feeds to HTML, as full posts or headlines.",
    )
    modes = parser.add_mutually_exclusive_group()
    modes.add_argument("--posts", dest="render_mode", action="store_const",
                       const=RenderMode.POSTS, help="RSS feed to HTML (default action)")
    modes.add_argument("--headlines", dest="render_mode", action="store_const",
                       const=RenderMode.HEADLINES, help="RSS feed to feed summary (in HTML)")
    modes.add_argument("--emails", dest="render_mode", action="store_const",
                       const=RenderMode.EMAIL_THREADS, help="RSS feed of email threads to HTML")
    modes.add_argument("--subscribers", dest="render_mode", action="store_const",
                       const=RenderMode.SUBSCRIBERS,
                       help="OPML feed to list of subscribers (in HTML)")
    parser.add_argument("-n", dest="post_limit", type=int, metavar="N",
                        help="limit the number of posts to N (default: all of them)")
    parser.add_argument("--img", dest="headline_image_url", metavar="URL",
                        help="images URL for each headline")
    parser.add_argument("--config", type=Path, metavar="PATH",
                        help="YAML configuration file")
    parser.add_argument("-o", "--output", metavar="PATH",
                        help="write the HTML to PATH instead of stdout")
    parser.add_argument("urls", nargs="*", metavar="URL")
    return parser


def config_from_args(args: argparse.Namespace) -> RenderConfig:
    """
    Combine the configuration file (if any) with command-line options.

    Command-line options win. A limit of 0 or less means all posts.
    """
    config = ConfigLoader(args.config).load() if args.config else RenderConfig()

    overrides = {}
    if args.urls:
        overrides["feeds"] = tuple(args.urls)
    if args.render_mode is not None:
        overrides["render_mode"] = args.render_mode
    if args.post_limit is not None:
        overrides["post_limit"] = args.post_limit if args.post_limit > 0 else None
    if args.headline_image_url is not None:
        overrides["headline_image_url"] = args.headline_image_url
    if args.output is not None:
        overrides["output"] = args.output

    return replace(config, **overrides)


def main(argv: Optional[Sequence[str]] = None):
    """
    Main entry point for command-line execution.

    Usage:
        python -m rss2html.main [--headlines|--emails|--subscribers] URL...
    """
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    try:
        config = config_from_args(args)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    logging.getLogger().setLevel(config.log_level.value.upper())

    if not config.feeds:
        parser.print_usage(sys.stderr)
        logger.error("At least one URL is required")
        sys.exit(1)

    try:
        app = Rss2Html(config)
        if config.output:
            with open(config.output, "w", encoding="utf-8") as out:
                app.run(out)
        else:
            app.run(sys.stdout)
    except Exception as e:
        logger.error(f"rss2html failed: {e}", exc_info=True)
        sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    main()
