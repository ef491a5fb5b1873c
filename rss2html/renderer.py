"""
HTML renderers for posts.

Three presentations of the same Post sequence:
- PostRenderer: full posts, long descriptions folded behind a toggle
- HeadlineRenderer: titles and dates linking to the full post page
- EmailThreadRenderer: headlines for mailing-list threads, linking to
  the list archive
"""
import re
import logging
from dataclasses import replace
from datetime import datetime
from typing import Iterable, List, Optional

from rss2html.digest import digest_post
from rss2html.html_tree import Element, HtmlNode, Text, parse_fragment, prefix, text_length
from rss2html.models import (
    DEFAULT_EMAIL_ARCHIVE_URL,
    DEFAULT_FEED_ICON_URL,
    DEFAULT_HEADLINE_IMAGE_URL,
    DEFAULT_HEADLINE_PAGE_URL,
    DEFAULT_TRUNCATION_THRESHOLD,
    Post,
)
from rss2html.toggle import IdGenerator, toggle

logger = logging.getLogger(__name__)

SEPARATOR = " — "

# "Re: Re: [caml-list] Subject" -> "Subject"
MAILING_LIST_PREFIX = re.compile(r"^(Re: *)*\[[a-zA-Z-]+\] *", re.IGNORECASE)


def long_date(date: datetime) -> str:
    """Format as "October 5, 2024"."""
    return f"{date:%B} {date.day}, {date.year}"


def short_date(date: datetime) -> str:
    """Format as "Oct 5, 2024"."""
    return f"{date:%b} {date.day}, {date.year}"


class PostRenderer:
    """
    Renders posts in full.

    Each post gets a named anchor (its digest), a title line with author
    and date, and its description. Descriptions whose text reaches the
    truncation threshold are cut on element boundaries and the rest is
    reachable through a "Read more..." toggle. The toggle script itself
    is not emitted here (see rss2html.toggle.toggle_script).
    """

    def __init__(
        self,
        ids: IdGenerator,
        plain_text_authors: Iterable[str] = (),
        truncation_threshold: int = DEFAULT_TRUNCATION_THRESHOLD,
        feed_icon_url: str = DEFAULT_FEED_ICON_URL,
    ):
        """
        Initialize post renderer.

        Args:
            ids: Id generator for toggle blocks (one per render pass)
            plain_text_authors: Authors whose descriptions are plain text,
                                their formatting must be kept as is
            truncation_threshold: Description length above which a toggle is used
            feed_icon_url: Image shown next to linked titles
        """
        self.ids = ids
        self.plain_text_authors = frozenset(plain_text_authors)
        self.truncation_threshold = truncation_threshold
        self.feed_icon_url = feed_icon_url

    def render(self, posts: Iterable[Post]) -> List[HtmlNode]:
        """Render all posts inside a single div."""
        children: List[HtmlNode] = []
        for post in posts:
            children.extend(self.render_post(post))
        return [Element("div", {}, children)]

    def render_post(self, post: Post) -> List[HtmlNode]:
        """
        Render one post.

        Args:
            post: Post to render

        Returns:
            Nodes: anchor, then a section holding title and description
        """
        anchor = digest_post(post)
        heading = Element(
            "h1", {"class": "ruled planet"},
            self._title(post) + [self._additional_info(post)],
        )
        return [
            Text("\n"),
            Element("a", {"name": anchor}),
            Element("section", {"class": " condensed", "style": "clear: both"},
                    [heading] + self._description(post, anchor)),
            Text("\n"),
        ]

    def _title(self, post: Post) -> List[HtmlNode]:
        if post.link is None:
            return [Text(post.title)]
        return [
            Element("a", {"href": post.link, "alt": "RSS", "target": "_blank",
                          "class": "rss"},
                    [Element("img", {"src": self.feed_icon_url})]),
            Element("a", {"href": post.link, "target": "_blank",
                          "title": "Go to the original post"},
                    [Text(post.title)]),
        ]

    def _author(self, post: Post) -> HtmlNode:
        if post.email == "":
            return Text(post.author)
        return Element("a", {"href": "mailto:" + post.email}, [Text(post.author)])

    def _additional_info(self, post: Post) -> Element:
        info: List[HtmlNode]
        if post.date is None:
            if post.author == "":
                info = []
            else:
                info = [Text(SEPARATOR), self._author(post)]
        elif post.author == "":
            info = [Text(SEPARATOR), Text(long_date(post.date))]
        else:
            info = [Text(SEPARATOR), self._author(post), Text(", "),
                    Text(short_date(post.date))]
        return Element("span", {"style": "font-size: 65%; font-weight:normal"}, info)

    def _description(self, post: Post, anchor: str) -> List[HtmlNode]:
        if post.author in self.plain_text_authors:
            return [Element("pre", {"class": "rss-text"}, [Text(post.description)])]

        desc = parse_fragment(post.description)
        if text_length(desc) < self.truncation_threshold:
            return desc

        logger.debug(f"Folding long description of '{post.title}'")
        return toggle(prefix(desc, self.truncation_threshold), desc, anchor, self.ids)


class HeadlineRenderer:
    """
    Renders posts as a list of headlines.

    Only titles (and dates) are shown, linked to the page holding the
    full story.
    """

    def __init__(
        self,
        image_url: str = DEFAULT_HEADLINE_IMAGE_URL,
        page_url: str = DEFAULT_HEADLINE_PAGE_URL,
    ):
        """
        Initialize headline renderer.

        Args:
            image_url: Icon shown with each headline
            page_url: Page with the full posts; headlines link to
                      page_url#<post digest>
        """
        self.image_url = image_url
        self.page_url = page_url

    def render(self, posts: Iterable[Post]) -> List[HtmlNode]:
        """Render all headlines inside a news-feed list."""
        children: List[HtmlNode] = []
        for post in posts:
            children.extend(self.render_headline(post))
        return [Element("ul", {"class": "news-feed"}, children)]

    def render_headline(self, post: Post, link: Optional[str] = None) -> List[HtmlNode]:
        """
        Render one headline.

        Args:
            post: Post to render
            link: Target of the headline; defaults to the post on the
                  full post page

        Returns:
            A list item, followed by a newline
        """
        if link is None:
            link = f"{self.page_url}#{digest_post(post)}"

        body: List[HtmlNode] = [
            Element("h1", {}, [Element("a", {"href": link}, [Text(post.title)])]),
        ]
        if post.date is not None:
            body.append(Element("p", {}, [Text(long_date(post.date))]))
        body.append(Element("a", {"href": link}, [Element("img", {"src": self.image_url})]))

        return [Element("li", {}, [Element("article", {}, body)]), Text("\n")]


class EmailThreadRenderer(HeadlineRenderer):
    """
    Headlines for a mailing-list feed.

    The posts' own links are ignored: headlines point to the monthly
    thread index of the list archive instead, and the subject is cleaned
    of "Re:" and list tags.
    """

    def __init__(
        self,
        image_url: str = DEFAULT_HEADLINE_IMAGE_URL,
        archive_url: str = DEFAULT_EMAIL_ARCHIVE_URL,
    ):
        super().__init__(image_url=image_url)
        self.archive_url = archive_url.rstrip("/")

    def archive_link(self, post: Post) -> str:
        """Thread index of the month the post was sent."""
        if post.date is None:
            return self.archive_url + "/"
        return f"{self.archive_url}/{post.date:%Y-%m}/thrd4.html"

    def render(self, posts: Iterable[Post]) -> List[HtmlNode]:
        children: List[HtmlNode] = []
        for post in posts:
            cleaned = replace(post, title=clean_subject(post.title))
            children.extend(self.render_headline(cleaned, link=self.archive_link(post)))
        return [Element("ul", {"class": "news-feed"}, children)]


def clean_subject(title: str) -> str:
    """Strip leading "Re:" tokens and the [list-name] tag from a subject."""
    return MAILING_LIST_PREFIX.sub("", title, count=1)
