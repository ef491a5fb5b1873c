"""
Subscriber list from OPML outline documents.
"""
import io
import logging
import xml.etree.ElementTree as ET
from typing import Iterable, List

from rss2html.html_tree import Element, HtmlNode, Text
from rss2html.models import Contributor

logger = logging.getLogger(__name__)


class OutlineError(Exception):
    """Outline document could not be parsed."""
    pass


def parse_contributors(document: bytes, source: str = "<outline>") -> List[Contributor]:
    """
    Extract contributors from an OPML document.

    Every <outline> element with an xmlUrl is a subscription. Outlines
    without xmlUrl are folders and are skipped. Subscriptions without a
    name (text, or else title) are skipped with a warning.

    Args:
        document: OPML document
        source: Where the document came from, for messages

    Returns:
        Contributors, in document order

    Raises:
        OutlineError: If the document is not well-formed XML
    """
    contributors = []
    try:
        for _, elem in ET.iterparse(io.BytesIO(document), events=("start",)):
            if elem.tag != "outline":
                continue
            url = elem.get("xmlUrl")
            if not url:
                logger.debug(f"Skipping outline without xmlUrl in {source}")
                continue
            name = elem.get("text") or elem.get("title")
            if not name:
                logger.warning(f"Skipping unnamed subscription {url} in {source}")
                continue
            contributors.append(Contributor(name=name, url=url))
    except ET.ParseError as e:
        raise OutlineError(f"Invalid outline document {source}: {e}")

    logger.info(f"Found {len(contributors)} subscribers in {source}")
    return contributors


def render(contributors: Iterable[Contributor]) -> List[HtmlNode]:
    """
    Render contributors as a list of links, sorted by name.

    Duplicates are kept.
    """
    ordered = sorted(contributors, key=lambda c: c.name)
    items: List[HtmlNode] = [
        Element("li", {}, [Element("a", {"href": c.url}, [Text(c.name)])])
        for c in ordered
    ]
    return [Element("ul", {}, items)]
