"""
Feed item normalization.

Turns RawItem objects, whose fields are partially missing and used
inconsistently across feeds, into canonical Post objects.
"""
import re
import logging
from typing import Optional, Tuple
from urllib.parse import urlparse

from rss2html.models import NameGuid, PermalinkGuid, Post, RawItem

logger = logging.getLogger(__name__)

# Planet feeds often put the author name before the title: "Author: Title"
TITLE_SEPARATOR = re.compile(r" *: *")


def split_title(raw_title: str) -> Tuple[str, str]:
    """
    Split "Author: Title" on the first colon.

    Args:
        raw_title: Item title as found in the feed

    Returns:
        (author, title), author being "" when there is no colon or when
        either side of it is empty
    """
    parts = TITLE_SEPARATOR.split(raw_title, maxsplit=1)
    if len(parts) == 1:
        return "", raw_title
    author, title = parts
    if not author or not title:
        return "", raw_title
    return author, title


def parse_url(text: str) -> Optional[str]:
    """
    Interpret a string as an absolute HTTP(S) URL.

    Args:
        text: Candidate URL

    Returns:
        The URL if valid, None otherwise
    """
    try:
        result = urlparse(text.strip())
    except ValueError as e:
        logger.debug(f"Failed to parse URL '{text}': {e}")
        return None
    if result.scheme not in ("http", "https") or not result.netloc:
        return None
    return text.strip()


def resolve_link(item: RawItem) -> Optional[str]:
    """
    Pick the URL of the original post.

    Precedence:
    1. A permalink GUID
    2. The item link
    3. A name GUID, if it happens to be a URL (some feeds mark their GUID
       isPermaLink="false" while it is the only URL they give)
    """
    guid = item.guid
    if isinstance(guid, PermalinkGuid):
        return guid.url
    if item.link is not None:
        return item.link
    if isinstance(guid, NameGuid):
        url = parse_url(guid.name)
        if url is None:
            # Not a URL: fall back to the item link, which is absent here
            return item.link
        return url
    if guid is None:
        return None
    raise TypeError(f"Unknown GUID kind: {guid!r}")


def normalize(item: RawItem) -> Post:
    """
    Transform a feed item into a Post.

    Args:
        item: Raw feed item

    Returns:
        Post with author split out of the title and the link resolved
    """
    author, title = split_title(item.title or "")
    return Post(
        title=title,
        link=resolve_link(item),
        date=item.pub_date,
        author=author,
        email=item.author or "",
        description=item.description or "",
    )
