"""
Feed aggregation.

Builds Channel objects from parsed feeds and merges several of them into
a single, date-ordered channel.
"""
import logging
import warnings
from datetime import datetime, timezone
from typing import AbstractSet, List, Optional, Sequence, Tuple

import feedparser
from bs4 import BeautifulSoup, XMLParsedAsHTMLWarning

from rss2html.models import Channel, NameGuid, PermalinkGuid, RawItem

logger = logging.getLogger(__name__)

# (source, message) pairs for problems that did not stop processing
FeedErrors = List[Tuple[str, str]]


class InvalidInputError(ValueError):
    """Raised when the caller provides no channel at all."""
    pass


def _struct_to_datetime(value) -> Optional[datetime]:
    if not value:
        return None
    return datetime(*value[:6], tzinfo=timezone.utc)


def permalink_guids(document) -> frozenset:
    """
    Values of the <guid> elements that are permalinks.

    feedparser drops the isPermaLink attribute and only sets guidislink
    when the <guid> precedes any <link> of its item, so the attribute is
    read back from the document itself. A missing attribute means
    isPermaLink="true".

    Args:
        document: Feed document (bytes or text)

    Returns:
        GUID values marked as permalinks
    """
    with warnings.catch_warnings():
        warnings.filterwarnings("ignore", category=XMLParsedAsHTMLWarning)
        soup = BeautifulSoup(document, "html.parser")
    found = set()
    for guid in soup.find_all("guid"):
        if guid.get("ispermalink", "true").strip().lower() == "true":
            value = guid.get_text(strip=True)
            if value:
                found.add(value)
    return frozenset(found)


def item_from_entry(entry, permalinks: AbstractSet[str] = frozenset()) -> RawItem:
    """
    Convert a feedparser entry to a RawItem.

    Args:
        entry: feedparser entry
        permalinks: GUID values marked isPermaLink in the source document
                    (see permalink_guids)

    Returns:
        RawItem with the fields the entry provides
    """
    guid = None
    entry_id = entry.get("id")
    if entry_id:
        if entry_id in permalinks or entry.get("guidislink"):
            guid = PermalinkGuid(entry_id)
        else:
            guid = NameGuid(entry_id)

    # Atom entries may only carry <updated>
    pub_date = _struct_to_datetime(
        entry.get("published_parsed") or entry.get("updated_parsed")
    )

    author_detail = entry.get("author_detail") or {}

    return RawItem(
        title=entry.get("title"),
        link=entry.get("link") or None,
        guid=guid,
        pub_date=pub_date,
        author=author_detail.get("email") or None,
        description=entry.get("description"),
    )


def channel_from_feed(
    feed: feedparser.FeedParserDict,
    source: str,
    permalinks: AbstractSet[str] = frozenset(),
) -> Tuple[Channel, FeedErrors]:
    """
    Convert a feedparser result to a Channel.

    Problems are collected instead of raised so that the remaining items
    are still processed.

    Args:
        feed: Parsed feed
        source: Where the feed came from (URL), used in error reports
        permalinks: GUID values marked isPermaLink in the source document

    Returns:
        (channel, errors)
    """
    errors: FeedErrors = []

    if feed.get("bozo"):
        exc = feed.get("bozo_exception")
        errors.append((source, str(exc) if exc else "malformed feed"))

    meta = feed.get("feed", {})
    channel = Channel(
        title=meta.get("title", ""),
        link=meta.get("link", ""),
        description=meta.get("description", ""),
    )

    for index, entry in enumerate(feed.get("entries", [])):
        try:
            channel.items.append(item_from_entry(entry, permalinks))
        except (TypeError, ValueError) as e:
            errors.append((source, f"item {index}: {e}"))

    logger.debug(f"Feed {source}: {len(channel.items)} items, {len(errors)} errors")
    return channel, errors


def channel_from_document(document, source: str) -> Tuple[Channel, FeedErrors]:
    """
    Parse a fetched RSS/Atom document into a Channel.

    Args:
        document: Feed document (bytes or text)
        source: Where the feed came from (URL), used in error reports

    Returns:
        (channel, errors)
    """
    feed = feedparser.parse(document)
    return channel_from_feed(feed, source, permalink_guids(document))


def merge_channels(first: Channel, *others: Channel) -> Channel:
    """
    Merge channels into one.

    Items are concatenated in input order. Each metadata field takes the
    first non-empty value across the channels.
    """
    channels = (first,) + others

    def first_non_empty(attr: str) -> str:
        for channel in channels:
            value = getattr(channel, attr)
            if value:
                return value
        return ""

    items: List[RawItem] = []
    for channel in channels:
        items.extend(channel.items)

    return Channel(
        title=first_non_empty("title"),
        link=first_non_empty("link"),
        description=first_non_empty("description"),
        items=items,
    )


def sort_items_by_date(items: Sequence[RawItem]) -> List[RawItem]:
    """
    Most recent first; undated items last.

    The sort is stable: items with equal (or no) dates keep their
    relative order.
    """
    dated = [item for item in items if item.pub_date is not None]
    undated = [item for item in items if item.pub_date is None]
    dated.sort(key=lambda item: item.pub_date, reverse=True)
    return dated + undated


def aggregate(channels: Sequence[Channel], limit: Optional[int] = None) -> Channel:
    """
    Combine channels into a single date-ordered channel.

    Args:
        channels: At least one channel
        limit: Keep only the first `limit` items after sorting (None: all)

    Returns:
        Channel with sorted (and possibly truncated) items

    Raises:
        InvalidInputError: If channels is empty
    """
    if not channels:
        raise InvalidInputError("aggregate: empty channel list")

    if len(channels) == 1:
        channel = channels[0]
    else:
        channel = merge_channels(*channels)
        logger.info(f"Merged {len(channels)} channels into {len(channel.items)} items")

    items = sort_items_by_date(channel.items)
    if limit is not None:
        items = items[:limit]

    return Channel(
        title=channel.title,
        link=channel.link,
        description=channel.description,
        items=items,
    )
