"""
Data models for the rss2html renderer.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import FrozenSet, List, Optional, Tuple, Union


class LogLevel(Enum):
    """Valid log levels for renderer configuration."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class RenderMode(Enum):
    """What kind of HTML fragment to produce."""
    POSTS = "posts"
    HEADLINES = "headlines"
    EMAIL_THREADS = "email_threads"
    SUBSCRIBERS = "subscribers"


@dataclass(frozen=True)
class PermalinkGuid:
    """Item GUID marked as a permalink (isPermaLink="true")."""
    url: str


@dataclass(frozen=True)
class NameGuid:
    """Item GUID that is only an opaque name."""
    name: str


Guid = Union[PermalinkGuid, NameGuid]


@dataclass
class RawItem:
    """
    One feed entry as delivered by the feed parser.

    Every field may be missing.
    """
    title: Optional[str] = None
    link: Optional[str] = None
    guid: Optional[Guid] = None
    pub_date: Optional[datetime] = None
    author: Optional[str] = None  # Raw author contact, usually an email
    description: Optional[str] = None


@dataclass
class Channel:
    """A feed's metadata plus its items, in feed order."""
    title: str = ""
    link: str = ""
    description: str = ""
    items: List[RawItem] = field(default_factory=list)


@dataclass(frozen=True)
class Post:
    """
    Canonical, renderer-agnostic representation of one story.

    Built from a RawItem on every run. A post has no identity field:
    its anchor is recomputed from title and link (see rss2html.digest).
    """
    title: str
    link: Optional[str] = None
    date: Optional[datetime] = None
    author: str = ""
    email: str = ""  # "" if none
    description: str = ""


@dataclass(frozen=True)
class Contributor:
    """A subscriber taken from an outline document."""
    name: str
    url: str

    def __post_init__(self):
        """Validate required fields."""
        if not self.name:
            raise ValueError("Contributor.name cannot be empty")
        if not self.url:
            raise ValueError("Contributor.url cannot be empty")


DEFAULT_TRUNCATION_THRESHOLD = 1200
DEFAULT_HEADLINE_IMAGE_URL = "/img/news.png"
DEFAULT_HEADLINE_PAGE_URL = "/community/planet.html"
DEFAULT_FEED_ICON_URL = "/img/rss.png"
DEFAULT_EMAIL_ARCHIVE_URL = "https://sympa.inria.fr/sympa/arc/caml-list"


@dataclass(frozen=True)
class RenderConfig:
    """
    Full renderer configuration.

    Loaded from config.yaml and/or the command line.
    Immutable (frozen) to prevent accidental modification after loading.
    """

    feeds: Tuple[str, ...] = ()
    render_mode: RenderMode = RenderMode.POSTS
    plain_text_authors: FrozenSet[str] = frozenset()
    truncation_threshold: int = DEFAULT_TRUNCATION_THRESHOLD
    post_limit: Optional[int] = None  # None means all posts
    headline_image_url: str = DEFAULT_HEADLINE_IMAGE_URL
    headline_page_url: str = DEFAULT_HEADLINE_PAGE_URL
    feed_icon_url: str = DEFAULT_FEED_ICON_URL
    email_archive_url: str = DEFAULT_EMAIL_ARCHIVE_URL
    output: Optional[str] = None  # None means stdout
    log_level: LogLevel = LogLevel.INFO

    def __post_init__(self):
        """Validate configuration fields."""
        if self.truncation_threshold < 1:
            raise ValueError("truncation_threshold must be a positive integer")
        if self.post_limit is not None and self.post_limit < 1:
            raise ValueError("post_limit must be a positive integer or None")
