"""
Stable identifiers for posts.

The digest is used as the permalink fragment of a post, so external pages
link to it: it must only depend on the post's title and link.
"""
import hashlib

from rss2html.models import Post


def digest_post(post: Post) -> str:
    """
    Compute the anchor of a post.

    Args:
        post: Post to identify

    Returns:
        Hex MD5 of the title, followed by the link when there is one
    """
    if post.link is None:
        data = post.title
    else:
        data = post.title + post.link
    return hashlib.md5(data.encode("utf-8")).hexdigest()
