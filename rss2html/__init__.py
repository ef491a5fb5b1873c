"""Render RSS/Atom feeds and OPML subscription lists as HTML fragments."""

__version__ = "1.0.0"
