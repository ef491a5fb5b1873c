"""
HTML node trees.

Descriptions are parsed into a small tree of Element/Text nodes, measured
and cut on whole-node boundaries, and written back out as HTML text.
Trees are never validated or repaired: malformed markup goes through as
the parser understood it.
"""
import html
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Union

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PreformattedString, Tag

logger = logging.getLogger(__name__)

# Elements written without a closing tag
VOID_ELEMENTS = frozenset([
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "source", "track", "wbr",
])

# Elements whose text content is written verbatim
RAW_TEXT_ELEMENTS = frozenset(["script", "style"])


@dataclass
class Text:
    """A run of character data."""
    content: str


@dataclass
class Element:
    """An element with ordered attributes and child nodes."""
    tag: str
    attrs: Dict[str, str] = field(default_factory=dict)
    children: List["HtmlNode"] = field(default_factory=list)


HtmlNode = Union[Element, Text]


def node_length(node: HtmlNode) -> int:
    """Number of text characters under a single node."""
    if isinstance(node, Text):
        return len(node.content)
    if isinstance(node, Element):
        return text_length(node.children)
    raise TypeError(f"Not an HTML node: {node!r}")


def text_length(nodes: Sequence[HtmlNode]) -> int:
    """
    Length of the text of a node sequence.

    Only Text contents count; tags and attributes never do.
    """
    return sum(node_length(node) for node in nodes)


def prefix(nodes: Sequence[HtmlNode], budget: int) -> List[HtmlNode]:
    """
    Keep the leading top-level nodes whose text fits in the budget.

    A node is kept only while its length is strictly below what remains
    of the budget. The first node that does not fit ends the prefix, and
    it is dropped whole: the scan never descends into it to keep part of
    its subtree, even when that node alone exceeds the whole budget.

    Args:
        nodes: Top-level sibling nodes
        budget: Maximum text length (exclusive)

    Returns:
        Leading nodes whose total text length is below budget
    """
    kept = []
    remaining = budget
    for node in nodes:
        length = node_length(node)
        if length >= remaining:
            break
        kept.append(node)
        remaining -= length
    return kept


def parse_fragment(markup: str) -> List[HtmlNode]:
    """
    Parse an HTML fragment into nodes.

    Uses BeautifulSoup's lenient html.parser. Comments, doctypes and
    processing instructions are dropped.

    Args:
        markup: HTML text, possibly malformed

    Returns:
        Top-level nodes of the fragment
    """
    soup = BeautifulSoup(markup, "html.parser", multi_valued_attributes=None)
    return _convert_children(soup)


def _convert_children(tag: Tag) -> List[HtmlNode]:
    nodes = []
    for child in tag.children:
        if isinstance(child, PreformattedString):
            continue
        if isinstance(child, NavigableString):
            nodes.append(Text(str(child)))
        elif isinstance(child, Tag):
            attrs = {name: _attr_value(value) for name, value in child.attrs.items()}
            nodes.append(Element(child.name, attrs, _convert_children(child)))
        else:
            raise TypeError(f"Unexpected parse node: {child!r}")
    return nodes


def _attr_value(value) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return " ".join(value)
    return str(value)


def serialize(nodes: Sequence[HtmlNode]) -> str:
    """Write nodes back out as HTML text."""
    parts: List[str] = []
    for node in nodes:
        _write(node, parts, raw=False)
    return "".join(parts)


def _write(node: HtmlNode, parts: List[str], raw: bool) -> None:
    if isinstance(node, Text):
        parts.append(node.content if raw else html.escape(node.content, quote=False))
    elif isinstance(node, Element):
        parts.append(f"<{node.tag}")
        for name, value in node.attrs.items():
            parts.append(f' {name}="{html.escape(value, quote=True)}"')
        parts.append(">")
        if node.tag in VOID_ELEMENTS:
            if node.children:
                logger.debug(f"Dropping children of void element <{node.tag}>")
            return
        child_raw = node.tag in RAW_TEXT_ELEMENTS
        for child in node.children:
            _write(child, parts, raw=child_raw)
        parts.append(f"</{node.tag}>")
    else:
        raise TypeError(f"Not an HTML node: {node!r}")
