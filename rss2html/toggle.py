"""
"Read more" toggle widget.

A toggle is a pair of sibling blocks: a truncated view with a
"Read more..." control, and the full view (initially hidden) with a
"Hide" control. The switching itself is done client side by the
switchContent() script, which must be emitted once per document.
"""
import itertools
import threading
from typing import List, Sequence

from rss2html.html_tree import Element, HtmlNode, Text

TOGGLE_SCRIPT = """function switchContent(id1,id2) {
     // Get the DOM reference
     var contentId1 = document.getElementById(id1);
     var contentId2 = document.getElementById(id2);
     // Toggle
     contentId1.style.display = "none";
     contentId2.style.display = "block";
     }
"""


class IdGenerator:
    """
    Hands out element ids: "post1", "post2", ...

    Ids increase monotonically and are never reused by the same
    generator. Safe to share between threads.
    """

    def __init__(self, prefix: str = "post"):
        self.prefix = prefix
        self._counter = itertools.count(1)
        self._lock = threading.Lock()

    def new_id(self) -> str:
        with self._lock:
            n = next(self._counter)
        return f"{self.prefix}{n}"


def _button(id_from: str, id_to: str, text: str, anchor: str) -> Element:
    return Element("a", {
        "onclick": f"switchContent('{id_from}','{id_to}')",
        "class": "btn planet-toggle",
        "href": "#" + anchor,
    }, [Text(text)])


def toggle(
    expanded: Sequence[HtmlNode],
    full: Sequence[HtmlNode],
    anchor: str,
    ids: IdGenerator,
) -> List[HtmlNode]:
    """
    Build the two blocks letting a reader switch from one view to the other.

    Args:
        expanded: Content shown initially (e.g. a truncated description)
        full: Content shown after "Read more..."
        anchor: Fragment both controls link to, so the URL stays stable
        ids: Generator for the two block ids

    Returns:
        Two div elements
    """
    id1 = ids.new_id()
    id2 = ids.new_id()
    return [
        Element("div", {"id": id1},
                list(expanded) + [_button(id1, id2, "Read more...", anchor)]),
        Element("div", {"id": id2, "style": "display: none"},
                list(full) + [_button(id2, id1, "Hide", anchor)]),
    ]


def toggle_script() -> List[HtmlNode]:
    """Script implementing the toggle; to be included once per document."""
    return [Element("script", {"type": "text/javascript"}, [Text(TOGGLE_SCRIPT)])]
