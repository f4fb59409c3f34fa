"""HTML parsing into the minimal node tree the path extractor walks.

The extractor only needs two things from a node: its tag name and its ordered
element children.  :class:`Node` spells that out so any tree (a BeautifulSoup
document, a test fixture, a tree built from another parser) can be fed to
:func:`~pagesim.services.extractor.build_path_set`.

Tag names are used exactly as the parser reports them.  lxml already
lower-cases HTML tag names; nothing else (attributes, classes, ids) is folded
into the name.
"""

from typing import Optional, Protocol, Sequence, Tuple

from bs4 import BeautifulSoup, Tag

# Parser backend handed to BeautifulSoup.
PARSER = "lxml"


class Node(Protocol):
    def tag_name(self) -> str: ...

    def children(self) -> Sequence["Node"]: ...


class SoupNode:
    """:class:`Node` view over a BeautifulSoup :class:`~bs4.Tag`.

    Only element children count: text, comments, and the doctype are not
    nodes, so an element whose content is only text is a leaf.
    """

    __slots__ = ("_tag",)

    def __init__(self, tag: Tag) -> None:
        self._tag = tag

    def tag_name(self) -> str:
        return self._tag.name

    def children(self) -> Tuple["SoupNode", ...]:
        return tuple(SoupNode(child) for child in self._tag.children if isinstance(child, Tag))

    def __repr__(self) -> str:
        return f"SoupNode({self._tag.name!r})"


def parse(raw_html: str) -> Optional[SoupNode]:
    """Parse *raw_html* and return the root element of the document.

    lxml wraps any markup in a single ``<html>`` element, which becomes the
    root, so ``<p>x</p>`` yields paths starting ``("html", "body", "p")``.
    The BeautifulSoup document object is not an element and stays out of the
    paths; only if the markup yields several top-level elements is it kept as
    their common root.  Markup with no elements at all returns None.
    """
    soup = BeautifulSoup(raw_html, PARSER)
    elements = [child for child in soup.children if isinstance(child, Tag)]
    if not elements:
        return None
    if len(elements) == 1:
        return SoupNode(elements[0])
    return SoupNode(soup)
