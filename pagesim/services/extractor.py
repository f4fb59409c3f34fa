"""Path extraction: document tree -> :class:`~pagesim.models.path.PathSet`.

The tree is walked depth-first in pre-order, starting at the root node.
Every leaf yields the tuple of tag names from the root down to it, so a root
``<html>`` with ``<body><p>`` below gives ``("html", "body", "p")``.  Leaves
are numbered in the order they are reached, and leaves with the same tag
tuple are folded into one path group.
"""

import logging
from typing import Dict, Iterator, List, Optional, Tuple

from pagesim.models.path import PathSet
from pagesim.services.parser import Node, parse

logger = logging.getLogger(__name__)

LeafPath = Tuple[str, ...]


def extract_leaf_paths(root: Node) -> List[LeafPath]:
    """Return one tag path per leaf below (and including) *root*, in document order.

    The walk keeps its own stacks instead of recursing, so deeply nested
    markup cannot hit the interpreter's recursion limit.  ``tags`` holds the
    names from the root down to the current node; ``pending`` holds, per open
    node, an iterator over the children not visited yet.  A node's tag is
    pushed on entry and popped once its last child has been visited.
    """
    if root is None:
        raise ValueError("document root must not be None")

    leaf_paths: List[LeafPath] = []
    tags: List[str] = []
    pending: List[Iterator[Node]] = [iter((root,))]

    while pending:
        node: Optional[Node] = next(pending[-1], None)
        if node is None:
            pending.pop()
            # The bottom iterator only yields the root and has no tag of its own.
            if pending:
                tags.pop()
            continue

        tags.append(node.tag_name())
        children = node.children()
        if children:
            pending.append(iter(children))
        else:
            leaf_paths.append(tuple(tags))
            tags.pop()

    return leaf_paths


def group_leaf_paths(leaf_paths: List[LeafPath]) -> Dict[LeafPath, List[int]]:
    """Map each distinct leaf path to the ascending leaf indices where it occurs.

    Paths are compared as tuples, so tag names containing separators cannot
    collide.  Keys keep the order of first occurrence.
    """
    positions: Dict[LeafPath, List[int]] = {}
    for index, path in enumerate(leaf_paths):
        positions.setdefault(path, []).append(index)
    return positions


def build_path_set(root: Node, label: str) -> PathSet:
    """Extract the :class:`PathSet` of the tree under *root*, named *label*."""
    leaf_paths = extract_leaf_paths(root)
    path_set = PathSet.from_positions(label, group_leaf_paths(leaf_paths))
    logger.debug(
        "Extracted %d leaves into %d path groups for %r",
        len(leaf_paths),
        len(path_set.groups),
        label,
    )
    return path_set


def extract(root: Node, label: str = "") -> PathSet:
    """Alias of :func:`build_path_set` with an optional label."""
    return build_path_set(root, label)


def extract_html(raw_html: str, label: str) -> PathSet:
    """Parse *raw_html* and extract its :class:`PathSet`.

    Markup without any element is an empty document and gives an empty set.
    """
    root = parse(raw_html)
    if root is None:
        logger.debug("No elements in %r, returning an empty path set", label)
        return PathSet(label=label)
    return build_path_set(root, label)
