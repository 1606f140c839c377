"""Read-only traversal helpers over :class:`SyntaxNode` trees."""

from __future__ import annotations

from typing import Iterable, Iterator, List, Optional, Sequence

from .errors import StructureError
from .models import SyntaxNode


def flatten(root: SyntaxNode) -> Iterator[SyntaxNode]:
    """Yield *root* and every descendant in pre-order (node before children)."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def first_of_kind(nodes: Iterable[SyntaxNode], kind: str) -> Optional[SyntaxNode]:
    for node in nodes:
        if node.kind == kind:
            return node
    return None


def children_of_kind(node: SyntaxNode, *kinds: str) -> List[SyntaxNode]:
    return [c for c in node.children if c.kind in kinds]


def child_by_field(node: SyntaxNode, field_name: str) -> Optional[SyntaxNode]:
    for child in node.children:
        if child.field_name == field_name:
            return child
    return None


def siblings_from(node: SyntaxNode, path: str = "<memory>") -> Sequence[SyntaxNode]:
    """Return the parent's children starting at *node* (inclusive).

    Raises :class:`StructureError` when *node* has no parent, e.g. the root.
    """
    parent = node.parent
    if parent is None:
        raise StructureError(path, f"{node.kind} node has no parent")
    for index, sibling in enumerate(parent.children):
        if sibling is node:
            return parent.children[index:]
    # A parent that does not list the node means the tree was assembled by hand
    raise StructureError(path, f"{node.kind} node is not a child of its parent")


def successor_along_path(node: SyntaxNode, kinds: Sequence[str]) -> Optional[SyntaxNode]:
    """Descend through the first child of each kind in *kinds*, in order.

    Returns ``None`` as soon as a step has no matching child; never a partial
    result.
    """
    current = node
    for kind in kinds:
        nxt = first_of_kind(current.children, kind)
        if nxt is None:
            return None
        current = nxt
    return current
