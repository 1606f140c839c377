"""Shared helpers for building trees and checking applied edits."""

from typing import List

from tsinject_cli.edit_batch import EditBatch
from tsinject_cli.models import EditDirective, SyntaxNode


def node(kind: str, start: int, end: int, *children: SyntaxNode, field_name=None, named=True) -> SyntaxNode:
    """Build a hand-made tree node with parent links wired up."""
    built = SyntaxNode(
        kind=kind, start=start, end=end, named=named,
        field_name=field_name, children=tuple(children),
    )
    built.adopt_children()
    return built


def apply_directives(source: str, directives: List[EditDirective]) -> str:
    return EditBatch(directives[0].path, directives).apply_text(source)


def strip_insertions(result: bytes, directives: List[EditDirective]) -> bytes:
    """Remove inserted ranges from *result*, undoing an ascending apply.

    Each insertion is removed lowest-first, so after removing the earlier
    ones the next insertion sits exactly at its original-file offset.
    """
    out = result
    for directive in EditBatch(directives[0].path, directives).ordered():
        inserted = directive.text.encode("utf-8")
        assert out[directive.offset:directive.offset + len(inserted)] == inserted
        out = out[:directive.offset] + out[directive.offset + len(inserted):]
    return out
