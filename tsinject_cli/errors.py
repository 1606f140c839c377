"""Exceptions raised by the patching core."""

from __future__ import annotations


class StructureError(ValueError):
    """The analyzed file does not have the shape an injection needs.

    Raised for a missing class, a class name mismatch, a missing class body or
    a missing parameter list. Never retried: the same file will fail the same
    way until its source changes.
    """

    def __init__(self, path: str, cause: str) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"{path}: {cause}")


class ParserUnavailableError(RuntimeError):
    """The Tree-sitter TypeScript grammar could not be loaded."""
