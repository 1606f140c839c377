"""Core data models shared by the parser, resolver, planner and storage layers."""

from __future__ import annotations

import weakref
from dataclasses import dataclass, field
from typing import List, Literal, Optional, Tuple


@dataclass(frozen=True, eq=False)
class SyntaxNode:
    """One node of an immutable syntax tree.

    ``kind`` is the Tree-sitter node type (``class``, ``type_identifier``,
    ``formal_parameters`` ...). ``start``/``end`` are byte offsets into the
    source the tree was parsed from. The parent link is a weak reference used
    for sibling lookup only; the tree is owned top-down through ``children``.
    """
    kind: str
    start: int
    end: int
    named: bool = True
    field_name: Optional[str] = None
    children: Tuple["SyntaxNode", ...] = ()
    _parent_ref: Optional["weakref.ReferenceType[SyntaxNode]"] = field(
        default=None, repr=False,
    )

    @property
    def parent(self) -> Optional["SyntaxNode"]:
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    def adopt_children(self) -> None:
        """Point each child's parent link at this node (construction only)."""
        ref = weakref.ref(self)
        for child in self.children:
            object.__setattr__(child, "_parent_ref", ref)

    def __str__(self) -> str:
        return f"{self.kind}[{self.start}:{self.end}]"


@dataclass(frozen=True)
class SyntaxTree:
    """A parsed source file: root node plus the exact bytes it spans."""
    root: SyntaxNode
    source: bytes
    path: str
    has_error: bool = False

    def text(self, node: SyntaxNode) -> str:
        return self.source[node.start:node.end].decode("utf-8")


@dataclass(frozen=True)
class InjectionContext:
    """The facts one injection pass needs, resolved once per run."""
    file_path: str
    class_name: str
    dependency_name: str
    dependency_module: str

    def __str__(self) -> str:
        return f"{self.dependency_name} ({self.dependency_module}) -> {self.class_name} in {self.file_path}"


@dataclass(frozen=True)
class EditDirective:
    """Insert ``text`` at byte ``offset`` of ``path``; all other bytes stay put.

    ``side`` breaks ties between directives sharing an offset: ``left``
    insertions land before ``right`` ones.
    """
    path: str
    offset: int
    text: str
    side: Literal["left", "right"] = "right"
    description: str = ""

    @classmethod
    def noop(cls, path: str, description: str = "") -> "EditDirective":
        return cls(path=path, offset=0, text="", description=description)

    @property
    def is_noop(self) -> bool:
        return not self.text

    def __str__(self) -> str:
        if self.is_noop:
            return f"{self.path}: no-op ({self.description})" if self.description else f"{self.path}: no-op"
        return f"{self.path}@{self.offset}: insert {self.text!r}"


@dataclass
class FileChange:
    """A staged modification of a single file."""
    file_path: str
    original_content: str
    new_content: str
    diff: str = ""

    @property
    def is_empty(self) -> bool:
        return self.original_content == self.new_content


@dataclass
class ApplyResult:
    """Result of writing staged changes to disk."""
    success: bool
    files_changed: List[str]
    backup_id: Optional[str] = None
    error: Optional[str] = None

    def __str__(self) -> str:
        if self.success:
            return f"Applied changes to {len(self.files_changed)} file(s)"
        return f"Failed: {self.error}"
