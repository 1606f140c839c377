"""TypeScript parsing on top of Tree-sitter.

Tree-sitter produces a *concrete syntax tree* that keeps every token with its
byte range, which is exactly what positional patching needs: insertion points
are computed against the original bytes and nothing is ever re-rendered.

The Tree-sitter tree is copied into immutable :class:`SyntaxNode` objects so
the rest of the package works on plain frozen data with a weak parent link.
"""

from __future__ import annotations

import importlib
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from .errors import ParserUnavailableError
from .models import SyntaxNode, SyntaxTree

logger = logging.getLogger(__name__)

# File extension -> grammar dialect
DIALECT_MAP: Dict[str, str] = {
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
}

# Dialect -> function exported by the tree-sitter-typescript package
_LANGUAGE_FUNCS: Dict[str, str] = {
    "typescript": "language_typescript",
    "tsx": "language_tsx",
}

_GRAMMAR_MODULE = "tree_sitter_typescript"


class TypeScriptParser:
    """Parses TypeScript (or TSX) source into a :class:`SyntaxTree`."""

    def __init__(self, dialect: str = "typescript") -> None:
        if dialect not in _LANGUAGE_FUNCS:
            raise ValueError(f"Unknown TypeScript dialect: {dialect!r}")
        self.dialect = dialect
        self._parser = self._load_parser(dialect)

    # ------------------------------------------------------------------
    # Initialisation
    # ------------------------------------------------------------------

    @staticmethod
    def _load_parser(dialect: str) -> Any:
        try:
            from tree_sitter import Language, Parser as TSParser  # type: ignore[import-untyped]
            mod = importlib.import_module(_GRAMMAR_MODULE)
        except ImportError as exc:
            raise ParserUnavailableError(
                "tree-sitter is not installed. "
                "Install with: pip install tree-sitter tree-sitter-typescript"
            ) from exc

        # tree-sitter >=0.22 grammar packages hand out a Language capsule.
        ts_lang = Language(getattr(mod, _LANGUAGE_FUNCS[dialect])())
        logger.debug("Loaded tree-sitter grammar for %s", dialect)
        return TSParser(ts_lang)

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def parse(self, source: Union[str, bytes], path: str = "<memory>") -> SyntaxTree:
        source_bytes = source.encode("utf-8") if isinstance(source, str) else source
        ts_tree = self._parser.parse(source_bytes)
        root = _copy_tree(ts_tree.walk())
        has_error = bool(ts_tree.root_node.has_error)
        if has_error:
            logger.warning("%s contains syntax errors; patch positions may be unreliable", path)
        return SyntaxTree(root=root, source=source_bytes, path=path, has_error=has_error)

    def parse_file(self, file_path: Path) -> SyntaxTree:
        return self.parse(file_path.read_bytes(), str(file_path))


def _freeze(ts_node: Any, field_name: Optional[str], children: List[SyntaxNode]) -> SyntaxNode:
    node = SyntaxNode(
        kind=ts_node.type,
        start=ts_node.start_byte,
        end=ts_node.end_byte,
        named=ts_node.is_named,
        field_name=field_name,
        children=tuple(children),
    )
    node.adopt_children()
    return node


def _copy_tree(cursor: Any) -> SyntaxNode:
    """Copy the tree under *cursor* into frozen :class:`SyntaxNode` objects.

    Iterative, so long left-nested expression chains cannot exhaust the
    interpreter's recursion limit.
    """
    # (tree-sitter node, field name, finished children)
    stack: List[Tuple[Any, Optional[str], List[SyntaxNode]]] = [
        (cursor.node, cursor.field_name, []),
    ]
    while True:
        if cursor.goto_first_child():
            stack.append((cursor.node, cursor.field_name, []))
            continue
        while True:
            ts_node, field_name, children = stack.pop()
            built = _freeze(ts_node, field_name, children)
            if not stack:
                return built
            stack[-1][2].append(built)
            if cursor.goto_next_sibling():
                stack.append((cursor.node, cursor.field_name, []))
                break
            cursor.goto_parent()


@lru_cache(maxsize=None)
def get_parser(dialect: str = "typescript") -> TypeScriptParser:
    """Return a shared parser for *dialect* (grammar loading is not free)."""
    return TypeScriptParser(dialect)


def dialect_for(path: Union[str, Path]) -> str:
    """Pick the grammar dialect from a file name, defaulting to plain TypeScript."""
    return DIALECT_MAP.get(Path(path).suffix, "typescript")


def parse_source(source: Union[str, bytes], path: str = "<memory>") -> SyntaxTree:
    return get_parser(dialect_for(path)).parse(source, path)
