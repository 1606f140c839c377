"""Import statement edits: make ``import { Name } from 'module'`` present once."""

from __future__ import annotations

import logging
from typing import List, Optional

from .models import EditDirective, SyntaxNode, SyntaxTree
from .resolver import newline_of
from .tree_query import child_by_field, children_of_kind, first_of_kind, successor_along_path

logger = logging.getLogger(__name__)

IMPORT_STATEMENT = "import_statement"
NAMED_IMPORTS_PATH = ("import_clause", "named_imports")
IMPORT_SPECIFIER = "import_specifier"


def top_level_imports(tree: SyntaxTree) -> List[SyntaxNode]:
    return children_of_kind(tree.root, IMPORT_STATEMENT)


def import_source(tree: SyntaxTree, statement: SyntaxNode) -> Optional[str]:
    """Module specifier of *statement* without its quotes."""
    source = child_by_field(statement, "source")
    if source is None:
        return None
    return tree.text(source)[1:-1]


def imported_names(tree: SyntaxTree, named_imports: SyntaxNode) -> List[str]:
    """Local value bindings introduced by a `{ ... }` import clause.

    `{ Base as Logger }` binds `Logger`; inline `{ type Logger }` binds nothing
    usable at runtime and is left out.
    """
    names = []
    for specifier in children_of_kind(named_imports, IMPORT_SPECIFIER):
        if _is_type_only(specifier):
            continue
        binding = child_by_field(specifier, "alias") or child_by_field(specifier, "name")
        if binding is not None:
            names.append(tree.text(binding))
    return names


def _is_type_only(node: SyntaxNode) -> bool:
    # `import type { X }` and `{ type X }` are erased at runtime and cannot back an injection
    return any(c.kind in ("type", "typeof") and not c.named for c in node.children)


def insert_import(
    tree: SyntaxTree,
    symbol: str,
    module: str,
    quote: str = "'",
) -> EditDirective:
    """Directive that makes *symbol* importable from *module* in *tree*.

    An existing import of the same symbol from the same module yields a no-op.
    An existing named import from the same module is extended in place;
    otherwise a fresh import line goes after the last top-level import, or at
    the very top of a file that has none.
    """
    imports = top_level_imports(tree)
    extendable: Optional[SyntaxNode] = None

    for statement in imports:
        if _is_type_only(statement) or import_source(tree, statement) != module:
            continue
        named = successor_along_path(statement, NAMED_IMPORTS_PATH)
        if named is None:
            continue
        if symbol in imported_names(tree, named):
            return EditDirective.noop(tree.path, f"{symbol} already imported from {module}")
        if extendable is None:
            extendable = named

    if extendable is not None:
        specifiers = children_of_kind(extendable, IMPORT_SPECIFIER)
        logger.debug("Extending existing import from %s with %s", module, symbol)
        if specifiers:
            return EditDirective(
                tree.path, specifiers[-1].end, f", {symbol}",
                description=f"Add {symbol} to import from {module}",
            )
        brace = first_of_kind(extendable.children, "{")
        if brace is not None:
            return EditDirective(
                tree.path, brace.end, f" {symbol} ",
                description=f"Add {symbol} to import from {module}",
            )

    statement_text = f"import {{ {symbol} }} from {quote}{module}{quote};"
    description = f"Import {symbol} from {module}"
    nl = newline_of(tree.source)
    if imports:
        return EditDirective(tree.path, imports[-1].end, nl + statement_text, description=description)
    return EditDirective(tree.path, 0, statement_text + nl, side="left", description=description)
