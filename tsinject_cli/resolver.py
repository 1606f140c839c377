"""Insertion point resolution for constructor injection.

Two independent questions are answered against the *original* tree:

* does the target class have a constructor? If not, where does a new one go?
* is the dependency already a constructor parameter? If not, where does the
  new parameter go?

Each answer is a single :class:`EditDirective` (possibly a no-op). Nothing
here touches the source text; offsets always refer to the unmodified bytes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .config_manager import PatchStyle
from .errors import StructureError
from .models import EditDirective, SyntaxNode, SyntaxTree
from .strings import camelize
from .tree_query import (
    child_by_field,
    children_of_kind,
    first_of_kind,
    flatten,
    siblings_from,
    successor_along_path,
)

logger = logging.getLogger(__name__)

CLASS_KEYWORD = "class"
CLASS_NAME = "type_identifier"
CLASS_BODY = "class_body"
OPEN_BRACE = "{"
OPEN_PAREN = "("
METHOD = "method_definition"
CONSTRUCTOR_NAME = "constructor"
PARAMETER_LIST = "formal_parameters"
PARAMETER_KINDS = ("required_parameter", "optional_parameter")
# param -> ": Type" -> Type
PARAMETER_TYPE_PATH = ("type_annotation", "type_identifier")
REST_PATTERN = "rest_pattern"
OPTIONAL_PARAMETER = "optional_parameter"


@dataclass(frozen=True)
class ClassLocation:
    keyword: SyntaxNode
    name: SyntaxNode
    body: SyntaxNode
    open_brace: SyntaxNode


def line_indent(source: bytes, offset: int) -> str:
    """Leading whitespace of the line containing *offset*."""
    line_start = source.rfind(b"\n", 0, offset) + 1
    end = line_start
    while end < len(source) and source[end:end + 1] in (b" ", b"\t"):
        end += 1
    return source[line_start:end].decode("utf-8")


def newline_of(source: bytes) -> str:
    """Line break used by *source*: CRLF if it has any, else LF."""
    return "\r\n" if b"\r\n" in source else "\n"


def parameter_declaration(dependency_name: str) -> str:
    return f"private {camelize(dependency_name)}: {dependency_name}"


# ----------------------------------------------------------------------
# Class / constructor lookup
# ----------------------------------------------------------------------

def locate_class(tree: SyntaxTree, class_name: str) -> ClassLocation:
    """Find the first class in *tree* and check it is *class_name*.

    Only a specifically named class is ever modified: if the first class in
    the file has another name the pass is rejected rather than retargeted.
    """
    keyword = first_of_kind(flatten(tree.root), CLASS_KEYWORD)
    if keyword is None:
        raise StructureError(tree.path, "no class found")

    siblings = siblings_from(keyword, tree.path)
    name = first_of_kind(siblings, CLASS_NAME)
    if name is None or tree.text(name) != class_name:
        found = tree.text(name) if name is not None else "<anonymous>"
        logger.debug("Expected class %s, found %s", class_name, found)
        raise StructureError(tree.path, "class name mismatch")

    body = first_of_kind(siblings, CLASS_BODY)
    open_brace = first_of_kind(body.children, OPEN_BRACE) if body is not None else None
    if body is None or open_brace is None:
        raise StructureError(tree.path, "no class body")

    return ClassLocation(keyword=keyword, name=name, body=body, open_brace=open_brace)


def find_constructor(tree: SyntaxTree, body: SyntaxNode) -> Optional[SyntaxNode]:
    """Return the constructor implementation declared directly in *body*."""
    for member in children_of_kind(body, METHOD):
        name = child_by_field(member, "name")
        if name is not None and tree.text(name) == CONSTRUCTOR_NAME:
            return member
    return None


# ----------------------------------------------------------------------
# Directive builders
# ----------------------------------------------------------------------

def create_constructor(
    tree: SyntaxTree,
    location: ClassLocation,
    dependency_name: str,
    style: PatchStyle,
) -> EditDirective:
    """Insert a whole constructor right after the class's opening brace."""
    member_indent = line_indent(tree.source, location.keyword.start) + style.indent
    field_name = camelize(dependency_name)
    signature = f"constructor({parameter_declaration(dependency_name)})"
    nl = newline_of(tree.source)

    if style.usage_hint:
        text = (
            f"{nl}{member_indent}{signature} {{{nl}"
            f"{member_indent}{style.indent}// this.{field_name} is ready to use{nl}"
            f"{member_indent}}}{nl}"
        )
    else:
        text = f"{nl}{member_indent}{signature} {{}}{nl}"

    return EditDirective(
        path=tree.path,
        offset=location.open_brace.end,
        text=text,
        description=f"Add constructor injecting {dependency_name}",
    )


def extend_parameters(
    tree: SyntaxTree,
    constructor: SyntaxNode,
    dependency_name: str,
) -> EditDirective:
    """Add the dependency to an existing constructor's parameter list.

    The new parameter goes last, or just before the first optional or rest
    parameter so the list stays valid.

    Parameters are matched by *type name only*: an existing ``foo: Logger``
    satisfies a request for ``Logger`` whatever its local name, and two
    distinct services that share a type name are treated as the same one.
    """
    params_node = first_of_kind(constructor.children, PARAMETER_LIST)
    if params_node is None:
        raise StructureError(tree.path, "missing parameter list")

    params = children_of_kind(params_node, *PARAMETER_KINDS)
    field_name = camelize(dependency_name)
    for param in params:
        type_node = successor_along_path(param, PARAMETER_TYPE_PATH)
        if type_node is not None and tree.text(type_node) == dependency_name:
            logger.debug("%s already injected at byte %d", dependency_name, param.start)
            return EditDirective.noop(tree.path, f"{dependency_name} already injected")
        pattern = child_by_field(param, "pattern")
        if pattern is not None and tree.text(pattern) == field_name:
            logger.warning(
                "Constructor of %s already has a parameter named %r of another type",
                tree.path, field_name,
            )

    declaration = parameter_declaration(dependency_name)
    description = f"Add {dependency_name} constructor parameter"

    if not params:
        open_paren = first_of_kind(params_node.children, OPEN_PAREN)
        if open_paren is None:
            raise StructureError(tree.path, "missing parameter list")
        return EditDirective(tree.path, open_paren.end, declaration, description=description)

    multiline = b"\n" in tree.source[params_node.start:params_node.end]
    newline = newline_of(tree.source)

    # A required parameter may not follow an optional or rest one.
    trailing = next((p for p in params if _must_stay_last(p)), None)
    if trailing is not None:
        separator = "," + newline + line_indent(tree.source, trailing.start) if multiline else ", "
        return EditDirective(tree.path, trailing.start, declaration + separator, description=description)

    last = params[-1]
    separator = "," + newline + line_indent(tree.source, last.start) if multiline else ", "
    return EditDirective(tree.path, last.end, separator + declaration, description=description)


def _must_stay_last(param: SyntaxNode) -> bool:
    if param.kind == OPTIONAL_PARAMETER:
        return True
    pattern = child_by_field(param, "pattern")
    return pattern is not None and pattern.kind == REST_PATTERN


def resolve_constructor_edit(
    tree: SyntaxTree,
    class_name: str,
    dependency_name: str,
    style: PatchStyle,
) -> EditDirective:
    """Locate-or-create the constructor of *class_name* and inject the dependency."""
    location = locate_class(tree, class_name)
    constructor = find_constructor(tree, location.body)
    if constructor is None:
        logger.debug("%s has no constructor; fabricating one", class_name)
        return create_constructor(tree, location, dependency_name, style)
    return extend_parameters(tree, constructor, dependency_name)
