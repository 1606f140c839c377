"""Injection planning: source text in, ordered edit directives out.

A planning pass parses the file once, resolves the constructor edit and the
import edit against that single unmodified tree, and returns both. Any
:class:`StructureError` aborts the pass before a single byte is edited.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple, Union

from .config_manager import PatchStyle
from .errors import StructureError
from .imports import insert_import
from .models import EditDirective, InjectionContext, SyntaxTree
from .parser import parse_source
from .resolver import resolve_constructor_edit
from .storage import FileHost
from .strings import build_relative_path, class_name_from_file, classify

logger = logging.getLogger(__name__)


def _plan(
    file_text: Union[str, bytes],
    class_name: str,
    dependency_type_name: str,
    dependency_module_path: str,
    path: str,
    style: PatchStyle,
) -> Tuple[SyntaxTree, List[EditDirective]]:
    tree = parse_source(file_text, path)
    constructor_edit = resolve_constructor_edit(tree, class_name, dependency_type_name, style)
    import_edit = insert_import(tree, dependency_type_name, dependency_module_path, style.quote)
    return tree, [constructor_edit, import_edit]


def plan_injection(
    file_text: Union[str, bytes],
    class_name: str,
    dependency_type_name: str,
    dependency_module_path: str,
    path: str = "<memory>",
    style: Optional[PatchStyle] = None,
) -> List[EditDirective]:
    """Plan the edits that inject *dependency_type_name* into *class_name*.

    Always returns two directives, ``[constructor/parameter edit, import
    edit]``; either may be a no-op. Offsets refer to *file_text* as given.
    Raises :class:`StructureError` when the file does not have the expected
    shape.
    """
    _, directives = _plan(
        file_text, class_name, dependency_type_name, dependency_module_path,
        path, style or PatchStyle(),
    )
    return directives


def build_injection_context(
    file_path: Union[str, Path],
    dependency_name: Optional[str] = None,
    dependency_file: Optional[Union[str, Path]] = None,
    module: Optional[str] = None,
    class_name: Optional[str] = None,
) -> InjectionContext:
    """Resolve the facts for one injection pass.

    Exactly one of *dependency_file* (a local ``.ts`` file, imported by
    relative path) or *module* (a package specifier such as
    ``@angular/common/http``) must be given. Missing names are derived from
    file names: ``hero-list.component.ts`` targets ``HeroListComponent``.
    """
    if (dependency_file is None) == (module is None):
        raise ValueError("Give exactly one of dependency_file or module")

    target = Path(file_path).resolve()
    if dependency_file is not None:
        specifier = build_relative_path(target, Path(dependency_file).resolve())
        name = dependency_name or class_name_from_file(dependency_file)
    else:
        specifier = module
        if not dependency_name:
            raise ValueError("dependency_name is required when importing from a module")
        name = dependency_name

    return InjectionContext(
        file_path=str(target),
        class_name=class_name or class_name_from_file(target),
        dependency_name=classify(name),
        dependency_module=specifier,
    )


@dataclass
class InjectionResult:
    """Outcome of one injection pass."""
    context: InjectionContext
    directives: List[EditDirective] = field(default_factory=list)
    new_content: Optional[bytes] = None

    @property
    def changed(self) -> bool:
        return any(not d.is_noop for d in self.directives)


class InjectionPlanner:
    """Runs injection passes against files reached through a :class:`FileHost`."""

    def __init__(self, host: FileHost, style: Optional[PatchStyle] = None) -> None:
        self.host = host
        self.style = style or PatchStyle()

    def _read(self, context: InjectionContext) -> bytes:
        content = self.host.read(context.file_path)
        if content is None:
            raise StructureError(context.file_path, "file not found")
        return content

    def plan(self, context: InjectionContext) -> List[EditDirective]:
        """Compute directives for *context* without staging anything."""
        return plan_injection(
            self._read(context),
            context.class_name,
            context.dependency_name,
            context.dependency_module,
            path=context.file_path,
            style=self.style,
        )

    def inject(self, context: InjectionContext) -> InjectionResult:
        """Plan, check and stage the injection described by *context*.

        Raises :class:`StructureError` on an unexpected source shape, or when
        the edits would turn a clean parse into one with syntax errors. In
        both cases nothing is staged.
        """
        source = self._read(context)
        tree, directives = _plan(
            source,
            context.class_name,
            context.dependency_name,
            context.dependency_module,
            context.file_path,
            self.style,
        )
        result = InjectionResult(context=context, directives=directives)
        if not result.changed:
            logger.info("%s already injects %s", context.class_name, context.dependency_name)
            result.new_content = source
            return result

        recorder = self.host.begin_update(context.file_path)
        for directive in directives:
            recorder.record(directive)

        preview = recorder.batch.apply(recorder.original)
        if not tree.has_error and parse_source(preview, context.file_path).has_error:
            raise StructureError(context.file_path, "edit produced invalid syntax")

        result.new_content = self.host.commit_update(recorder)
        logger.info("Injected %s into %s", context.dependency_name, context.class_name)
        return result
