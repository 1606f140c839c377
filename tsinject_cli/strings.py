"""Name casing and module-path helpers.

The casing rules mirror the Angular devkit string utilities so that generated
identifiers match what Angular tooling would produce for the same input.
"""

from __future__ import annotations

import os
import posixpath
import re
from pathlib import Path
from typing import Union

_DECAMELIZE_RE = re.compile(r"([a-z\d])([A-Z])")
_DASHERIZE_RE = re.compile(r"[ _]")
_CAMELIZE_RE = re.compile(r"(-|_|\.|\s)+(.)?")

TS_EXTENSIONS = (".d.ts", ".tsx", ".ts", ".mts", ".cts")

PathLike = Union[str, Path]


def decamelize(value: str) -> str:
    """``innerHTML`` -> ``inner_html``."""
    return _DECAMELIZE_RE.sub(r"\1_\2", value).lower()


def dasherize(value: str) -> str:
    """``innerHTML`` / ``action_name`` -> ``inner-html`` / ``action-name``."""
    return _DASHERIZE_RE.sub("-", decamelize(value))


def camelize(value: str) -> str:
    """``hero-list`` / ``HttpClient`` -> ``heroList`` / ``httpClient``."""
    result = _CAMELIZE_RE.sub(lambda m: m.group(2).upper() if m.group(2) else "", value)
    return result[:1].lower() + result[1:]


def capitalize(value: str) -> str:
    return value[:1].upper() + value[1:]


def classify(value: str) -> str:
    """``hero-list`` -> ``HeroList``; dotted segments are classified separately."""
    return ".".join(capitalize(camelize(part)) for part in value.split("."))


def strip_ts_extension(name: str) -> str:
    for ext in TS_EXTENSIONS:
        if name.endswith(ext):
            return name[: -len(ext)]
    return name


def class_name_from_file(path: PathLike) -> str:
    """``hero-list.component.ts`` -> ``HeroListComponent``."""
    stem = strip_ts_extension(Path(path).name)
    return "".join(classify(part) for part in stem.split(".") if part)


def join_path(*parts: PathLike) -> str:
    return posixpath.normpath(posixpath.join(*(str(p).replace(os.sep, "/") for p in parts)))


def build_relative_path(from_file: PathLike, to_file: PathLike) -> str:
    """Module specifier that imports *to_file* from *from_file*.

    The result has no TypeScript extension and always starts with ``./`` or
    ``../`` so it is never mistaken for a package import.
    """
    from_dir = os.path.dirname(os.path.abspath(str(from_file)))
    target = strip_ts_extension(os.path.abspath(str(to_file)))
    relative = os.path.relpath(target, from_dir).replace(os.sep, "/")
    if not relative.startswith(("./", "../")):
        relative = f"./{relative}"
    return relative
