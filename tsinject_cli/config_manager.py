"""Style configuration for generated code, stored in TOML files.

Two files are consulted, later ones winning:

1. the global ``~/.tsinject/config.toml`` (``TSINJECT_HOME`` relocates it)
2. a project-local ``tsinject.toml`` next to (or above) the edited file

Both use a ``[style]`` table::

    [style]
    indent = "    "
    quote = "\\""
    usage_hint = false
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import toml

from . import config

logger = logging.getLogger(__name__)

STYLE_KEYS = ("indent", "quote", "usage_hint")


@dataclass(frozen=True)
class PatchStyle:
    """Formatting choices for inserted text."""
    indent: str = config.DEFAULT_INDENT
    quote: str = config.DEFAULT_QUOTE
    usage_hint: bool = config.DEFAULT_USAGE_HINT

    def __post_init__(self) -> None:
        if self.indent.strip():
            raise ValueError(f"indent must be whitespace only, got {self.indent!r}")
        if self.quote not in ("'", '"'):
            raise ValueError(f"quote must be ' or \", got {self.quote!r}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _read_toml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            return toml.load(f)
    except toml.TomlDecodeError as exc:
        logger.warning("Ignoring malformed config file %s: %s", path, exc)
        return {}


def load_full_config() -> Dict[str, Any]:
    """Load the entire global TOML config (all sections)."""
    return _read_toml(config.CONFIG_FILE)


def _save_full_config(data: Dict[str, Any]) -> None:
    config.CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    with open(config.CONFIG_FILE, "w", encoding="utf-8") as f:
        toml.dump(data, f)


def find_project_config(start: Path) -> Optional[Path]:
    """Walk up from *start* looking for a project-local ``tsinject.toml``."""
    current = start if start.is_dir() else start.parent
    for directory in [current, *current.parents]:
        candidate = directory / config.PROJECT_CONFIG_NAME
        if candidate.is_file():
            return candidate
    return None


def _coerce(key: str, value: Any) -> Any:
    if key == "usage_hint" and isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "yes", "1", "on"):
            return True
        if lowered in ("false", "no", "0", "off"):
            return False
        raise ValueError(f"usage_hint must be a boolean, got {value!r}")
    return value


def load_style(project_path: Optional[Path] = None) -> PatchStyle:
    """Merge global and project ``[style]`` tables over the built-in defaults."""
    merged: Dict[str, Any] = {}
    merged.update(load_full_config().get("style", {}))

    if project_path is not None:
        project_file = find_project_config(project_path)
        if project_file is not None:
            logger.debug("Using project style from %s", project_file)
            merged.update(_read_toml(project_file).get("style", {}))

    unknown = set(merged) - set(STYLE_KEYS)
    if unknown:
        logger.warning("Ignoring unknown style keys: %s", ", ".join(sorted(unknown)))
    return PatchStyle(**{k: _coerce(k, v) for k, v in merged.items() if k in STYLE_KEYS})


def save_style_value(key: str, value: Any) -> PatchStyle:
    """Set one ``[style]`` key in the global config and return the new style.

    The value is validated before anything is written.
    """
    if key not in STYLE_KEYS:
        raise ValueError(f"Unknown style key {key!r}; expected one of {', '.join(STYLE_KEYS)}")

    data = load_full_config()
    style = dict(data.get("style", {}))
    style[key] = _coerce(key, value)
    new_style = PatchStyle(**{k: v for k, v in style.items() if k in STYLE_KEYS})

    data["style"] = style
    _save_full_config(data)
    return new_style
