"""In-memory staging host for file edits.

Reads go to disk unless a file already has staged content. Edits are made
through an :class:`UpdateRecorder` and only become staged content on
:meth:`FileHost.commit_update`; nothing is written to disk here (that is
:class:`~tsinject_cli.diff_engine.DiffEngine`'s job).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from .diff_engine import create_diff
from .edit_batch import EditBatch
from .models import EditDirective, FileChange

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class UpdateRecorder:
    """Collects insertions for one file against the content seen at begin time."""

    def __init__(self, path: str, original: bytes) -> None:
        self.path = path
        self.original = original
        self.batch = EditBatch(path)

    def insert_left(self, offset: int, text: str) -> "UpdateRecorder":
        self.batch.add(EditDirective(self.path, offset, text, side="left"))
        return self

    def insert_right(self, offset: int, text: str) -> "UpdateRecorder":
        self.batch.add(EditDirective(self.path, offset, text, side="right"))
        return self

    def record(self, directive: EditDirective) -> "UpdateRecorder":
        """Record *directive* as an insertion into this recorder's file."""
        if not directive.is_noop:
            self.batch.add(EditDirective(
                self.path, directive.offset, directive.text,
                side=directive.side, description=directive.description,
            ))
        return self


class FileHost:
    """File access rooted at *root*, with staged (uncommitted-to-disk) edits."""

    def __init__(self, root: PathLike) -> None:
        self.root = Path(root).resolve()
        # resolved path -> (content on disk, staged content)
        self._staged: Dict[Path, Tuple[bytes, bytes]] = {}

    def _resolve(self, path: PathLike) -> Path:
        candidate = Path(path)
        if not candidate.is_absolute():
            candidate = self.root / candidate
        resolved = candidate.resolve()
        if resolved != self.root and self.root not in resolved.parents:
            raise ValueError(f"{path} is outside host root {self.root}")
        return resolved

    def read(self, path: PathLike) -> Optional[bytes]:
        resolved = self._resolve(path)
        if resolved in self._staged:
            return self._staged[resolved][1]
        if not resolved.is_file():
            return None
        return resolved.read_bytes()

    def exists(self, path: PathLike) -> bool:
        return self.read(path) is not None

    def begin_update(self, path: PathLike) -> UpdateRecorder:
        content = self.read(path)
        if content is None:
            raise FileNotFoundError(f"File not found: {path}")
        return UpdateRecorder(str(path), content)

    def commit_update(self, recorder: UpdateRecorder) -> bytes:
        """Apply *recorder*'s insertions and stage the result.

        Raises ``ValueError`` if the file was changed by another commit since
        the recorder was opened, since its offsets would no longer line up.
        """
        resolved = self._resolve(recorder.path)
        current = self.read(resolved)
        if current != recorder.original:
            raise ValueError(f"{recorder.path} changed since its update began")

        new_content = recorder.batch.apply(recorder.original)
        if new_content != recorder.original:
            on_disk = self._staged[resolved][0] if resolved in self._staged else recorder.original
            self._staged[resolved] = (on_disk, new_content)
            logger.info("Staged %d insertion(s) for %s", len(recorder.batch.ordered()), resolved)
        return new_content

    def changes(self) -> List[FileChange]:
        """Staged edits as :class:`FileChange` objects, in path order."""
        result = []
        for path in sorted(self._staged):
            original, new = self._staged[path]
            original_text = original.decode("utf-8")
            new_text = new.decode("utf-8")
            result.append(FileChange(
                file_path=str(path),
                original_content=original_text,
                new_content=new_text,
                diff=create_diff(original_text, new_text, str(path.relative_to(self.root))),
            ))
        return result
