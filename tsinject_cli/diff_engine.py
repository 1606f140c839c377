"""DiffEngine for previewing and writing staged file changes."""

from __future__ import annotations

import difflib
import json
import logging
import shutil
import uuid
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from . import config
from .models import ApplyResult, FileChange

logger = logging.getLogger(__name__)


def create_diff(original: str, modified: str, filename: str = "file") -> str:
    """Create a unified diff between two versions of a file."""
    diff = difflib.unified_diff(
        original.splitlines(keepends=True),
        modified.splitlines(keepends=True),
        fromfile=f"a/{filename}",
        tofile=f"b/{filename}",
    )
    return "".join(diff)


class DiffEngine:
    """Previews staged changes and writes them with backups."""

    def __init__(self, backup_dir: Optional[Path] = None):
        """Initialize DiffEngine.

        Args:
            backup_dir: Directory to store backups. Defaults to ~/.tsinject/backups/
        """
        self.backup_dir = backup_dir or config.BACKUP_DIR
        self.backup_dir.mkdir(parents=True, exist_ok=True)

    def preview_changes(self, changes: List[FileChange]) -> str:
        """Render every change as a header plus its unified diff."""
        lines = []
        for change in changes:
            lines.append(f"{'=' * 60}")
            lines.append(f"[MODIFY] {change.file_path}")
            lines.append(f"{'=' * 60}")
            lines.append(change.diff or create_diff(
                change.original_content, change.new_content, change.file_path,
            ))
        return "\n".join(lines)

    def apply_changes(
        self,
        changes: List[FileChange],
        backup: bool = True,
        dry_run: bool = False,
    ) -> ApplyResult:
        """Write staged changes to the filesystem.

        Args:
            changes: Changes to write; empty ones are skipped
            backup: Whether to create backups before writing
            dry_run: If True, report what would change without writing

        Returns:
            ApplyResult with success status and details
        """
        pending = [c for c in changes if not c.is_empty]
        if dry_run:
            return ApplyResult(success=True, files_changed=[c.file_path for c in pending])

        backup_id = self._create_backup(pending) if backup and pending else None
        files_changed: List[str] = []

        try:
            for change in pending:
                file_path = Path(change.file_path)
                if not file_path.exists():
                    raise FileNotFoundError(f"File not found: {file_path}")
                file_path.write_bytes(change.new_content.encode("utf-8"))
                files_changed.append(str(file_path))
                logger.info("Wrote %s", file_path)
        except OSError as exc:
            logger.error("Writing changes failed: %s", exc)
            if backup_id:
                self.rollback(backup_id)
            return ApplyResult(success=False, files_changed=[], error=str(exc))

        return ApplyResult(success=True, files_changed=files_changed, backup_id=backup_id)

    def _create_backup(self, changes: List[FileChange]) -> str:
        """Copy every file about to be written into a fresh backup folder.

        Returns:
            Backup ID for rollback
        """
        backup_id = f"{datetime.now().strftime('%Y%m%d_%H%M%S')}_{uuid.uuid4().hex[:8]}"
        backup_path = self.backup_dir / backup_id
        backup_path.mkdir(parents=True, exist_ok=True)

        metadata = {
            "timestamp": datetime.now().isoformat(),
            "files": [],
        }
        for index, change in enumerate(changes):
            file_path = Path(change.file_path)
            if file_path.exists():
                # Index prefix keeps same-named files from different folders apart
                backup_file = backup_path / f"{index}_{file_path.name}"
                shutil.copy2(file_path, backup_file)
                metadata["files"].append({
                    "original": str(file_path),
                    "backup": str(backup_file),
                })

        (backup_path / "metadata.json").write_text(json.dumps(metadata, indent=2))
        logger.debug("Created backup %s for %d file(s)", backup_id, len(metadata["files"]))
        return backup_id

    def rollback(self, backup_id: str) -> bool:
        """Restore every file saved under *backup_id*.

        Returns:
            True if successful, False otherwise
        """
        backup_path = self.backup_dir / backup_id
        metadata_file = backup_path / "metadata.json"
        if not metadata_file.exists():
            return False

        try:
            metadata = json.loads(metadata_file.read_text())
            for file_info in metadata["files"]:
                backup_file = Path(file_info["backup"])
                if backup_file.exists():
                    shutil.copy2(backup_file, Path(file_info["original"]))
        except (OSError, ValueError, KeyError) as exc:
            logger.error("Rollback of %s failed: %s", backup_id, exc)
            return False
        return True

    def list_backups(self) -> list[dict]:
        """List all available backups, newest first."""
        backups = []
        for backup_dir in self.backup_dir.iterdir():
            metadata_file = backup_dir / "metadata.json"
            if backup_dir.is_dir() and metadata_file.exists():
                metadata = json.loads(metadata_file.read_text())
                metadata["backup_id"] = backup_dir.name
                backups.append(metadata)
        return sorted(backups, key=lambda x: x["timestamp"], reverse=True)
