"""Backup and retention of template-managed files.

Before an update overwrites anything, every template-managed item present in
the project is copied into a timestamped snapshot:

    <project>/.ipa-ck/backup/2026-10-19T08-15-30-123Z/
        .claude/
        CLAUDE.md
        README.md

Snapshot names are UTC ISO8601 timestamps with ':' and '.' replaced by '-', so
sorting names also sorts snapshots by creation time. Old snapshots are pruned
down to a retention count (default 3). Restoring is manual.
"""

import logging
import shutil
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

from ipa_ck.settings import DEFAULT_BACKUP_KEEP, RuntimeConfig
from ipa_ck.template_sync import MANAGED_ITEMS

logger = logging.getLogger(__name__)

STATE_DIR_NAME = ".ipa-ck"
BACKUP_DIR_NAME = "backup"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_timestamp(moment: datetime) -> str:
    """Format moment as ISO8601 UTC with millisecond precision and a Z suffix."""
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def snapshot_name(moment: datetime) -> str:
    """Filesystem-safe snapshot directory name for moment."""
    return iso_timestamp(moment).replace(":", "-").replace(".", "-")


class BackupManager:
    """Create and prune snapshots of template-managed files."""

    def __init__(
        self,
        config: RuntimeConfig,
        clock: Callable[[], datetime] = utc_now,
        managed_items: tuple[str, ...] = MANAGED_ITEMS,
    ):
        self.config = config
        self.clock = clock
        self.managed_items = managed_items

    @property
    def backup_root(self) -> Path:
        return self.config.target_dir / STATE_DIR_NAME / BACKUP_DIR_NAME

    def snapshot(self) -> Path:
        """Copy the current managed files into a new snapshot directory.

        Items missing from the project are left out.

        Returns:
            Path to the snapshot directory
        """
        backup_dir = self._new_snapshot_dir()

        for name in self.managed_items:
            src = self.config.target_dir / name
            if not src.exists():
                continue

            dest = backup_dir / name
            if src.is_dir():
                shutil.copytree(src, dest, symlinks=True)
            else:
                shutil.copy2(src, dest)
            logger.debug(f"Backed up {name}")

        logger.debug(f"Created snapshot: {backup_dir}")
        return backup_dir

    def _new_snapshot_dir(self) -> Path:
        self.backup_root.mkdir(parents=True, exist_ok=True)
        base = snapshot_name(self.clock())
        candidate = self.backup_root / base
        suffix = 0
        while True:
            try:
                candidate.mkdir()
                return candidate
            except FileExistsError:
                suffix += 1
                logger.warning(f"Snapshot {candidate.name} already exists, adding suffix")
                candidate = self.backup_root / f"{base}-{suffix}"

    def list_snapshots(self) -> list[Path]:
        """List snapshot directories, newest first."""
        if not self.backup_root.is_dir():
            return []
        snapshots = [p for p in self.backup_root.iterdir() if p.is_dir()]
        return sorted(snapshots, key=lambda p: p.name, reverse=True)

    def prune(self, keep: int = DEFAULT_BACKUP_KEEP, protect: Path | None = None) -> list[Path]:
        """Remove all but the keep newest snapshots.

        Args:
            keep: Number of snapshots to keep (0 removes all)
            protect: Snapshot that is never removed; it counts toward keep
                and is kept even when keep is 0

        Returns:
            Paths of removed snapshots

        Raises:
            ValueError: If keep is negative
        """
        if keep < 0:
            raise ValueError(f"keep must be >= 0, got {keep}")

        snapshots = self.list_snapshots()
        if protect is not None and Path(protect) in snapshots:
            snapshots.remove(Path(protect))
            keep = max(keep - 1, 0)

        removed = []
        for snapshot in snapshots[keep:]:
            shutil.rmtree(snapshot)
            removed.append(snapshot)
            logger.debug(f"Removed old snapshot: {snapshot.name}")

        return removed


__all__ = ["BackupManager", "iso_timestamp", "snapshot_name", "utc_now"]
