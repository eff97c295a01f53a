"""Template synchronization.

Copies a bundled template tree into a project directory, one item at a time:

- Plain files (README.md) are copied when absent, skipped when present, and
  overwritten when present and force is set.
- The .claude/ folder is merged, not replaced. Each entry under the
  recognized subfolders (skills, commands, workflows) and each entry in the
  .claude/ root is reconciled on its own with the plain-file rule, so the
  user's own skills and commands survive an update.
- CLAUDE.md is merged by marker (see living_document).

Dry runs walk exactly the same items in the same order and report the same
records without touching the filesystem. Items are processed sequentially and
there is no rollback if a copy fails part way through.
"""

import logging
import shutil
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from ipa_ck.errors import NotFoundError
from ipa_ck.living_document import LivingDocumentMerger, MergeAction
from ipa_ck.path_config import DocPaths, replace_paths_in_content
from ipa_ck.settings import RuntimeConfig
from ipa_ck.version_registry import VersionRegistry

logger = logging.getLogger(__name__)

# Files copied verbatim from the template root
PLAIN_FILES = ("README.md",)

# Folder merged item by item
MERGE_ROOT = ".claude"

# Subfolders of MERGE_ROOT whose entries are reconciled individually
MERGE_SUBDIRS = ("skills", "commands", "workflows")

# Document merged by marker
LIVING_DOCUMENT = "CLAUDE.md"

# Everything the template manages in a project (used for backups)
MANAGED_ITEMS = (MERGE_ROOT, LIVING_DOCUMENT, *PLAIN_FILES)


class ConflictAction(str, Enum):
    COPIED = "copied"
    SKIPPED = "skipped"
    OVERWRITTEN = "overwritten"


@dataclass(frozen=True)
class ConflictRecord:
    """What happened to one template item that already existed."""

    path: str
    action: ConflictAction


@dataclass(frozen=True)
class SyncOptions:
    """Options for a synchronization run.

    Attributes:
        force: Overwrite items that already exist in the project
        dry_run: Report what would happen without writing anything
        paths: Custom docs/plans folder names (None keeps template text as is)
    """

    force: bool = False
    dry_run: bool = False
    paths: DocPaths | None = None


@dataclass
class SyncResult:
    """Outcome of a synchronization run."""

    copied: list[str] = field(default_factory=list)
    conflicts: list[ConflictRecord] = field(default_factory=list)

    @property
    def skipped(self) -> list[str]:
        return [c.path for c in self.conflicts if c.action == ConflictAction.SKIPPED]

    @property
    def overwritten(self) -> list[str]:
        return [c.path for c in self.conflicts if c.action == ConflictAction.OVERWRITTEN]

    def extend(self, other: "SyncResult") -> None:
        self.copied.extend(other.copied)
        self.conflicts.extend(other.conflicts)


class TemplateSynchronizer:
    """Copy a template version into the configured target directory."""

    def __init__(self, config: RuntimeConfig, registry: VersionRegistry | None = None):
        self.config = config
        self.registry = registry or VersionRegistry(config)

    def copy(self, version: str, options: SyncOptions | None = None) -> SyncResult:
        """Copy template files to the target directory.

        Args:
            version: Template version to copy
            options: Force/dry-run/path options

        Returns:
            SyncResult with copied paths and conflict records

        Raises:
            InvalidVersionError: If version is malformed
            NotFoundError: If the template tree for version does not exist
        """
        options = options or SyncOptions()
        template_dir = self.registry.resolve(version)
        if not template_dir.is_dir():
            raise NotFoundError(
                f"Template v{version} not found: {template_dir}", str(template_dir)
            )

        target_dir = self.config.target_dir
        result = SyncResult()

        for name in PLAIN_FILES:
            src = template_dir / name
            if not src.exists():
                continue
            self._sync_item(src, target_dir / name, name, options, result)

        template_merge_root = template_dir / MERGE_ROOT
        if template_merge_root.is_dir():
            result.extend(
                self.merge_folder(template_merge_root, target_dir / MERGE_ROOT, options)
            )

        living_src = template_dir / LIVING_DOCUMENT
        if living_src.exists():
            merger = LivingDocumentMerger(transform=self._transform_for(options))
            outcome = merger.process(
                target_dir / LIVING_DOCUMENT, living_src, dry_run=options.dry_run
            )
            logger.debug(f"{LIVING_DOCUMENT}: {outcome.action.value}")
            if outcome.action != MergeAction.SKIPPED:
                result.copied.append(LIVING_DOCUMENT)

        return result

    def merge_folder(
        self, template_root: Path, target_root: Path, options: SyncOptions
    ) -> SyncResult:
        """Merge a template folder into the project entry by entry.

        Args:
            template_root: Template .claude directory
            target_root: Project .claude directory
            options: Force/dry-run/path options

        Returns:
            SyncResult for the folder's entries
        """
        result = SyncResult()

        if not options.dry_run:
            target_root.mkdir(parents=True, exist_ok=True)

        for subdir in MERGE_SUBDIRS:
            template_subdir = template_root / subdir
            if not template_subdir.is_dir():
                continue

            target_subdir = target_root / subdir
            if not options.dry_run:
                target_subdir.mkdir(parents=True, exist_ok=True)

            for item in sorted(template_subdir.iterdir(), key=lambda p: p.name):
                rel_path = f"{MERGE_ROOT}/{subdir}/{item.name}"
                self._sync_item(item, target_subdir / item.name, rel_path, options, result)

        for item in sorted(template_root.iterdir(), key=lambda p: p.name):
            if item.name in MERGE_SUBDIRS:
                continue
            rel_path = f"{MERGE_ROOT}/{item.name}"
            self._sync_item(item, target_root / item.name, rel_path, options, result)

        return result

    def _sync_item(
        self,
        src: Path,
        dest: Path,
        rel_path: str,
        options: SyncOptions,
        result: SyncResult,
    ) -> None:
        """Apply the copy/skip/overwrite rule to a single item."""
        if dest.exists() or dest.is_symlink():
            if not options.force:
                logger.debug(f"Skipping existing {rel_path}")
                result.conflicts.append(ConflictRecord(rel_path, ConflictAction.SKIPPED))
                return

            logger.debug(f"Overwriting {rel_path}")
            result.conflicts.append(ConflictRecord(rel_path, ConflictAction.OVERWRITTEN))
            if not options.dry_run:
                self._copy(src, dest, options, replace=True)
            return

        logger.debug(f"Copying {rel_path}")
        if not options.dry_run:
            self._copy(src, dest, options, replace=False)
        result.copied.append(rel_path)

    def _copy(self, src: Path, dest: Path, options: SyncOptions, replace: bool) -> None:
        copy_file = self._file_copier(options)
        # Replace the link itself, never whatever it points at
        if replace and dest.is_symlink():
            dest.unlink()

        if src.is_dir():
            if replace and dest.exists() and not dest.is_dir():
                dest.unlink()
            shutil.copytree(src, dest, copy_function=copy_file, dirs_exist_ok=True)
            return

        if replace and dest.is_dir():
            shutil.rmtree(dest)
        dest.parent.mkdir(parents=True, exist_ok=True)
        copy_file(src, dest)

    def _transform_for(self, options: SyncOptions):
        if options.paths is None or options.paths.is_default:
            return None
        paths = options.paths
        return lambda content: replace_paths_in_content(content, paths)

    def _file_copier(self, options: SyncOptions):
        transform = self._transform_for(options)
        if transform is None:
            return shutil.copy2

        def copy_markdown(src, dest):
            if Path(src).suffix.lower() != ".md":
                return shutil.copy2(src, dest)
            text = Path(src).read_text(encoding="utf-8")
            Path(dest).write_text(transform(text), encoding="utf-8")
            return dest

        return copy_markdown


__all__ = [
    "ConflictAction",
    "ConflictRecord",
    "LIVING_DOCUMENT",
    "MANAGED_ITEMS",
    "MERGE_ROOT",
    "MERGE_SUBDIRS",
    "PLAIN_FILES",
    "SyncOptions",
    "SyncResult",
    "TemplateSynchronizer",
]
