"""Init/update workflow.

A single init command handles both cases:

1. No .ipa-ck.json: install the selected template version (init)
2. .ipa-ck.json present: snapshot managed files, prune old snapshots, then
   copy the selected version over the project (update)

Project state is written last: template-version and cli-version every run,
initialized-at only on the first run, last-updated only on updates.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from ipa_ck import __version__
from ipa_ck.backup_manager import BackupManager, iso_timestamp, utc_now
from ipa_ck.errors import IpaCkError, NotFoundError, PermissionDeniedError
from ipa_ck.path_config import DocPaths, detect_path_sources
from ipa_ck.project_state import (
    KEY_CLI_VERSION,
    KEY_INITIALIZED_AT,
    KEY_LAST_UPDATED,
    KEY_TEMPLATE_VERSION,
    ProjectStateStore,
)
from ipa_ck.selection import SelectionProvider
from ipa_ck.settings import DEFAULT_BACKUP_KEEP, RuntimeConfig
from ipa_ck.template_sync import SyncOptions, SyncResult, TemplateSynchronizer
from ipa_ck.version_registry import VersionRegistry

logger = logging.getLogger(__name__)


@dataclass
class InitReport:
    """What an init/update run did."""

    version: str
    is_update: bool
    dry_run: bool
    previous_version: str | None = None
    paths: DocPaths = field(default_factory=DocPaths)
    backup_path: Path | None = None
    pruned: list[Path] = field(default_factory=list)
    sync: SyncResult = field(default_factory=SyncResult)


class InitOrchestrator:
    """Coordinate version selection, backup, copy and state update."""

    def __init__(
        self,
        config: RuntimeConfig,
        selector: SelectionProvider,
        backup_keep: int = DEFAULT_BACKUP_KEEP,
        cli_version: str = __version__,
        home_dir: Path | None = None,
        backup_manager: BackupManager | None = None,
    ):
        """Initialize orchestrator.

        Args:
            config: Runtime locations
            selector: Supplies version and docs/plans path choices
            backup_keep: Snapshots kept after an update
            cli_version: Version recorded as cli-version
            home_dir: Home directory for global .ck.json lookup (defaults to ~)
            backup_manager: Custom backup manager (tests inject a clock)
        """
        self.config = config
        self.selector = selector
        self.backup_keep = backup_keep
        self.cli_version = cli_version
        self.home_dir = home_dir
        self.registry = VersionRegistry(config)
        self.synchronizer = TemplateSynchronizer(config, self.registry)
        self.backups = backup_manager or BackupManager(config)
        self.store = ProjectStateStore(config.target_dir)

    def run(self, force: bool = False, dry_run: bool = False) -> InitReport:
        """Run init or update depending on existing project state.

        Args:
            force: Overwrite existing template items
            dry_run: Report planned changes without writing

        Returns:
            InitReport

        Raises:
            IpaCkError: On version, permission or missing-file failures
        """
        previous = self.store.read()
        is_update = previous is not None

        versions, latest = self.registry.load_manifest()
        version = self.registry.require_available(
            self.selector.select_version(versions, latest)
        )

        paths = self.selector.select_paths(
            detect_path_sources(self.config.target_dir, self.home_dir)
        )

        report = InitReport(
            version=version,
            is_update=is_update,
            dry_run=dry_run,
            previous_version=previous.template_version if previous else None,
            paths=paths,
        )
        options = SyncOptions(force=force, dry_run=dry_run, paths=paths)

        if dry_run:
            report.sync = self._guarded(lambda: self.synchronizer.copy(version, options))
            return report

        if is_update:
            report.backup_path = self._guarded(self.backups.snapshot)
            # The snapshot just taken is the recovery point for this run
            report.pruned = self._guarded(
                lambda: self.backups.prune(self.backup_keep, protect=report.backup_path)
            )
            logger.debug(f"Backup: {report.backup_path}")

        try:
            report.sync = self._guarded(lambda: self.synchronizer.copy(version, options))
        except IpaCkError as e:
            if report.backup_path is not None:
                raise type(e)(f"{e} (restore from backup: {report.backup_path})") from e
            raise

        now = iso_timestamp(utc_now())
        patch = {
            KEY_TEMPLATE_VERSION: version,
            KEY_CLI_VERSION: self.cli_version,
            KEY_INITIALIZED_AT: (previous and previous.initialized_at) or now,
        }
        if is_update:
            patch[KEY_LAST_UPDATED] = now
        self._guarded(lambda: self.store.write(patch))

        return report

    @staticmethod
    def _guarded(operation):
        """Run operation, converting filesystem errors into ipa-ck errors."""
        try:
            return operation()
        except PermissionError as e:
            raise PermissionDeniedError(
                f"Permission denied: {e.filename or e}", e.filename
            ) from e
        except FileNotFoundError as e:
            raise NotFoundError(f"File not found: {e.filename or e}", e.filename) from e
        except OSError as e:
            raise IpaCkError(f"Filesystem error: {e}") from e


__all__ = ["InitOrchestrator", "InitReport"]
