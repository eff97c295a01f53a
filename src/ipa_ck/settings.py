"""Runtime configuration and tool settings.

RuntimeConfig is the explicit set of locations every component works with:
where the package is installed, where the bundled templates live, and which
project directory is being managed. It is built once by the CLI and passed into
each component constructor; components never look up paths on their own.

ToolSettings holds user preferences stored in ~/.ipa-ck/config.toml:

    backup_keep = 3              # snapshots kept after each update
    template_root = "/path/..."  # optional override of the bundled templates
"""

import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

import tomli

from ipa_ck.errors import SettingsError

logger = logging.getLogger(__name__)

PACKAGE_ROOT = Path(__file__).resolve().parent
DEFAULT_BACKUP_KEEP = 3


@dataclass(frozen=True)
class RuntimeConfig:
    """Locations used by a single ipa-ck invocation."""

    package_root: Path
    template_root: Path
    target_dir: Path

    @classmethod
    def for_target(
        cls, target_dir: Path, template_root: Path | None = None
    ) -> "RuntimeConfig":
        """Build a config for target_dir using the installed package layout.

        Args:
            target_dir: Project directory to manage
            template_root: Override for the bundled templates directory

        Returns:
            RuntimeConfig instance
        """
        return cls(
            package_root=PACKAGE_ROOT,
            template_root=Path(template_root) if template_root else PACKAGE_ROOT / "templates",
            target_dir=Path(target_dir),
        )


@dataclass
class ToolSettings:
    """User-level ipa-ck settings."""

    backup_keep: int = DEFAULT_BACKUP_KEEP
    template_root: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, excluding None values."""
        return {k: v for k, v in asdict(self).items() if v is not None}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ToolSettings":
        """Create from dictionary.

        Raises:
            SettingsError: If a value has the wrong type or range
        """
        backup_keep = data.get("backup_keep", DEFAULT_BACKUP_KEEP)
        if isinstance(backup_keep, bool) or not isinstance(backup_keep, int) or backup_keep < 0:
            raise SettingsError(f"backup_keep must be a non-negative integer, got {backup_keep!r}")

        template_root = data.get("template_root")
        if template_root is not None and not isinstance(template_root, str):
            raise SettingsError(f"template_root must be a string, got {template_root!r}")

        unknown = sorted(set(data) - {"backup_keep", "template_root"})
        if unknown:
            logger.warning(f"Ignoring unknown settings: {', '.join(unknown)}")

        return cls(backup_keep=backup_keep, template_root=template_root)


class SettingsManager:
    """Load ipa-ck settings from ~/.ipa-ck/config.toml."""

    DEFAULT_SETTINGS_DIR = Path.home() / ".ipa-ck"
    DEFAULT_SETTINGS_FILE = DEFAULT_SETTINGS_DIR / "config.toml"

    @classmethod
    def get_settings_path(cls, custom_path: str | None = None) -> Path:
        """Get settings file path.

        Args:
            custom_path: Custom settings file path (optional)

        Returns:
            Path to settings file

        Raises:
            SettingsError: If a custom path is given but does not exist
        """
        if custom_path:
            path = Path(custom_path).expanduser().resolve()
            if not path.exists():
                raise SettingsError(f"Settings file not found: {path}")
            return path

        return cls.DEFAULT_SETTINGS_FILE

    @classmethod
    def load(cls, custom_path: str | None = None) -> ToolSettings:
        """Load settings from file.

        Args:
            custom_path: Custom settings file path (optional)

        Returns:
            ToolSettings object (defaults when the file is absent)

        Raises:
            SettingsError: If the file cannot be parsed
        """
        settings_path = cls.get_settings_path(custom_path)

        if not settings_path.exists():
            logger.debug("Settings file not found, using defaults")
            return ToolSettings()

        try:
            with open(settings_path, "rb") as f:
                data = tomli.load(f)
        except (OSError, tomli.TOMLDecodeError) as e:
            raise SettingsError(f"Failed to load settings from {settings_path}: {e}") from e

        logger.debug(f"Loaded settings from: {settings_path}")
        return ToolSettings.from_dict(data)


__all__ = [
    "DEFAULT_BACKUP_KEEP",
    "PACKAGE_ROOT",
    "RuntimeConfig",
    "SettingsManager",
    "ToolSettings",
]
