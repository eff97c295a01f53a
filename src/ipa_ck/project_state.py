"""Project state storage.

A managed project carries a .ipa-ck.json file at its root:

    {
      "template-version": "1.0.0",
      "cli-version": "1.0.0",
      "initialized-at": "2026-10-19T08:15:30.123Z",
      "last-updated": "2026-10-20T09:00:00.000Z"
    }

Its presence is what tells init apart from update. The store is a plain
read-modify-write primitive; deciding which fields to set belongs to the
caller.

Security:
- Only allow-listed keys can be set from the config command
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ipa_ck.errors import (
    InvalidConfigKeyError,
    IpaCkError,
    NotInitializedError,
    PermissionDeniedError,
)

logger = logging.getLogger(__name__)

STATE_FILE_NAME = ".ipa-ck.json"

KEY_TEMPLATE_VERSION = "template-version"
KEY_CLI_VERSION = "cli-version"
KEY_INITIALIZED_AT = "initialized-at"
KEY_LAST_UPDATED = "last-updated"

# Keys the config command may set, in file order
ALLOWED_KEYS = (
    KEY_TEMPLATE_VERSION,
    KEY_CLI_VERSION,
    KEY_INITIALIZED_AT,
    KEY_LAST_UPDATED,
)


@dataclass
class ProjectState:
    """Persisted record of the installed template."""

    template_version: str | None = None
    cli_version: str | None = None
    initialized_at: str | None = None
    last_updated: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the on-disk mapping, excluding None values."""
        data = {
            KEY_TEMPLATE_VERSION: self.template_version,
            KEY_CLI_VERSION: self.cli_version,
            KEY_INITIALIZED_AT: self.initialized_at,
            KEY_LAST_UPDATED: self.last_updated,
        }
        return {k: v for k, v in data.items() if v is not None}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProjectState":
        return cls(
            template_version=data.get(KEY_TEMPLATE_VERSION),
            cli_version=data.get(KEY_CLI_VERSION),
            initialized_at=data.get(KEY_INITIALIZED_AT),
            last_updated=data.get(KEY_LAST_UPDATED),
        )


class ProjectStateStore:
    """Read and write .ipa-ck.json in a project directory."""

    def __init__(self, target_dir: Path):
        self.target_dir = Path(target_dir)

    @property
    def path(self) -> Path:
        return self.target_dir / STATE_FILE_NAME

    def exists(self) -> bool:
        return self.path.exists()

    def read_raw(self) -> dict[str, Any] | None:
        """Read the state mapping as stored, or None when absent.

        Raises:
            IpaCkError: If the file is not a JSON object
        """
        if not self.path.exists():
            return None

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except PermissionError as e:
            raise PermissionDeniedError(f"Permission denied: {self.path}", str(self.path)) from e
        except (OSError, json.JSONDecodeError) as e:
            raise IpaCkError(f"Failed to read {STATE_FILE_NAME}: {e}") from e

        if not isinstance(data, dict):
            raise IpaCkError(f"Failed to read {STATE_FILE_NAME}: expected a JSON object")
        return data

    def read(self) -> ProjectState | None:
        """Load project state, or None when the project is not initialized."""
        data = self.read_raw()
        return ProjectState.from_dict(data) if data is not None else None

    def write(self, patch: dict[str, Any]) -> dict[str, Any]:
        """Merge patch into the stored state and save it.

        Args:
            patch: Keys to set (creates the file when absent)

        Returns:
            The mapping as written
        """
        data = self.read_raw() or {}
        data.update(patch)
        self._save(data)
        return data

    def _save(self, data: dict[str, Any]) -> None:
        temp_path = self.path.with_suffix(".tmp")
        try:
            temp_path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
            temp_path.replace(self.path)
        except PermissionError as e:
            if temp_path.exists():
                temp_path.unlink()
            raise PermissionDeniedError(f"Permission denied: {self.path}", str(self.path)) from e
        logger.debug(f"Saved project state to: {self.path}")

    def get_value(self, key: str) -> Any:
        """Get one stored value.

        Raises:
            NotInitializedError: If the project has no state file
            IpaCkError: If key is not present
        """
        data = self.read_raw()
        if data is None:
            raise NotInitializedError("Not an IPA project. Run: ipa-ck init")
        if key not in data:
            raise IpaCkError(f"Key not found: {key}")
        return data[key]

    def set_value(self, key: str, value: str) -> dict[str, Any]:
        """Set one allow-listed key.

        Raises:
            InvalidConfigKeyError: If key is not allow-listed
            NotInitializedError: If the project has no state file
        """
        if key not in ALLOWED_KEYS:
            raise InvalidConfigKeyError(
                f"Invalid key: {key}. Allowed keys: {', '.join(ALLOWED_KEYS)}"
            )
        if not self.exists():
            raise NotInitializedError("Not an IPA project. Run: ipa-ck init")
        return self.write({key: value})


__all__ = [
    "ALLOWED_KEYS",
    "KEY_CLI_VERSION",
    "KEY_INITIALIZED_AT",
    "KEY_LAST_UPDATED",
    "KEY_TEMPLATE_VERSION",
    "ProjectState",
    "ProjectStateStore",
    "STATE_FILE_NAME",
]
