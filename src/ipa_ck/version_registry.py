"""Template version registry.

Maps a template version identifier to the bundled template tree and reads the
versions manifest (templates/versions.yaml):

    latest: 1.1.0
    versions:
      - version: 1.1.0
        notes: Adds plan review workflow
        recommended: true
      - version: 1.0.0
        notes: Initial release

Security:
- Version strings must match MAJOR.MINOR.PATCH exactly
- Validation happens before any path is built from the string, so values
  such as "../../etc" never reach the filesystem
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from ipa_ck.errors import InvalidVersionError, IpaCkError, NotFoundError
from ipa_ck.settings import RuntimeConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VersionInfo:
    """One entry of the versions manifest."""

    version: str
    notes: str = ""
    recommended: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VersionInfo":
        """Create from a manifest entry.

        Raises:
            IpaCkError: If the entry has no version
        """
        if not isinstance(data, dict) or "version" not in data:
            raise IpaCkError("Invalid versions manifest: entry without 'version'")
        return cls(
            version=str(data["version"]),
            notes=str(data.get("notes", "")),
            recommended=bool(data.get("recommended", False)),
        )


class VersionRegistry:
    """Resolve template versions to bundled template trees."""

    VERSION_PATTERN = re.compile(r"^\d+\.\d+\.\d+$")
    MANIFEST_NAME = "versions.yaml"

    def __init__(self, config: RuntimeConfig):
        self.config = config

    @classmethod
    def validate(cls, version: str) -> bool:
        """Check that version is a plain numeric MAJOR.MINOR.PATCH triple."""
        return isinstance(version, str) and bool(cls.VERSION_PATTERN.fullmatch(version))

    def resolve(self, version: str) -> Path:
        """Get the template tree location for version.

        Args:
            version: Template version (e.g. "1.0.0")

        Returns:
            Path to the template directory (existence is not checked)

        Raises:
            InvalidVersionError: If version is not a MAJOR.MINOR.PATCH triple
        """
        if not self.validate(version):
            raise InvalidVersionError(f"Invalid version format: {version}. Expected X.Y.Z")
        return self.config.template_root / f"v{version}"

    @property
    def manifest_path(self) -> Path:
        return self.config.template_root / self.MANIFEST_NAME

    def load_manifest(self) -> tuple[list[VersionInfo], str]:
        """Read the versions manifest.

        Returns:
            Tuple of (versions, latest version string)

        Raises:
            NotFoundError: If the manifest does not exist
            IpaCkError: If the manifest is malformed
        """
        path = self.manifest_path
        if not path.exists():
            raise NotFoundError(f"Versions manifest not found: {path}", str(path))

        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise IpaCkError(f"Invalid versions manifest: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("versions"), list):
            raise IpaCkError("Invalid versions manifest: missing 'versions' list")

        versions = [VersionInfo.from_dict(entry) for entry in data["versions"]]
        for info in versions:
            if not self.validate(info.version):
                raise IpaCkError(f"Invalid versions manifest: bad version {info.version!r}")

        latest = str(data.get("latest") or (versions[0].version if versions else ""))
        logger.debug(f"Loaded {len(versions)} template version(s), latest {latest}")
        return versions, latest

    def available_versions(self) -> list[str]:
        versions, _ = self.load_manifest()
        return [info.version for info in versions]

    def latest_version(self) -> str:
        _, latest = self.load_manifest()
        return latest

    def require_available(self, version: str) -> str:
        """Ensure version is well-formed and listed in the manifest.

        Returns:
            The version, unchanged

        Raises:
            InvalidVersionError: If version is malformed or not bundled
        """
        if not self.validate(version):
            raise InvalidVersionError(f"Invalid version format: {version}. Expected X.Y.Z")
        if version not in self.available_versions():
            raise InvalidVersionError(f"Version {version} not available.")
        return version


__all__ = ["VersionInfo", "VersionRegistry"]
