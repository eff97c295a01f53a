"""Docs/plans path configuration.

The template refers to two project folders, docs/ and plans/. Projects can
rename them through a .ck.json file:

    {"paths": {"ck-docs": "documentation", "ck-plans": "roadmap"}}

Sources, highest priority first:
1. Project .ck.json (<project>/.ck.json)
2. Global ~/.claude/.ck.json
3. Defaults (docs/, plans/)
"""

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

CK_CONFIG_FILE = ".ck.json"
DEFAULT_DOCS = "docs"
DEFAULT_PLANS = "plans"

# Only standalone references: start of line, whitespace, or an opening
# bracket/quote/slash/">" before the folder name. "ipa-docs/" is left alone.
_PREFIX = r"(^|[\s(\[{/\"'`>])"


@dataclass(frozen=True)
class DocPaths:
    """Folder names the template uses for docs and plans."""

    docs: str = DEFAULT_DOCS
    plans: str = DEFAULT_PLANS

    @property
    def is_default(self) -> bool:
        return self.docs == DEFAULT_DOCS and self.plans == DEFAULT_PLANS

    @classmethod
    def cleaned(cls, docs: str, plans: str) -> "DocPaths":
        """Create from user input, dropping trailing slashes."""
        return cls(docs=docs.strip().rstrip("/"), plans=plans.strip().rstrip("/"))


@dataclass(frozen=True)
class PathSources:
    """Path settings found in each source."""

    project: DocPaths | None = None
    global_: DocPaths | None = None
    default: DocPaths = DocPaths()

    def preferred(self) -> DocPaths:
        """Highest-priority source that is configured."""
        return self.project or self.global_ or self.default

    def preferred_name(self) -> str:
        if self.project:
            return "project"
        if self.global_:
            return "global"
        return "default"


def _read_ck_config(config_path: Path) -> DocPaths | None:
    """Read docs/plans paths from a .ck.json file, None when not configured."""
    if not config_path.exists():
        return None

    try:
        config = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Ignoring invalid {config_path}: {e}")
        return None

    paths = config.get("paths") if isinstance(config, dict) else None
    if not isinstance(paths, dict):
        return None

    docs = paths.get("ck-docs")
    plans = paths.get("ck-plans")
    if not docs and not plans:
        return None

    return DocPaths(docs=docs or DEFAULT_DOCS, plans=plans or DEFAULT_PLANS)


def detect_path_sources(target_dir: Path, home_dir: Path | None = None) -> PathSources:
    """Collect path settings from every source.

    Args:
        target_dir: Project directory
        home_dir: Home directory holding .claude/.ck.json (defaults to ~)

    Returns:
        PathSources with the project and global entries filled when configured
    """
    home = Path(home_dir) if home_dir else Path.home()
    project = _read_ck_config(Path(target_dir) / CK_CONFIG_FILE)
    global_ = _read_ck_config(home / ".claude" / CK_CONFIG_FILE)
    logger.debug(f"Path sources: project={project}, global={global_}")
    return PathSources(project=project, global_=global_)


def replace_paths_in_content(content: str, paths: DocPaths) -> str:
    """Rewrite docs/ and plans/ references to the configured folder names.

    Args:
        content: File content
        paths: Configured folder names

    Returns:
        Content with references replaced (unchanged for default paths)
    """
    if paths.is_default:
        return content

    result = content
    if paths.docs != DEFAULT_DOCS:
        result = re.sub(
            _PREFIX + r"docs/",
            lambda m: f"{m.group(1)}{paths.docs}/",
            result,
            flags=re.MULTILINE,
        )
    if paths.plans != DEFAULT_PLANS:
        result = re.sub(
            _PREFIX + r"plans/",
            lambda m: f"{m.group(1)}{paths.plans}/",
            result,
            flags=re.MULTILINE,
        )
    return result


__all__ = [
    "CK_CONFIG_FILE",
    "DocPaths",
    "PathSources",
    "detect_path_sources",
    "replace_paths_in_content",
]
