"""
Test utilities for ipa-ck tests.

This module provides helper functions for building template trees and
inspecting project directories.
"""

from datetime import datetime, timedelta, timezone
from pathlib import Path

TEMPLATE_CLAUDE_MD = """# IPA Template

## IPA DOCUMENTATION WORKFLOW

Keep documentation in docs/ and plans in plans/.
"""


def write_template_version(
    template_root: Path, version: str, claude_md: str = TEMPLATE_CLAUDE_MD
) -> Path:
    """Create a minimal template tree for version under template_root."""
    tree = template_root / f"v{version}"
    (tree / ".claude" / "skills" / "ipa-docs").mkdir(parents=True)
    (tree / ".claude" / "commands").mkdir(parents=True)
    (tree / ".claude" / "workflows").mkdir(parents=True)

    (tree / "README.md").write_text(f"# Template v{version}\n\nSee docs/ for details.\n")
    (tree / "CLAUDE.md").write_text(claude_md)
    (tree / ".claude" / "settings.json").write_text('{"version": "%s"}\n' % version)
    (tree / ".claude" / "skills" / "ipa-docs" / "SKILL.md").write_text(
        "# Skill\n\nWrite docs/ files.\n"
    )
    (tree / ".claude" / "commands" / "plan.md").write_text("Write a plan in plans/.\n")
    (tree / ".claude" / "workflows" / "rules.md").write_text("# Rules\n")
    return tree


def write_manifest(template_root: Path, versions: list[str], latest: str | None = None) -> Path:
    """Write a versions.yaml listing versions."""
    lines = [f"latest: {latest or versions[0]}", "versions:"]
    for version in versions:
        lines.append(f"  - version: {version}")
        lines.append(f"    notes: Release {version}")
    path = template_root / "versions.yaml"
    path.write_text("\n".join(lines) + "\n")
    return path


def tree_snapshot(root: Path) -> dict[str, bytes]:
    """Map every file under root (relative POSIX path) to its bytes."""
    return {
        p.relative_to(root).as_posix(): p.read_bytes()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


class FakeClock:
    """Clock returning strictly increasing UTC times."""

    def __init__(self, start: datetime | None = None, step: timedelta = timedelta(seconds=1)):
        self.current = start or datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + self.step
        return value
