"""CLAUDE.md merge support.

The template's CLAUDE.md is never copied over a user's file. Its content is
wrapped in markers and merged into the existing document:

    <!-- IPA-TEMPLATE-START -->
    <!-- DO NOT EDIT THIS SECTION - Managed by ipa-ck -->

    ...template content...

    <!-- IPA-TEMPLATE-END -->

Anything outside these markers belongs to the user and is preserved.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)

SECTION_START = "<!-- IPA-TEMPLATE-START -->"
SECTION_END = "<!-- IPA-TEMPLATE-END -->"
SECTION_NOTICE = "<!-- DO NOT EDIT THIS SECTION - Managed by ipa-ck -->"
LEGACY_HEADING = "## IPA DOCUMENTATION WORKFLOW"
DEFAULT_TITLE = "# CLAUDE.md"
SEPARATOR = "\n\n---\n\n"


class MergeAction(str, Enum):
    CREATED = "created"
    SKIPPED = "skipped"
    MERGED = "merged"


@dataclass(frozen=True)
class MergeOutcome:
    """Result of processing the living document."""

    action: MergeAction
    message: str


def wrap(content: str) -> str:
    """Wrap template content in managed-section markers.

    The first line (the document title) is dropped since the section lives
    under the target document's own heading.
    """
    body = "\n".join(content.split("\n")[1:]).strip()
    return f"{SECTION_START}\n{SECTION_NOTICE}\n\n{body}\n\n{SECTION_END}"


def has_managed_content(content: str) -> bool:
    """Check for a marked section or the unmarked legacy heading."""
    return SECTION_START in content or LEGACY_HEADING in content


def _section_bounds(content: str) -> tuple[int, int] | None:
    start = content.find(SECTION_START)
    if start == -1:
        return None
    end = content.find(SECTION_END, start)
    if end == -1:
        return start, len(content)
    return start, end + len(SECTION_END)


def extract_section(content: str) -> str | None:
    """Return the marked section (markers included), or None."""
    start = content.find(SECTION_START)
    end = content.find(SECTION_END, start) if start != -1 else -1
    if start == -1 or end == -1:
        return None
    return content[start : end + len(SECTION_END)]


def merge(existing_content: str, template_content: str) -> str:
    """Merge template content into an existing document.

    Args:
        existing_content: Current target document
        template_content: Raw template document (title on the first line)

    Returns:
        Merged document
    """
    wrapped = wrap(template_content)

    bounds = _section_bounds(existing_content)
    if bounds is not None:
        start, end = bounds
        return existing_content[:start] + wrapped + existing_content[end:]

    if LEGACY_HEADING in existing_content:
        # Legacy unmarked copy is kept as is; the marked section goes after it.
        return existing_content + SEPARATOR + wrapped

    return existing_content.strip() + SEPARATOR + wrapped


class LivingDocumentMerger:
    """Create or update CLAUDE.md from the template copy."""

    def __init__(self, transform: Callable[[str], str] | None = None):
        """Initialize merger.

        Args:
            transform: Optional rewrite applied to template text before wrapping
        """
        self.transform = transform

    def _read_template(self, template_path: Path) -> str:
        content = Path(template_path).read_text(encoding="utf-8")
        if self.transform:
            content = self.transform(content)
        return content

    def process(
        self, target_path: Path, template_path: Path, dry_run: bool = False
    ) -> MergeOutcome:
        """Merge or create the target document.

        Args:
            target_path: Path to the project's CLAUDE.md
            template_path: Path to the template's CLAUDE.md
            dry_run: Compute the action without writing

        Returns:
            MergeOutcome describing what was (or would be) done
        """
        target_path = Path(target_path)
        template_content = self._read_template(template_path)

        if not target_path.exists():
            if not dry_run:
                target_path.write_text(
                    f"{DEFAULT_TITLE}\n\n{wrap(template_content)}", encoding="utf-8"
                )
            logger.debug(f"Created {target_path}")
            return MergeOutcome(MergeAction.CREATED, "CLAUDE.md created with IPA template")

        existing_content = target_path.read_text(encoding="utf-8")

        if SECTION_START in existing_content:
            if extract_section(existing_content) == wrap(template_content):
                return MergeOutcome(MergeAction.SKIPPED, "CLAUDE.md already up-to-date")

        merged = merge(existing_content, template_content)
        if not dry_run:
            target_path.write_text(merged, encoding="utf-8")
        logger.debug(f"Merged template section into {target_path}")
        return MergeOutcome(MergeAction.MERGED, "CLAUDE.md updated with IPA template")


__all__ = [
    "LEGACY_HEADING",
    "LivingDocumentMerger",
    "MergeAction",
    "MergeOutcome",
    "SECTION_END",
    "SECTION_START",
    "extract_section",
    "has_managed_content",
    "merge",
    "wrap",
]
