"""
Unit tests for living_document module.

Tests marker wrapping, section extraction, the three merge cases, and the
create/skip/merge decisions of LivingDocumentMerger.process.
"""

import pytest

from ipa_ck.living_document import (
    LEGACY_HEADING,
    SECTION_END,
    SECTION_START,
    LivingDocumentMerger,
    MergeAction,
    extract_section,
    has_managed_content,
    merge,
    wrap,
)

TEMPLATE = "# IPA Template\n\n## IPA DOCUMENTATION WORKFLOW\n\nUse docs/ and plans/.\n"
TEMPLATE_V2 = TEMPLATE + "\n### Review\n- Review plans.\n"


# ============================================================================
# WRAP / EXTRACT TESTS
# ============================================================================


class TestWrap:
    """Test wrapping template content in markers."""

    def test_wrap_drops_title_and_adds_markers(self):
        wrapped = wrap(TEMPLATE)
        assert wrapped.startswith(SECTION_START + "\n")
        assert wrapped.endswith(SECTION_END)
        assert "# IPA Template" not in wrapped
        assert "## IPA DOCUMENTATION WORKFLOW" in wrapped
        assert "DO NOT EDIT THIS SECTION" in wrapped

    def test_wrap_exact_layout(self):
        wrapped = wrap("# Title\nbody line\n")
        assert wrapped == (
            f"{SECTION_START}\n"
            "<!-- DO NOT EDIT THIS SECTION - Managed by ipa-ck -->\n"
            "\n"
            "body line\n"
            "\n"
            f"{SECTION_END}"
        )

    def test_wrap_single_line_content(self):
        wrapped = wrap("# Only a title")
        assert SECTION_START in wrapped and SECTION_END in wrapped


class TestExtractSection:
    """Test locating the managed section."""

    def test_extract_section_includes_markers(self):
        content = f"intro\n{wrap(TEMPLATE)}\noutro\n"
        assert extract_section(content) == wrap(TEMPLATE)

    def test_extract_section_without_markers(self):
        assert extract_section("just user content") is None

    def test_extract_section_without_end_marker(self):
        assert extract_section(f"intro\n{SECTION_START}\nbody") is None

    def test_has_managed_content(self):
        assert has_managed_content(wrap(TEMPLATE))
        assert has_managed_content(f"# Mine\n\n{LEGACY_HEADING}\n")
        assert not has_managed_content("# Mine\n")


# ============================================================================
# MERGE TESTS
# ============================================================================


class TestMerge:
    """Test merging template content into existing documents."""

    def test_replaces_marked_section_only(self):
        existing = f"# My Project\n\nMy notes.\n\n{wrap(TEMPLATE)}\n\n## After\nMore notes.\n"
        merged = merge(existing, TEMPLATE_V2)

        assert merged.startswith("# My Project\n\nMy notes.\n\n")
        assert merged.endswith("\n\n## After\nMore notes.\n")
        assert extract_section(merged) == wrap(TEMPLATE_V2)
        assert merged.count(SECTION_START) == 1

    def test_missing_end_marker_replaces_to_end(self):
        existing = f"# Mine\n\n{SECTION_START}\nbroken section"
        merged = merge(existing, TEMPLATE)
        assert merged == f"# Mine\n\n{wrap(TEMPLATE)}"

    def test_legacy_content_appends_without_dedup(self):
        existing = f"# Mine\n\n{LEGACY_HEADING}\n\nold copy\n"
        merged = merge(existing, TEMPLATE)

        assert merged.startswith(existing)
        assert merged == existing + "\n\n---\n\n" + wrap(TEMPLATE)
        assert merged.count(LEGACY_HEADING) == 2

    def test_plain_content_appends_after_trimmed_existing(self):
        existing = "\n\n# Mine\n\nNotes.\n\n\n"
        merged = merge(existing, TEMPLATE)
        assert merged == "# Mine\n\nNotes.\n\n---\n\n" + wrap(TEMPLATE)

    def test_merge_is_stable(self):
        existing = "# Mine\n"
        once = merge(existing, TEMPLATE)
        twice = merge(once, TEMPLATE)
        assert once == twice


# ============================================================================
# PROCESS TESTS
# ============================================================================


class TestProcess:
    """Test LivingDocumentMerger.process decisions."""

    @pytest.fixture
    def template_path(self, tmp_path):
        path = tmp_path / "template" / "CLAUDE.md"
        path.parent.mkdir()
        path.write_text(TEMPLATE)
        return path

    def test_creates_missing_document(self, tmp_path, template_path):
        target = tmp_path / "CLAUDE.md"
        outcome = LivingDocumentMerger().process(target, template_path)

        assert outcome.action == MergeAction.CREATED
        assert target.read_text() == f"# CLAUDE.md\n\n{wrap(TEMPLATE)}"

    def test_merges_into_user_document(self, tmp_path, template_path):
        target = tmp_path / "CLAUDE.md"
        target.write_text("# My rules\n\nBe nice.\n")

        outcome = LivingDocumentMerger().process(target, template_path)

        assert outcome.action == MergeAction.MERGED
        content = target.read_text()
        assert content.startswith("# My rules\n\nBe nice.\n\n---\n\n")
        assert extract_section(content) == wrap(TEMPLATE)

    def test_idempotent(self, tmp_path, template_path):
        target = tmp_path / "CLAUDE.md"
        target.write_text("# My rules\n")
        merger = LivingDocumentMerger()

        first = merger.process(target, template_path)
        after_first = target.read_bytes()
        second = merger.process(target, template_path)

        assert first.action == MergeAction.MERGED
        assert second.action == MergeAction.SKIPPED
        assert target.read_bytes() == after_first

    def test_idempotent_after_create(self, tmp_path, template_path):
        target = tmp_path / "CLAUDE.md"
        merger = LivingDocumentMerger()

        assert merger.process(target, template_path).action == MergeAction.CREATED
        after_first = target.read_bytes()
        assert merger.process(target, template_path).action == MergeAction.SKIPPED
        assert target.read_bytes() == after_first

    def test_changed_template_merges_again(self, tmp_path, template_path):
        target = tmp_path / "CLAUDE.md"
        merger = LivingDocumentMerger()
        merger.process(target, template_path)

        template_path.write_text(TEMPLATE_V2)
        outcome = merger.process(target, template_path)

        assert outcome.action == MergeAction.MERGED
        assert extract_section(target.read_text()) == wrap(TEMPLATE_V2)

    def test_dry_run_create_writes_nothing(self, tmp_path, template_path):
        target = tmp_path / "CLAUDE.md"
        outcome = LivingDocumentMerger().process(target, template_path, dry_run=True)
        assert outcome.action == MergeAction.CREATED
        assert not target.exists()

    def test_dry_run_merge_writes_nothing(self, tmp_path, template_path):
        target = tmp_path / "CLAUDE.md"
        target.write_text("# Mine\n")
        outcome = LivingDocumentMerger().process(target, template_path, dry_run=True)
        assert outcome.action == MergeAction.MERGED
        assert target.read_text() == "# Mine\n"

    def test_transform_applied_before_wrapping(self, tmp_path, template_path):
        target = tmp_path / "CLAUDE.md"
        merger = LivingDocumentMerger(transform=lambda text: text.replace("docs/", "wiki/"))
        merger.process(target, template_path)

        content = target.read_text()
        assert "Use wiki/ and plans/." in content
        assert merger.process(target, template_path).action == MergeAction.SKIPPED
