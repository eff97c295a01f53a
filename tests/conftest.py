"""
Shared test fixtures for ipa-ck tests.

This module provides common fixtures used across all test types:
- A small template root with two versions and a manifest
- A RuntimeConfig pointing at an empty project directory
- A deterministic clock for backup snapshots
"""

import pytest

from ipa_ck.settings import RuntimeConfig
from tests.utils import TEMPLATE_CLAUDE_MD, FakeClock, write_manifest, write_template_version

# ============================================================================
# DIRECTORY FIXTURES
# ============================================================================


@pytest.fixture
def template_root(tmp_path):
    """Template root with versions 1.0.0 and 2.0.0 and a manifest."""
    root = tmp_path / "templates"
    root.mkdir()
    write_template_version(root, "1.0.0")
    write_template_version(
        root,
        "2.0.0",
        claude_md=TEMPLATE_CLAUDE_MD + "\n### Review\n- Review every plan.\n",
    )
    write_manifest(root, ["2.0.0", "1.0.0"], latest="2.0.0")
    return root


@pytest.fixture
def project_dir(tmp_path):
    """Empty project directory."""
    project = tmp_path / "project"
    project.mkdir()
    return project


@pytest.fixture
def runtime_config(template_root, project_dir):
    """RuntimeConfig using the test template root and project directory."""
    return RuntimeConfig(
        package_root=template_root.parent,
        template_root=template_root,
        target_dir=project_dir,
    )


# ============================================================================
# CLOCK FIXTURES
# ============================================================================


@pytest.fixture
def fake_clock():
    """Clock that advances one second per call."""
    return FakeClock()
