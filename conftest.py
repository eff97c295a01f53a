"""Pytest configuration and fixtures for ipa-ck tests.

CRITICAL: Keeps tests away from the real ~/.ipa-ck settings and ~/.claude.
"""

import pytest


@pytest.fixture(autouse=True)
def isolated_home(tmp_path_factory, monkeypatch):
    """Point HOME and the settings file at a throwaway directory.

    Tests should NEVER read the developer's ~/.ipa-ck/config.toml or
    ~/.claude/.ck.json, since either would change which template root and
    docs/plans paths a run uses.
    """
    home_dir = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home_dir))
    monkeypatch.delenv("IPA_CK_DEBUG", raising=False)

    from ipa_ck.settings import SettingsManager

    monkeypatch.setattr(SettingsManager, "DEFAULT_SETTINGS_DIR", home_dir / ".ipa-ck")
    monkeypatch.setattr(
        SettingsManager, "DEFAULT_SETTINGS_FILE", home_dir / ".ipa-ck" / "config.toml"
    )
    return home_dir
