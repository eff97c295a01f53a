"""Version and path selection.

The init workflow asks a SelectionProvider which template version to install
and which docs/plans folder names to use. The CLI picks the implementation:

- InteractiveSelector prompts on the terminal
- FixedSelector returns values given up front (--version, --docs-path, ...)
"""

import logging
from typing import Protocol

import click

from ipa_ck.errors import InvalidVersionError
from ipa_ck.path_config import DocPaths, PathSources
from ipa_ck.version_registry import VersionInfo, VersionRegistry

logger = logging.getLogger(__name__)


class SelectionProvider(Protocol):
    """Supplies the choices the init workflow needs."""

    def select_version(self, versions: list[VersionInfo], latest: str) -> str: ...

    def select_paths(self, sources: PathSources) -> DocPaths: ...


class FixedSelector:
    """Return preselected values without prompting."""

    def __init__(self, version: str | None = None, paths: DocPaths | None = None):
        """Initialize selector.

        Args:
            version: Template version to install (None selects the latest)
            paths: Folder names to use (None uses the highest-priority source)
        """
        self.version = version
        self.paths = paths

    def select_version(self, versions: list[VersionInfo], latest: str) -> str:
        """Return the fixed version after checking it is bundled.

        Raises:
            InvalidVersionError: If the version is malformed or not in the manifest
        """
        version = self.version or latest
        if not VersionRegistry.validate(version):
            raise InvalidVersionError(f"Invalid version format: {version}. Expected X.Y.Z")
        if version not in [info.version for info in versions]:
            raise InvalidVersionError(f"Version {version} not available.")
        return version

    def select_paths(self, sources: PathSources) -> DocPaths:
        return self.paths or sources.preferred()


class InteractiveSelector:
    """Prompt the user on the terminal."""

    def select_version(self, versions: list[VersionInfo], latest: str) -> str:
        """Show a numbered version list and prompt for a choice.

        Args:
            versions: Bundled versions
            latest: Version offered as default

        Returns:
            Selected version string

        Raises:
            InvalidVersionError: If no versions are bundled
        """
        if not versions:
            raise InvalidVersionError("No template versions available.")

        click.echo()
        click.echo(click.style("Select template version", fg="cyan", bold=True))
        click.echo()

        default_index = 1
        for i, info in enumerate(versions, 1):
            markers = ""
            if info.version == latest:
                markers += " (latest)"
                default_index = i
            if info.recommended:
                markers += " *"
            notes = f" - {info.notes}" if info.notes else ""
            click.echo(f"  {i}. v{info.version}{markers}{notes}")

        click.echo()
        choice = click.prompt(
            "Version",
            type=click.IntRange(1, len(versions)),
            default=default_index,
            show_default=True,
        )
        selected = versions[choice - 1].version
        logger.debug(f"Selected template version: {selected}")
        return selected

    def select_paths(self, sources: PathSources) -> DocPaths:
        """Prompt for the docs/plans path source or custom folder names.

        Args:
            sources: Detected path settings

        Returns:
            Selected folder names
        """
        choices: list[tuple[str, str, DocPaths | None]] = [
            ("default", "Default (docs/, plans/)", sources.default),
        ]
        if sources.project:
            choices.append(
                (
                    "project",
                    f"Project .ck.json ({sources.project.docs}/, {sources.project.plans}/)",
                    sources.project,
                )
            )
        if sources.global_:
            choices.append(
                (
                    "global",
                    f"Global ~/.claude/.ck.json ({sources.global_.docs}/, {sources.global_.plans}/)",
                    sources.global_,
                )
            )
        choices.append(("custom", "Custom (enter manually)", None))

        click.echo()
        click.echo(click.style("Select docs/plans paths", fg="cyan", bold=True))
        click.echo()
        default_index = 1
        for i, (key, label, _) in enumerate(choices, 1):
            if key == sources.preferred_name():
                default_index = i
            click.echo(f"  {i}. {label}")

        click.echo()
        choice = click.prompt(
            "Path source",
            type=click.IntRange(1, len(choices)),
            default=default_index,
            show_default=True,
        )
        key, _, paths = choices[choice - 1]
        if paths is not None:
            logger.debug(f"Selected {key} paths: {paths}")
            return paths

        preferred = sources.preferred()
        docs = click.prompt("Docs path", default=preferred.docs, value_proc=_non_empty)
        plans = click.prompt("Plans path", default=preferred.plans, value_proc=_non_empty)
        return DocPaths.cleaned(docs, plans)


def _non_empty(value: str) -> str:
    if not value or not value.strip():
        raise click.BadParameter("Path cannot be empty")
    return value


__all__ = ["FixedSelector", "InteractiveSelector", "SelectionProvider"]
