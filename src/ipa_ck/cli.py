"""CLI entry point for ipa-ck.

Commands:
    ipa-ck init          # Initialize or update the template (auto-detects mode)
    ipa-ck config        # View or modify project configuration (.ipa-ck.json)
    ipa-ck update-cli    # Show how to update the CLI itself

Errors are reported as a single line on stderr with exit status 1. Set
IPA_CK_DEBUG=1 (or pass --verbose) to include a traceback for unexpected
errors.
"""

import logging
import os
import sys
from pathlib import Path
from typing import NoReturn

import click
from rich.console import Console
from rich.markup import escape

from ipa_ck import __version__
from ipa_ck.click_group import IpaCkGroup
from ipa_ck.errors import IpaCkError, NotInitializedError
from ipa_ck.orchestrator import InitOrchestrator, InitReport
from ipa_ck.path_config import DocPaths
from ipa_ck.project_state import ProjectStateStore
from ipa_ck.selection import FixedSelector, InteractiveSelector, SelectionProvider
from ipa_ck.settings import RuntimeConfig, SettingsManager, ToolSettings

logger = logging.getLogger(__name__)
console = Console(soft_wrap=True, highlight=False)

DEBUG_ENV_VAR = "IPA_CK_DEBUG"


def _debug_enabled() -> bool:
    return bool(os.environ.get(DEBUG_ENV_VAR)) or logging.getLogger().isEnabledFor(logging.DEBUG)


def handle_cli_error(error: Exception, command: str) -> NoReturn:
    """Report error as a single line and exit non-zero.

    Args:
        error: Exception raised by a command
        command: Command name used in the debug log entry
    """
    if isinstance(error, IpaCkError):
        click.echo(f"Error: {error}", err=True)
        sys.exit(error.exit_code)

    if isinstance(error, PermissionError):
        click.echo(
            "Error: Permission denied. Try running with sudo or check file permissions.",
            err=True,
        )
        sys.exit(1)

    if isinstance(error, FileNotFoundError):
        click.echo(f"Error: File not found: {error.filename or error}", err=True)
        sys.exit(1)

    click.echo(f"Unexpected error: {error}", err=True)
    if _debug_enabled():
        logger.exception(f"Unexpected error in {command}")
    sys.exit(1)


def _info(message: str) -> None:
    console.print(f"[blue]ℹ[/blue] {message}")


def _success(message: str) -> None:
    console.print(f"[green]✓[/green] {message}")


def _warn(message: str) -> None:
    console.print(f"[yellow]⚠[/yellow] {message}")


def _dim(message: str) -> None:
    console.print(f"[dim]{message}[/dim]")


def _runtime_config(ctx: click.Context) -> tuple[RuntimeConfig, ToolSettings]:
    settings = SettingsManager.load(ctx.obj.get("settings_path") if ctx.obj else None)
    config = RuntimeConfig.for_target(
        Path.cwd(),
        template_root=Path(settings.template_root).expanduser() if settings.template_root else None,
    )
    return config, settings


@click.group(cls=IpaCkGroup, context_settings={"help_option_names": ["--help", "-h"]})
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option(
    "--settings",
    "settings_path",
    type=click.Path(dir_okay=False),
    help="Settings file (default: ~/.ipa-ck/config.toml)",
)
@click.version_option(version=__version__, prog_name="ipa-ck")
@click.pass_context
def main(ctx: click.Context, verbose: bool, settings_path: str | None) -> None:
    """ipa-ck - Initialize and manage the IPA documentation workflow template.

    \b
    EXAMPLES:
        # Install or update the template (prompts for a version)
        $ ipa-ck init

        # Preview an update without touching any file
        $ ipa-ck init --version 1.1.0 --dry-run

        # Show project configuration
        $ ipa-ck config --list

    For help on any command: ipa-ck <command> --help
    """
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    ctx.ensure_object(dict)
    ctx.obj["settings_path"] = settings_path


def _build_selector(
    version: str | None, docs_path: str | None, plans_path: str | None
) -> SelectionProvider:
    if version is None and docs_path is None and plans_path is None:
        return InteractiveSelector()

    paths = None
    if docs_path is not None or plans_path is not None:
        defaults = DocPaths()
        paths = DocPaths.cleaned(docs_path or defaults.docs, plans_path or defaults.plans)
    return FixedSelector(version=version, paths=paths)


def _print_dry_run(report: InitReport) -> None:
    action = "update" if report.is_update else "initialize"
    _info(escape(f"[DRY RUN] Would {action} template v{report.version}"))
    console.print("Files to copy:")
    for path in report.sync.copied:
        console.print(f"  [COPY] {path}", markup=False)
    for conflict in report.sync.conflicts:
        console.print(f"  [{conflict.action.value.upper()}] {conflict.path}", markup=False)


def _print_result(report: InitReport) -> None:
    if report.backup_path is not None:
        _info("Created backup of existing template files")
        _dim(f"Backup: {escape(str(report.backup_path))}")
    for pruned in report.pruned:
        _dim(f"Removed old backup: {escape(pruned.name)}")

    if report.is_update and report.previous_version != report.version:
        _success(f"Template updated v{report.previous_version} → v{report.version}")
    elif report.is_update:
        _success(f"Template refreshed v{report.version}")
    else:
        _success(f"Template v{report.version} initialized")

    if report.sync.copied:
        _dim(f"Copied: {escape(', '.join(report.sync.copied))}")
    if report.sync.overwritten:
        _dim(f"Overwritten: {escape(', '.join(report.sync.overwritten))}")
    if report.sync.skipped:
        _warn(
            f"Skipped {len(report.sync.skipped)} existing item(s) "
            f"(use --force to overwrite): {escape(', '.join(report.sync.skipped))}"
        )


@main.command(name="init")
@click.option("--version", "version", metavar="X.Y.Z", help="Template version (skips the prompt)")
@click.option("--docs-path", help="Docs folder name used by the template")
@click.option("--plans-path", help="Plans folder name used by the template")
@click.option("--force", is_flag=True, help="Overwrite existing template items")
@click.option("--dry-run", is_flag=True, help="Show what would be done without making changes")
@click.pass_context
def init_command(
    ctx: click.Context,
    version: str | None,
    docs_path: str | None,
    plans_path: str | None,
    force: bool,
    dry_run: bool,
):
    """Initialize or update the IPA template (auto-detects mode).

    In a directory without .ipa-ck.json the template is installed. Otherwise
    the current template files are backed up to .ipa-ck/backup/ and the
    selected version is merged in. Existing skills, commands and workflows
    are kept unless --force is given; CLAUDE.md is always merged.

    \b
    Examples:
        ipa-ck init
        ipa-ck init --version 1.0.0
        ipa-ck init --version 1.1.0 --force
        ipa-ck init --dry-run
    """
    try:
        config, settings = _runtime_config(ctx)
        orchestrator = InitOrchestrator(
            config,
            _build_selector(version, docs_path, plans_path),
            backup_keep=settings.backup_keep,
        )
        report = orchestrator.run(force=force, dry_run=dry_run)

        if dry_run:
            _print_dry_run(report)
        else:
            _print_result(report)

    except click.exceptions.Abort:
        raise
    except Exception as e:
        handle_cli_error(e, "init")


@main.command(name="config")
@click.option("--list", "list_all", is_flag=True, help="List all configuration")
@click.option("--get", "get_key", metavar="KEY", help="Get specific config value")
@click.option("--set", "set_pair", nargs=2, metavar="KEY VALUE", help="Set config value")
def config_command(list_all: bool, get_key: str | None, set_pair: tuple[str, str] | None):
    """View or modify project configuration (.ipa-ck.json).

    Only template-version, cli-version, initialized-at and last-updated can
    be set.

    \b
    Examples:
        ipa-ck config --list
        ipa-ck config --get template-version
        ipa-ck config --set template-version 1.1.0
    """
    try:
        store = ProjectStateStore(Path.cwd())
        data = store.read_raw()
        if data is None:
            raise NotInitializedError("Not an IPA project. Run: ipa-ck init")

        if not list_all and get_key:
            click.echo(store.get_value(get_key))
            return

        if not list_all and set_pair:
            key, value = set_pair
            store.set_value(key, value)
            _success(f"Set {escape(key)} = {escape(value)}")
            return

        console.print()
        console.print("IPA-CK Configuration:")
        console.print()
        for key, value in data.items():
            console.print(f"  {key}: {value}", markup=False)
        console.print()

    except Exception as e:
        handle_cli_error(e, "config")


@main.command(name="update-cli")
def update_cli_command():
    """Show instructions to update the CLI."""
    console.print()
    _info(f"Current CLI version: v{__version__}")
    console.print()
    console.print("To update the CLI, run:")
    console.print()
    console.print("  pip install --upgrade ipa-ck")
    console.print()
    _dim("This will fetch the latest version from PyPI.")


if __name__ == "__main__":
    main()


__all__ = ["handle_cli_error", "main"]
