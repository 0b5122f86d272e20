"""
CLI interface using Typer with Rich integration.
"""

import json
import sys
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from .config.settings import Settings
from .core import EmptySummary, MessageComposer, ScopeCommitError
from .git_ops.repository import project_resolver, resolve_project_name
from .hooks import HookInstallError, install_hook, run_prepare_commit_msg
from .storage.scope_store import get_scope_store
from .ui.console import ScopeCommitConsole


# Create Typer app
app = typer.Typer(
    name="scope-commit",
    help="Compose type(scope): summary commit messages with remembered scopes",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=False  # Allow default command
)

# Global console for error handling
console = Console(stderr=True)


def setup_logging(log_level: str = "WARNING", log_file: Optional[Path] = None):
    """Setup logging configuration."""
    logger.remove()  # Remove default handler

    # Console logging with colors
    logger.add(
        sys.stderr,
        level=log_level,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        colorize=True
    )

    # File logging
    if log_file:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning(f"File logging disabled: {e}")
            return
        logger.add(
            log_file,
            level="DEBUG",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
            rotation="1 MB",
            retention="7 days"
        )


def _load_settings(config_file: Optional[Path], db: Optional[Path]) -> Settings:
    try:
        if config_file:
            settings = Settings.from_file(config_file)
        else:
            settings = Settings()
    except (ValidationError, json.JSONDecodeError) as e:
        # A broken config must not abort git commits run through the hook
        console.print(f"[yellow]Ignoring invalid configuration, using defaults:[/yellow] {escape(str(e))}")
        settings = Settings.defaults()
    if db:
        settings.store.path = db.expanduser()
    return settings


def _build_composer(settings: Settings, ui: ScopeCommitConsole) -> MessageComposer:
    return MessageComposer(
        store=get_scope_store(settings.store.path),
        resolve_project=project_resolver(),
        prompter=ui,
        commit_types=settings.commit.types,
    )


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    db: Optional[Path] = typer.Option(
        None, "--db",
        help="Scope database path (default: in the user config directory)"
    ),
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c",
        help="Path to configuration file"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Enable verbose logging"
    ),
    debug: bool = typer.Option(
        False, "--debug", "-d",
        help="Enable debug logging (includes verbose)"
    ),
    version: bool = typer.Option(
        False, "--version",
        help="Show version information"
    )
):
    """
    Compose structured commit messages, remembering scopes per project.

    [bold blue]Examples:[/bold blue]

    [green]scope-commit[/green]                           # Compose a message and print it
    [green]scope-commit install-hook[/green]              # Compose on every git commit
    [green]scope-commit scopes[/green]                    # Scopes known for this project
    [green]scope-commit scopes --all[/green]              # Scopes known for every project
    [green]scope-commit config --show[/green]             # Show configuration
    """
    if version:
        from . import __version__
        console.print(f"[bold blue]Scope Commit[/bold blue] version [green]{__version__}[/green]")
        raise typer.Exit()

    settings = _load_settings(config_file, db)

    # Setup logging - debug overrides verbose
    if debug:
        log_level = "DEBUG"
    elif verbose:
        log_level = "INFO"
    else:
        log_level = settings.ui.log_level
    setup_logging(log_level, settings.log_file)

    ctx.obj = settings

    # If no subcommand was called, compose a message
    if ctx.invoked_subcommand is None:
        _run_compose(settings)


@app.command()
def compose(ctx: typer.Context):
    """Compose a commit message and print it to standard output."""
    _run_compose(ctx.obj)


@app.command()
def hook(
    ctx: typer.Context,
    message_file: Path = typer.Argument(..., help="Commit message file passed by git"),
    source: Optional[str] = typer.Argument(None, help="Source of the commit message"),
    sha: Optional[str] = typer.Argument(None, help="Commit SHA for amends"),
):
    """Git prepare-commit-msg entry point."""
    settings: Settings = ctx.obj
    ui = ScopeCommitConsole(settings)
    try:
        composer = _build_composer(settings, ui)
        written = run_prepare_commit_msg(
            message_file, source, composer, settings.commit.skip_sources
        )
        logger.debug(f"prepare-commit-msg source={source} sha={sha} written={written}")
    except ScopeCommitError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except (KeyboardInterrupt, EOFError):
        # Leave the message file alone and let git open the editor
        console.print("\n[yellow]Composition cancelled[/yellow]")
    except Exception as e:
        logger.exception("Unexpected error occurred")
        console.print(f"[red]Unexpected error:[/red] {e}")
        raise typer.Exit(1)


@app.command("install-hook")
def install_hook_command(
    repo_path: Optional[Path] = typer.Option(
        None, "--repo", "-r",
        help="Git repository path (default: current directory)"
    ),
    force: bool = typer.Option(
        False, "--force", "-f",
        help="Overwrite an existing prepare-commit-msg hook"
    )
):
    """Install the git prepare-commit-msg hook."""
    try:
        hook_path = install_hook(repo_path, force=force)
    except HookInstallError as e:
        console.print(f"[red]Error:[/red] {e}")
        console.print("Use [green]--force[/green] to replace it")
        raise typer.Exit(1)
    except ScopeCommitError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except Exception as e:
        console.print(f"[red]Failed to install hook:[/red] {e}")
        raise typer.Exit(1)

    console.print(f"[green]Installed hook:[/green] {hook_path}")


@app.command()
def scopes(
    ctx: typer.Context,
    project: Optional[str] = typer.Option(
        None, "--project", "-p",
        help="Project name (default: the current project)"
    ),
    all_projects: bool = typer.Option(
        False, "--all", "-a",
        help="Show scopes for every project"
    )
):
    """Show remembered scopes."""
    settings: Settings = ctx.obj
    store = get_scope_store(settings.store.path)

    if all_projects:
        projects = store.projects()
    else:
        projects = [project or resolve_project_name()]

    ScopeCommitConsole(settings).show_scopes(
        {name: store.scopes_for_project(name) for name in projects}
    )


@app.command("project")
def project_command():
    """Show the project name scopes are remembered under."""
    typer.echo(resolve_project_name())


@app.command()
def config(
    ctx: typer.Context,
    show: bool = typer.Option(
        False, "--show", "-s",
        help="Show current configuration"
    ),
    db: Optional[Path] = typer.Option(
        None, "--set-db",
        help="Set the scope database path"
    ),
    save: bool = typer.Option(
        False, "--save",
        help="Save configuration to file"
    )
):
    """
    Manage Scope Commit configuration.

    [bold blue]Examples:[/bold blue]

    [green]scope-commit config --show[/green]                            # Show current config
    [green]scope-commit config --set-db ~/scopes.db --save[/green]       # Move the scope database
    """
    settings: Settings = ctx.obj
    ui = ScopeCommitConsole(settings)

    if show:
        ui.show_configuration()
        return

    if not db:
        console.print("[yellow]No configuration changes made[/yellow]")
        console.print("Use [green]--show[/green] to see current configuration")
        return

    settings.store.path = db.expanduser()
    console.print(f"[green]Set scope database to:[/green] {settings.store.path}")

    if save:
        try:
            config_path = settings.save_to_file()
        except OSError as e:
            console.print(f"[red]Configuration error:[/red] {e}")
            raise typer.Exit(1)
        console.print(f"[green]Configuration saved to:[/green] {config_path}")
    else:
        console.print("[yellow]Use --save to persist these changes[/yellow]")


def _run_compose(settings: Settings) -> None:
    """Run compose command."""
    ui = ScopeCommitConsole(settings)
    try:
        composer = _build_composer(settings, ui)
        message = composer.build_message()
    except EmptySummary:
        return
    except ScopeCommitError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except (KeyboardInterrupt, EOFError):
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        raise typer.Exit(130)
    except Exception as e:
        logger.exception("Unexpected error occurred")
        console.print(f"[red]Unexpected error:[/red] {e}")
        raise typer.Exit(1)

    rendered = message.render()
    ui.show_commit_message_preview(rendered)
    typer.echo(rendered, nl=False)


def main():
    """Main entry point for the CLI."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)


if __name__ == "__main__":
    main()
