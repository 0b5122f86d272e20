"""
Console interface with Rich components and completing prompts.
"""

from typing import Dict, List, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.markup import escape
from rich.prompt import Prompt
from rich.table import Table
from rich.theme import Theme

from ..config.settings import Settings


class ScopeCommitConsole:
    """Console interface for Scope Commit. Also acts as the composer's prompter."""

    def __init__(self, settings: Settings, console: Optional[Console] = None):
        """Initialize console with settings."""
        self.settings = settings
        self._setup_styles()
        if console is None:
            console = Console(
                color_system="auto" if settings.ui.use_colors else None,
                theme=self.theme,
                stderr=True
            )
        else:
            console.push_theme(self.theme)
        self.console = console

    def _setup_styles(self) -> None:
        """Setup custom styles for consistent theming."""
        self.styles = {
            "title": "bold blue",
            "success": "bold green",
            "warning": "bold yellow",
            "error": "bold red",
            "info": "blue",
            "muted": "dim",
            "commit_type": "bold magenta",
            "scope": "cyan",
        }
        self.theme = Theme(self.styles)

    # Prompts

    def ask_summary(self) -> str:
        return self._completing_input("[bold]Summary[/bold] [muted](empty to skip)[/muted]", [])

    def ask_type(self, candidates: List[str]) -> str:
        return self._completing_input("[commit_type]Type[/commit_type]", candidates)

    def ask_scope(self, candidates: List[str]) -> str:
        return self._completing_input("[scope]Scope[/scope]", candidates)

    def _completing_input(self, label: str, candidates: List[str]) -> str:
        """Read a line, offering ``candidates`` for tab completion.

        Candidates are a hint: any text the user types is returned as is.
        """
        if candidates:
            self.console.print(f"[muted]  Known: {escape(', '.join(candidates))}[/muted]")

        try:
            import readline

            def complete(text: str, state: int) -> Optional[str]:
                matches = [c for c in candidates if c.startswith(text)]
                return matches[state] if state < len(matches) else None

            previous = readline.get_completer()
            readline.set_completer(complete)
            readline.parse_and_bind("tab: complete")
            try:
                self.console.print(f"{label}: ", end="")
                return input()
            finally:
                readline.set_completer(previous)

        except (ImportError, OSError):
            # No readline (e.g. Windows): plain prompt without completion
            return Prompt.ask(label, console=self.console, default="", show_default=False)

    # Output

    def show_commit_message_preview(self, message: str) -> None:
        """Show the composed message header."""
        header = message.strip()
        if ':' in header:
            prefix, description = header.split(':', 1)
            formatted_message = f"[commit_type]{escape(prefix)}[/commit_type]:{escape(description)}"
        else:
            formatted_message = escape(header)

        self.console.print(Panel(
            formatted_message,
            title="Commit Message",
            box=box.ROUNDED,
            style="green"
        ))

    def show_scopes(self, scopes_by_project: Dict[str, List[str]]) -> None:
        """Show remembered scopes, one row per project."""
        if not any(scopes_by_project.values()):
            self.print_info("No scopes remembered yet")
            return

        table = Table(title="Remembered Scopes", box=box.SIMPLE_HEAD)
        table.add_column("Project", style="bold")
        table.add_column("Scopes", style="scope")
        for project, scopes in scopes_by_project.items():
            table.add_row(escape(project), escape(", ".join(scopes)) or "[muted]none[/muted]")
        self.console.print(table)

    def show_configuration(self) -> None:
        """Show the effective configuration."""
        table = Table(title="Configuration", box=box.SIMPLE_HEAD)
        table.add_column("Setting", style="bold")
        table.add_column("Value")
        table.add_row("Scope database", str(self.settings.store.path))
        table.add_row("Commit types", ", ".join(self.settings.commit.types))
        table.add_row("Skipped hook sources", ", ".join(self.settings.commit.skip_sources))
        table.add_row("Log level", self.settings.ui.log_level)
        table.add_row("Log file", str(self.settings.log_file))
        self.console.print(table)

    def print_info(self, message: str) -> None:
        """Print info message."""
        self.console.print(f"[info]ℹ {message}[/info]")
