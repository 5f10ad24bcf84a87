"""Themed terminal display — console, semantic styles, display helpers."""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt
from rich.rule import Rule
from rich.theme import Theme

from al_collection.config import settings
from al_collection.report import Severity

# -- Theme palettes (keyed by theme name) ------------------------------------

_THEMES: dict[str, dict[str, str]] = {
    "dark":  {"status": "yellow",      "info": "cyan", "accent": "bold cyan", "item": "blue",       "error": "bold red", "success": "green", "warning": "yellow",  "hint": "dim"},
    "light": {"status": "dark_orange", "info": "blue", "accent": "bold blue", "item": "dark_cyan",  "error": "bold red", "success": "green", "warning": "orange3", "hint": "dim"},
}

# -- Console (single instance, themed) --------------------------------------

console = Console(theme=Theme(_THEMES.get(settings.theme, _THEMES["light"])), highlight=False)

# -- Indicators ------------------------------------------------------------

BULLET  = "▸"
SUCCESS = "✓"
SKIPPED = "⊘"
WARNING = "⚠"
ERROR   = "✖"
INFO    = "◈"

# -- Theme switching -------------------------------------------------------


def set_theme(name: str) -> None:
    """Switch the console theme at runtime (e.g. from --theme flag)."""
    console.push_theme(Theme(_THEMES.get(name, _THEMES["light"])))


# -- Display helpers -------------------------------------------------------


def display_header(message: str) -> None:
    """Section header framed by rules."""
    console.print()
    console.print(Rule(style="info"))
    console.print(f"[accent]{escape(message)}[/accent]")
    console.print(Rule(style="info"))
    console.print()


def display_status(message: str, style: str | None = None) -> None:
    """Themed bullet + message."""
    s = style or "status"
    console.print(f"[{s}]{BULLET} {escape(message)}[/{s}]")


def display_error(message: str, hint: str | None = None) -> None:
    """Red-bordered panel with optional recovery hint."""
    body = f"[bold red]{ERROR} {escape(message)}[/bold red]"
    if hint:
        body += f"\n[dim]{escape(hint)}[/dim]"
    console.print(Panel(body, border_style="red", title="Error", title_align="left"))


def display_info(message: str) -> None:
    """Themed info message."""
    console.print(f"[info]{INFO} {escape(message)}[/info]")


def log_finding(message: str, severity: Severity) -> None:
    """Sink for validation findings; prints each one as it is recorded."""
    if severity is Severity.ERROR:
        console.print(f"[error]{ERROR} ERROR: {escape(message)}[/error]", soft_wrap=True)
    elif severity is Severity.WARNING:
        console.print(f"[warning]{WARNING} WARNING: {escape(message)}[/warning]", soft_wrap=True)
    elif severity is Severity.SUCCESS:
        console.print(f"[success]{SUCCESS} {escape(message)}[/success]", soft_wrap=True)
    else:
        console.print(f"[info]{escape(message)}[/info]", soft_wrap=True)


def log_copy(message: str, severity: Severity) -> None:
    """Sink for installer notices (one line per copied or skipped file)."""
    if severity is Severity.SUCCESS:
        console.print(f"  [success]{SUCCESS} {escape(message)}[/success]", soft_wrap=True)
    elif severity is Severity.WARNING:
        console.print(f"  [warning]{SKIPPED} {escape(message)}[/warning]", soft_wrap=True)
    elif severity is Severity.ERROR:
        console.print(f"  [error]{ERROR} {escape(message)}[/error]", soft_wrap=True)
    else:
        console.print(f"  [info]{escape(message)}[/info]", soft_wrap=True)


# -- TerminalPrompter (PrompterProtocol implementation) --------------------

_YES = ("y", "yes")


class TerminalPrompter:
    """Rich-based console prompts implementing PrompterProtocol.

    Blocks until the user answers. EOF on stdin counts as the default for
    free-text questions and as "no" for confirmations.
    """

    def confirm(self, question: str, default: bool = True) -> bool:
        hint = "(Y/n)" if default else "(y/N)"
        try:
            answer = Prompt.ask(
                f"[info]{question} {hint}[/info]", default="",
                show_default=False, console=console,
            )
        except EOFError:
            return False
        answer = answer.strip().lower()
        if not answer:
            return default
        return answer in _YES

    def ask(self, question: str, default: str = "") -> str:
        suffix = f" (default: {default})" if default else ""
        try:
            answer = Prompt.ask(
                f"[info]{question}{suffix}[/info]", default="",
                show_default=False, console=console,
            )
        except EOFError:
            return default
        return answer.strip() or default
