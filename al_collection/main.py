import logging
from pathlib import Path
from typing import Optional

import typer
from rich.logging import RichHandler

from al_collection._orchestrate import find_installation, run_install, run_update
from al_collection.config import settings
from al_collection.display import (
    console,
    display_error,
    display_info,
    display_status,
    log_finding,
    set_theme,
    TerminalPrompter,
)
from al_collection.report import Report
from al_collection.status import check_installation, render_status_table
from al_collection.validator import validate_collection

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="AL Development Collection - install and validate Copilot agents, instructions and prompts",
    context_settings={"help_option_names": ["--help", "-h"]},
    no_args_is_help=True,
)


@app.callback()
def main(
    theme: str = typer.Option(None, "--theme", "-t", help="Color theme: dark or light"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """AL Development Collection CLI."""
    if theme:
        set_theme(theme)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


@app.command()
def install(
    target: Optional[str] = typer.Argument(None, help="Install directory (default: ./.github)"),
):
    """Install the collection into a project. Existing files are preserved."""
    try:
        outcome = run_install(TerminalPrompter(), Path.cwd(), target)
    except KeyboardInterrupt:
        raise typer.Exit(code=0)
    except Exception as e:
        logger.debug("Installation failed", exc_info=True)
        display_error(f"Installation failed: {e}")
        raise typer.Exit(code=1)
    if outcome.cancelled:
        raise typer.Exit(code=0)


@app.command()
def update():
    """Update an existing installation, adding new files only."""
    try:
        run_update(TerminalPrompter(), Path.cwd())
    except KeyboardInterrupt:
        raise typer.Exit(code=0)
    except Exception as e:
        logger.debug("Update failed", exc_info=True)
        display_error(f"Update failed: {e}")
        raise typer.Exit(code=1)


@app.command()
def validate(
    root: Optional[Path] = typer.Option(None, "--root", "-r", help="Collection root (default: current directory)"),
    manifest: Optional[str] = typer.Option(None, "--manifest", "-m", help="Manifest path relative to the root"),
):
    """Validate the collection manifest, item files and frontmatter."""
    report = Report(sink=log_finding)
    try:
        status = validate_collection(
            root or Path.cwd(),
            report,
            manifest_path=manifest or settings.manifest_path,
            prefix=settings.naming_prefix,
        )
    except Exception as e:
        logger.debug("Validation failed", exc_info=True)
        display_error(f"Validation failed: {e}")
        raise typer.Exit(code=1)
    raise typer.Exit(code=status.exit_code)


@app.command()
def status():
    """Check that an installation in ./.github is complete."""
    install_path = find_installation(Path.cwd(), settings.target_dirname)
    if install_path is None:
        display_error(
            f"No installation found in {settings.target_dirname}/",
            hint='Run "al-collection install" first.',
        )
        raise typer.Exit(code=1)

    info = check_installation(install_path)
    console.print(render_status_table(info))
    if info.is_valid:
        display_status(f"Installation is valid! ({info.total_files} files found)", "success")
        return
    display_status("Installation is incomplete!", "error")
    display_info('Run "al-collection update" to fix.')
    raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
