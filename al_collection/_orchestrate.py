"""Installation flows — target resolution, merge detection, category copy.

Contains PrompterProtocol, MergeDecision, InstallOutcome, run_install() and
run_update(). main.py wires these to the terminal; tests drive them with a
scripted prompter.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Protocol, runtime_checkable

from rich.markup import escape

from al_collection.config import (
    CATEGORIES,
    GUIDE_FILENAME,
    MERGE_PROBE_DIRS,
    OPTIONAL_CATEGORIES,
    PAYLOAD_DIR,
    Settings,
    get_settings,
)
from al_collection.display import (
    console,
    display_header,
    display_info,
    display_status,
    log_copy,
)
from al_collection.guide import write_guide
from al_collection.installer import CopyResult, merge_copy
from al_collection.report import Severity

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# PrompterProtocol — abstraction for blocking user questions
# ---------------------------------------------------------------------------


@runtime_checkable
class PrompterProtocol(Protocol):
    """Question contract for the install flows.

    Implementations: TerminalPrompter (Rich), ScriptedPrompter (tests).
    """

    def confirm(self, question: str, default: bool = True) -> bool:
        """Yes/no question. Blank answer returns ``default``."""
        ...

    def ask(self, question: str, default: str = "") -> str:
        """Free-text question. Blank answer returns ``default``."""
        ...


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------


MergeReason = Literal["new", "empty", "merge", "cancelled"]


@dataclass
class MergeDecision:
    merge: bool
    reason: MergeReason
    existing_dirs: list[str] = field(default_factory=list)

    @property
    def cancelled(self) -> bool:
        return self.reason == "cancelled"


@dataclass
class InstallOutcome:
    target_dir: Path
    result: CopyResult = CopyResult()
    merge: bool = False
    cancelled: bool = False


# ---------------------------------------------------------------------------
# Project discovery and target resolution
# ---------------------------------------------------------------------------


def is_project_dir(directory: Path, marker: str = "app.json") -> bool:
    """True when ``directory`` holds the project marker file (app.json)."""
    return (directory / marker).is_file()


def find_projects(start: Path, max_depth: int = 2, marker: str = "app.json") -> list[Path]:
    """Find project directories at most ``max_depth`` levels below ``start``.

    Hidden directories and node_modules are not searched, nor are the
    subdirectories of a project once found. Unreadable directories are skipped.
    """
    projects: list[Path] = []

    def _search(directory: Path, depth: int) -> None:
        if depth > max_depth:
            return
        try:
            entries = sorted(directory.iterdir(), key=lambda p: p.name)
        except OSError as e:
            logger.debug(f"Skipping unreadable directory {directory}: {e}")
            return

        if any(entry.name == marker for entry in entries):
            projects.append(directory)
            return

        for entry in entries:
            if entry.name.startswith(".") or entry.name == "node_modules":
                continue
            try:
                is_dir = entry.is_dir()
            except OSError:
                continue
            if is_dir:
                _search(entry, depth + 1)

    _search(start, 0)
    return projects


def _ask_location(prompter: PrompterProtocol, cwd: Path, dirname: str) -> Path:
    default = cwd / dirname
    answer = prompter.ask("Install location", default=str(default))
    if not answer or answer == str(default):
        return default
    return (cwd / Path(answer).expanduser()).resolve()


def resolve_target_dir(
    prompter: PrompterProtocol,
    cwd: Path,
    explicit: str | None = None,
    config: Settings | None = None,
) -> Path:
    """Decide where to install.

    Order: explicit argument, then the current directory when it is a
    project, then a project found nearby, then a free-text answer.
    """
    config = config or get_settings()
    if explicit:
        return (cwd / Path(explicit).expanduser()).resolve()

    if is_project_dir(cwd, config.project_marker):
        display_status("AL project detected in current directory!", "success")
        default = cwd / config.target_dirname
        if prompter.confirm(f"Install to {default}?", default=True):
            return default
        return _ask_location(prompter, cwd, config.target_dirname)

    display_info("Searching for AL projects...")
    found = find_projects(cwd, config.search_depth, config.project_marker)
    if found:
        display_status(f"Found {len(found)} AL project(s):", "success")
        for idx, project in enumerate(found, start=1):
            console.print(f"  [item]{idx}. {escape(str(project))}[/item]")
        answer = prompter.ask(
            f"Select project number (1-{len(found)}) or Enter for manual path"
        )
        if answer.strip().isdecimal():
            selection = int(answer.strip())
            if 1 <= selection <= len(found):
                return found[selection - 1] / config.target_dirname

    return _ask_location(prompter, cwd, config.target_dirname)


# ---------------------------------------------------------------------------
# Merge detection
# ---------------------------------------------------------------------------


def existing_category_dirs(target: Path) -> list[str]:
    return [f"{name}/" for name in MERGE_PROBE_DIRS if (target / name).exists()]


def detect_merge_mode(target: Path, prompter: PrompterProtocol) -> MergeDecision:
    """Fresh install unless category directories already exist at ``target``.

    Existing content requires an explicit confirmation; declining cancels
    the install before anything is written.
    """
    if not target.exists():
        return MergeDecision(merge=False, reason="new")

    existing = existing_category_dirs(target)
    if not existing:
        return MergeDecision(merge=False, reason="empty")

    display_status(f"Found existing directories: {', '.join(existing)}", "warning")
    display_info("Existing files will be preserved. Only new files will be added.")
    if prompter.confirm("Continue with merge?", default=True):
        return MergeDecision(merge=True, reason="merge", existing_dirs=existing)
    return MergeDecision(merge=False, reason="cancelled", existing_dirs=existing)


def find_installation(cwd: Path, dirname: str = ".github") -> Path | None:
    """Locate an existing install: first candidate holding an agents/ dir."""
    for candidate in (cwd / dirname, cwd / dirname / "copilot"):
        if (candidate / "agents").is_dir():
            return candidate
    return None


# ---------------------------------------------------------------------------
# Install / update flows
# ---------------------------------------------------------------------------


def install_categories(source_root: Path, target: Path, merge: bool) -> CopyResult:
    """Merge-copy every content category, then write the guide."""
    total = CopyResult()
    for category in CATEGORIES:
        display_header(f"Installing {category.title()}")
        source = source_root / category
        if category in OPTIONAL_CATEGORIES and not source.is_dir():
            log_copy(f"{category} directory not found (optional)", Severity.WARNING)
            continue
        total = total + merge_copy(source, target / category, merge, log_copy)

    display_header("Creating Quick Start Guide")
    total = total + write_guide(target, merge, log_copy)
    return total


def _print_summary(outcome: InstallOutcome) -> None:
    display_header("Installation Complete!")
    console.print(f"[success]Files copied: {outcome.result.copied}[/success]")
    if outcome.result.skipped > 0:
        console.print(f"[warning]Files skipped (already exist): {outcome.result.skipped}[/warning]")
    console.print(f"[info]Installation directory: {escape(str(outcome.target_dir))}[/info]")

    console.print()
    console.print("[accent]Next Steps:[/accent]")
    console.print("  [item]1. Open VS Code in your AL project[/item]")
    console.print(f"  [item]2. Read: {escape(str(outcome.target_dir / GUIDE_FILENAME))}[/item]")
    console.print("  [item]3. Try: Use al-architect mode[/item]")
    console.print("  [item]4. Or try: @workspace use al-initialize[/item]")
    if outcome.merge:
        console.print()
        display_info("Tip: Existing files were preserved. Check skipped files for updates.")


def run_install(
    prompter: PrompterProtocol,
    cwd: Path,
    target: str | Path | None = None,
    source_root: Path = PAYLOAD_DIR,
    assume_merge: bool = False,
    config: Settings | None = None,
) -> InstallOutcome:
    """Install the collection into a consumer project.

    Args:
        prompter: Answers target and merge questions.
        cwd: Directory the command runs from.
        target: Explicit install directory; resolved interactively if None.
        source_root: Collection tree holding the category directories.
        assume_merge: Skip the merge confirmation (update already asked).
        config: Settings; the global settings when None.
    """
    config = config or get_settings()
    display_header("AL Development Collection - Installer")
    display_info("This will install the AL Development toolkit into your project.")
    for line in (
        "agents/       - strategic chat modes",
        "instructions/ - auto-applied guidelines",
        "prompts/      - agentic workflows",
        "collections/  - collection manifest",
        f"{GUIDE_FILENAME} - quick start guide",
    ):
        console.print(f"  [item]• {line}[/item]")

    target_dir = resolve_target_dir(
        prompter, cwd, str(target) if target is not None else None, config,
    )
    display_info(f"Target directory: {target_dir}")

    if assume_merge:
        existing = existing_category_dirs(target_dir) if target_dir.exists() else []
        decision = MergeDecision(merge=bool(existing), reason="merge" if existing else "empty",
                                 existing_dirs=existing)
    else:
        decision = detect_merge_mode(target_dir, prompter)

    if decision.cancelled:
        display_status("Installation cancelled.", "error")
        return InstallOutcome(target_dir=target_dir, cancelled=True)

    if not target_dir.exists():
        target_dir.mkdir(parents=True, exist_ok=True)
        display_status(f"Created directory: {target_dir}", "success")

    if decision.merge:
        display_info("Merge mode: Preserving existing files, adding new ones only")

    logger.info(f"Installing {source_root} into {target_dir} (merge={decision.merge})")
    result = install_categories(source_root, target_dir, decision.merge)
    outcome = InstallOutcome(target_dir=target_dir, result=result, merge=decision.merge)
    _print_summary(outcome)
    return outcome


def run_update(
    prompter: PrompterProtocol,
    cwd: Path,
    source_root: Path = PAYLOAD_DIR,
    config: Settings | None = None,
) -> InstallOutcome | None:
    """Re-run install in merge mode against the discovered installation.

    Returns None when the user declines.
    """
    config = config or get_settings()
    display_header("AL Development Collection - Update")
    display_info("This will update your existing installation.")
    display_info("Existing files will be preserved. Only new files will be added.")

    existing = find_installation(cwd, config.target_dirname)
    if existing is None:
        display_status("No existing installation found.", "warning")
        display_info('Use "install" command instead.')
        if prompter.confirm("Run install command now?", default=True):
            return run_install(prompter, cwd, source_root=source_root, config=config)
        return None

    display_status(f"Found installation at: {existing}", "success")
    if not prompter.confirm("Update this installation?", default=True):
        return None
    return run_install(
        prompter, cwd, target=existing, source_root=source_root,
        assume_merge=True, config=config,
    )
