"""Installation health check and status table rendering."""

from dataclasses import dataclass
from pathlib import Path

from rich.table import Table

from al_collection.config import GUIDE_FILENAME

# Category directories an installation must have, with table labels
REQUIRED_INSTALL_DIRS: tuple[tuple[str, str], ...] = (
    ("agents", "Agent modes"),
    ("instructions", "Instruction files"),
    ("prompts", "Workflow prompts"),
)


@dataclass
class CategoryStatus:
    name: str
    description: str
    present: bool
    file_count: int  # *.md files directly inside


@dataclass
class InstallationStatus:
    path: Path
    categories: list[CategoryStatus]
    has_guide: bool

    @property
    def is_valid(self) -> bool:
        return all(c.present for c in self.categories)

    @property
    def total_files(self) -> int:
        return sum(c.file_count for c in self.categories)


def check_installation(path: Path) -> InstallationStatus:
    """Gather installation state into a plain dataclass (no display side-effects)."""
    categories = []
    for name, description in REQUIRED_INSTALL_DIRS:
        directory = path / name
        if directory.is_dir():
            count = sum(1 for f in directory.iterdir() if f.is_file() and f.suffix == ".md")
            categories.append(CategoryStatus(name, description, True, count))
        else:
            categories.append(CategoryStatus(name, description, False, 0))

    return InstallationStatus(
        path=path,
        categories=categories,
        has_guide=(path / GUIDE_FILENAME).is_file(),
    )


def render_status_table(info: InstallationStatus) -> Table:
    """Build a Rich Table from InstallationStatus using semantic styles."""
    table = Table(title=f"AL Collection Installation ({info.path})")
    table.add_column("Component", style="accent")
    table.add_column("Status", style="info")
    table.add_column("Details", style="success")

    for category in info.categories:
        if category.present:
            table.add_row(f"{category.name}/", "Present", f"{category.file_count} files - {category.description}")
        else:
            table.add_row(f"{category.name}/", "[error]Missing[/error]", category.description)
    table.add_row(
        GUIDE_FILENAME,
        "Present" if info.has_guide else "[warning]Missing (optional)[/warning]",
        "Quick start guide",
    )
    return table
