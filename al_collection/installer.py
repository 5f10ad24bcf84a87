"""Merge-copy installer — reconciles a source tree into a destination tree.

Copy is asymmetric and no-clobber in merge mode: a file that already exists
at the destination is never overwritten, so local edits to installed files
survive re-installation. The only way to refresh such a file is to delete it
first. Running twice in merge mode copies nothing on the second run.
"""

import logging
import shutil
from pathlib import Path
from typing import NamedTuple

from al_collection.report import FindingSink, Severity

logger = logging.getLogger(__name__)

# Never copied, at any depth, regardless of merge mode
EXCLUDED_NAMES: frozenset[str] = frozenset({
    # Packaging metadata
    "node_modules", "package.json", "package-lock.json",
    "pyproject.toml", "setup.py", "setup.cfg", "MANIFEST.in",
    "__init__.py", "__pycache__",
    # Version control
    ".git", ".gitignore", ".npmignore",
    # Entry scripts
    "install.js", "validate-al-collection.js",
})


class InstallError(OSError):
    """Source tree cannot be read; nothing was copied from it."""


class CopyResult(NamedTuple):
    copied: int = 0
    skipped: int = 0

    def __add__(self, other: "CopyResult") -> "CopyResult":  # type: ignore[override]
        return CopyResult(self.copied + other.copied, self.skipped + other.skipped)


def merge_copy(
    source: Path,
    dest: Path,
    merge: bool = False,
    notify: FindingSink | None = None,
) -> CopyResult:
    """Recursively copy ``source`` into ``dest``.

    Args:
        source: Existing directory to copy from.
        dest: Destination directory; created (with parents) if missing.
        merge: When True, files already present at the destination are
            skipped. When False, they are overwritten (fresh install).
        notify: Optional ``(message, severity)`` sink, called once per file.

    Returns:
        CopyResult with the number of files copied and skipped in this subtree.

    Raises:
        InstallError: If ``source`` is missing or not a directory.
        OSError: If any single copy fails; files already copied stay in place.
    """
    if not source.is_dir():
        raise InstallError(f"Source directory not found: {source}")

    dest.mkdir(parents=True, exist_ok=True)
    result = CopyResult()

    for entry in sorted(source.iterdir(), key=lambda p: p.name):
        if entry.name in EXCLUDED_NAMES:
            continue

        target = dest / entry.name
        if entry.is_dir():
            result = result + merge_copy(entry, target, merge, notify)
            continue

        if merge and target.exists():
            logger.debug(f"Skipped existing {target}")
            if notify is not None:
                notify(f"{entry.name} (already exists, skipped)", Severity.WARNING)
            result = result + CopyResult(skipped=1)
        else:
            shutil.copyfile(entry, target)
            logger.debug(f"Copied {entry} -> {target}")
            if notify is not None:
                notify(entry.name, Severity.SUCCESS)
            result = result + CopyResult(copied=1)

    return result
