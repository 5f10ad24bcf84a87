"""Getting-started guide written next to an installed collection."""

from importlib.metadata import PackageNotFoundError, version as _dist_version
from pathlib import Path

from al_collection.config import APP_NAME, GUIDE_FILENAME, TEMPLATES_DIR
from al_collection.installer import CopyResult
from al_collection.report import FindingSink, Severity


def get_version() -> str:
    try:
        return _dist_version(APP_NAME)
    except PackageNotFoundError:
        return "0.0.0"


def render_guide(version: str | None = None) -> str:
    """Render the guide template with the package version filled in."""
    path = TEMPLATES_DIR / GUIDE_FILENAME
    if not path.exists():
        raise FileNotFoundError(f"Guide template not found: {path}")
    template = path.read_text(encoding="utf-8")
    return template.replace("{{version}}", version or get_version())


def write_guide(target_dir: Path, merge: bool = False, notify: FindingSink | None = None) -> CopyResult:
    """Write getting-started.md into ``target_dir``.

    Same no-clobber rule as installed files: in merge mode an existing
    guide is left untouched and counted as skipped.
    """
    dest = target_dir / GUIDE_FILENAME
    if merge and dest.exists():
        if notify is not None:
            notify(f"{GUIDE_FILENAME} (already exists, skipped)", Severity.WARNING)
        return CopyResult(skipped=1)

    target_dir.mkdir(parents=True, exist_ok=True)
    dest.write_text(render_guide(), encoding="utf-8")
    if notify is not None:
        notify(GUIDE_FILENAME, Severity.SUCCESS)
    return CopyResult(copied=1)
