"""Collection validator — manifest, files, frontmatter and layout checks.

Runs a fixed sequence of passes against a collection checkout. Each pass
reads the manifest and/or the filesystem and appends findings to a shared
Report; no pass depends on another pass's findings.

Finding classes:
    errors    — structural or referential problems (fail the run)
    warnings  — convention problems (never fail the run)
    successes — confirmations, for the summary
"""

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

from al_collection._frontmatter import extract_frontmatter
from al_collection.manifest import (
    KIND_SUFFIX_RE,
    REQUIRED_FIELDS,
    SLUG_RE,
    VALID_ORDERINGS,
    VALID_USAGES,
    Item,
    ItemKind,
    Manifest,
    ManifestError,
    load_manifest,
)
from al_collection.report import Report, ValidationStatus

logger = logging.getLogger(__name__)

DEFAULT_MANIFEST_PATH = "collections/al-development.collection.yml"
DEFAULT_NAMING_PREFIX = "al-"

# Markers the collection documentation (<id>.md) is expected to contain
REQUIRED_DOC_SECTIONS: tuple[str, ...] = ("# ", "What's Included", "Quick Start", "Requirements")

# Top-level directories a collection checkout is expected to have
EXPECTED_DIRS: tuple[str, ...] = ("instructions", "prompts", "chatmodes", "collections")

# Frontmatter requirements per kind: every group needs at least one key present
_KIND_KEY_GROUPS: dict[ItemKind, tuple[tuple[str, ...], ...]] = {
    ItemKind.INSTRUCTION: (("applyTo", "globs"),),
    ItemKind.PROMPT: (("mode", "agent"), ("tools",), ("model",)),
    ItemKind.CHAT_MODE: (("tools",), ("model",)),
}

_KIND_LABELS = {
    ItemKind.INSTRUCTION: "Instruction",
    ItemKind.PROMPT: "Prompt",
    ItemKind.CHAT_MODE: "Chat mode",
}


def _missing(value) -> bool:
    return value is None or value == ""


def _describe_group(keys: tuple[str, ...]) -> str:
    return " or ".join(f"'{k}'" for k in keys)


# ---------------------------------------------------------------------------
# Pass 1 — manifest structure
# ---------------------------------------------------------------------------


def validate_manifest_structure(manifest: Manifest, report: Report) -> bool:
    """Check top-level fields and their shapes.

    Returns:
        False when the manifest is structurally unusable (a required field
        is missing, or ``items`` / ``tags`` is not a list); later passes
        must not run in that case.
    """
    report.info("\nValidating Collection Manifest...")
    structural_ok = True

    for name in REQUIRED_FIELDS:
        if name == "items":
            absent = "items" not in manifest.raw or manifest.raw["items"] is None
        else:
            absent = _missing(manifest.raw.get(name))
        if absent:
            report.add_error(f"Collection manifest missing required field: {name}")
            structural_ok = False

    manifest_id = manifest.id
    if not _missing(manifest_id):
        if not isinstance(manifest_id, str) or not SLUG_RE.fullmatch(manifest_id):
            report.add_error(f"Collection ID must be lowercase with hyphens only: {manifest_id}")
        else:
            report.add_success(f"Collection ID is valid: {manifest_id}")

    if not manifest.items_are_sequence:
        report.add_error("Collection items must be an array")
        structural_ok = False
    else:
        report.add_success(f"Collection has {len(manifest.items)} items")

    tags = manifest.tags
    if tags is not None:
        if not isinstance(tags, list):
            report.add_error("Collection tags must be an array")
            structural_ok = False
        else:
            report.add_success(f"Collection has {len(tags)} tags")

    display = manifest.display
    if display is not None:
        if not isinstance(display, dict):
            report.add_error("Collection display settings must be a mapping")
        else:
            ordering = display.get("ordering")
            if ordering is not None and ordering not in VALID_ORDERINGS:
                report.add_error(
                    f"Invalid display ordering: {ordering} (must be 'alpha' or 'manual')"
                )
            if "show_badge" in display and not isinstance(display["show_badge"], bool):
                report.add_error("Display show_badge must be a boolean")

    return structural_ok


# ---------------------------------------------------------------------------
# Pass 2 — per-item files and frontmatter
# ---------------------------------------------------------------------------


def _validate_item(item: Item, root: Path, report: Report, counts: dict[ItemKind, int]) -> None:
    n = item.position
    if item.path is None:
        report.add_error(f"Item {n}: Missing required field 'path'")
        return
    if item.kind is None:
        report.add_error(f"Item {n}: Missing required field 'kind'")
        return

    kind = item.item_kind
    if kind is None:
        valid = ", ".join(k.value for k in ItemKind)
        report.add_error(f"Item {n}: Invalid kind '{item.kind}' (must be one of: {valid})")
    else:
        counts[kind] += 1

    file_path = root / item.path
    if not file_path.is_file():
        report.add_error(f"Item {n}: File not found: {item.path}")
        return

    if kind is not None and not item.path.endswith(kind.suffix):
        report.add_warning(
            f"Item {n}: {_KIND_LABELS[kind]} file should end with {kind.suffix}: {item.path}"
        )

    frontmatter = extract_frontmatter(file_path, report)
    if frontmatter is None:
        report.add_warning(f"Item {n}: No frontmatter found in {item.path}")
    else:
        if _missing(frontmatter.get("description")):
            report.add_warning(f"Item {n}: Missing description in frontmatter: {item.path}")

        if kind is not None:
            label = _KIND_LABELS[kind]
            for group in _KIND_KEY_GROUPS[kind]:
                if all(_missing(frontmatter.get(key)) for key in group):
                    report.add_warning(
                        f"Item {n}: {label} missing {_describe_group(group)} "
                        f"in frontmatter: {item.path}"
                    )

        report.add_success(f"Item {n}: {Path(item.path).name} validated")

    if kind is ItemKind.CHAT_MODE and item.usage is not None and item.usage not in VALID_USAGES:
        report.add_warning(
            f"Item {n}: Chat mode usage should be 'recommended' or 'optional': {item.usage}"
        )


def validate_items(manifest: Manifest, root: Path, report: Report) -> dict[ItemKind, int]:
    """Check every item's file, suffix and frontmatter, in manifest order.

    Returns:
        Count of items per valid kind.
    """
    report.info("\nValidating Collection Items...")
    counts = {kind: 0 for kind in ItemKind}
    for item in manifest.items:
        _validate_item(item, root, report, counts)

    report.info("\nItems by Kind:")
    for kind, count in counts.items():
        report.info(f"   {kind.value}: {count}")
    return counts


# ---------------------------------------------------------------------------
# Pass 3 — naming conventions
# ---------------------------------------------------------------------------


def validate_file_naming(manifest: Manifest, report: Report, prefix: str = DEFAULT_NAMING_PREFIX) -> None:
    report.info("\nValidating File Naming Conventions...")
    for item in manifest.items:
        if item.path is None:
            continue
        filename = Path(item.path).name
        stem = KIND_SUFFIX_RE.sub("", filename)
        if not SLUG_RE.fullmatch(stem):
            report.add_warning(
                f"Item {item.position}: Filename should be lowercase with hyphens: {filename}"
            )
        if not stem.startswith(prefix):
            report.add_warning(
                f"Item {item.position}: Filename should start with '{prefix}' prefix: {filename}"
            )
    report.add_success("File naming conventions validated")


# ---------------------------------------------------------------------------
# Pass 4 — collection documentation
# ---------------------------------------------------------------------------


def validate_documentation(manifest: Manifest, root: Path, report: Report) -> None:
    report.info("\nValidating Documentation...")
    doc_name = f"{manifest.id}.md"
    doc_path = root / doc_name
    if not doc_path.is_file():
        report.add_error(f"Collection documentation not found: {doc_name}")
        return

    report.add_success(f"Collection documentation exists: {doc_name}")
    content = doc_path.read_text(encoding="utf-8")
    for section in REQUIRED_DOC_SECTIONS:
        if section not in content:
            report.add_warning(f"Documentation missing recommended section: {section}")


# ---------------------------------------------------------------------------
# Pass 5 — uniqueness
# ---------------------------------------------------------------------------


def validate_uniqueness(manifest: Manifest, report: Report) -> int:
    """Report every repeated item path. Returns the duplicate count."""
    report.info("\nValidating Uniqueness...")
    seen: set[str] = set()
    duplicates = 0
    for item in manifest.items:
        if item.path is None:
            continue
        if item.path in seen:
            report.add_error(f"Duplicate path found: {item.path} (item {item.position})")
            duplicates += 1
        else:
            seen.add(item.path)

    if duplicates == 0:
        report.add_success("No duplicate paths found")
    return duplicates


# ---------------------------------------------------------------------------
# Pass 6 — directory structure
# ---------------------------------------------------------------------------


def validate_directory_structure(root: Path, report: Report) -> None:
    report.info("\nValidating Directory Structure...")
    for name in EXPECTED_DIRS:
        if (root / name).is_dir():
            report.add_success(f"Directory exists: {name}")
        else:
            report.add_warning(f"Recommended directory not found: {name}")


# ---------------------------------------------------------------------------
# Run driver
# ---------------------------------------------------------------------------


def _summarize(report: Report) -> ValidationStatus:
    status = report.status
    report.info("\n" + "═" * 50)
    report.info("VALIDATION SUMMARY")
    report.info("═" * 50)
    report.info(f"\nSuccesses: {len(report.successes)}")
    report.info(f"Warnings:  {len(report.warnings)}")
    report.info(f"Errors:    {len(report.errors)}")
    if status is ValidationStatus.OK:
        report.info("\nCollection is fully compliant and ready for contribution!")
    elif status is ValidationStatus.OK_WITH_WARNINGS:
        report.info("\nCollection is valid but has some warnings to address.")
    else:
        report.info("\nCollection has errors that must be fixed before contribution.")
    logger.info(
        f"Validation finished: {status.value} "
        f"({len(report.errors)} errors, {len(report.warnings)} warnings)"
    )
    return status


def validate_collection(
    root: Path,
    report: Report,
    manifest_path: Path | str = DEFAULT_MANIFEST_PATH,
    prefix: str = DEFAULT_NAMING_PREFIX,
    now: Callable[[], datetime] | None = None,
) -> ValidationStatus:
    """Validate the collection checked out at ``root``.

    Args:
        root: Collection root; item paths, the documentation file and the
            expected directories resolve against it.
        report: Empty report to fill.
        manifest_path: Manifest location, relative to ``root`` unless absolute.
        prefix: Filename prefix every item must carry.
        now: Clock for the start banner.

    Returns:
        Final status derived from the report; ``status.exit_code`` is the
        process exit code.
    """
    started = (now or (lambda: datetime.now(timezone.utc)))()
    report.info("AL Development Collection Validator")
    report.info(f"Started: {started.isoformat()}\n")
    logger.info(f"Validating collection at {root}")

    path = Path(manifest_path)
    if not path.is_absolute():
        path = root / path
    display_path = str(manifest_path)

    if not path.is_file():
        report.add_error(f"Collection manifest not found: {display_path}")
        return _summarize(report)
    report.add_success(f"Collection manifest found: {display_path}")

    try:
        manifest = load_manifest(path)
    except ManifestError as e:
        report.add_error(str(e))
        return _summarize(report)

    if validate_manifest_structure(manifest, report):
        validate_items(manifest, root, report)
        validate_file_naming(manifest, report, prefix)
        validate_documentation(manifest, root, report)
        validate_uniqueness(manifest, report)
        validate_directory_structure(root, report)

    return _summarize(report)
