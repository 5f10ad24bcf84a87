"""YAML frontmatter parsing for collection documents.

Instruction, prompt and chat-mode files carry their metadata in a leading
YAML block delimited by ``---`` lines. This module extracts that block.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

if TYPE_CHECKING:
    from al_collection.report import Report

logger = logging.getLogger(__name__)

# Block must open at offset 0; accepts both \n and \r\n line endings
_FRONTMATTER_RE = re.compile(r"\A---\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)(.*)", re.DOTALL)


class FrontmatterError(ValueError):
    """Frontmatter block exists but does not hold a YAML mapping."""


def parse_frontmatter(content: str) -> tuple[dict[str, Any] | None, str]:
    """Parse YAML frontmatter from markdown content.

    Expects frontmatter delimited by --- lines:
        ---
        key: value
        ---
        Body content here

    Args:
        content: Markdown content potentially containing frontmatter

    Returns:
        Tuple of (frontmatter_dict, body_markdown).
        If no frontmatter found, or the block is empty, returns (None, content).

    Raises:
        FrontmatterError: If the block is malformed YAML or not a mapping.
    """
    match = _FRONTMATTER_RE.match(content)
    if not match:
        return None, content

    yaml_content = match.group(1)
    body = match.group(2)

    if not yaml_content.strip():
        return None, content

    try:
        frontmatter = yaml.safe_load(yaml_content)
    except yaml.YAMLError as e:
        raise FrontmatterError(str(e)) from e

    if frontmatter is None:
        return None, content
    if not isinstance(frontmatter, dict):
        raise FrontmatterError(
            f"expected a mapping, got {type(frontmatter).__name__}"
        )
    return frontmatter, body


def extract_frontmatter(path: Path, report: Report | None = None) -> dict[str, Any] | None:
    """Read ``path`` and return its frontmatter mapping, or None.

    A malformed block is not fatal: it becomes a warning on ``report`` when
    one is given (logged as a warning otherwise) and counts as absent
    frontmatter.
    """
    content = path.read_text(encoding="utf-8")
    try:
        frontmatter, _ = parse_frontmatter(content)
    except FrontmatterError as e:
        message = f"Failed to parse frontmatter in {path}: {e}"
        if report is not None:
            logger.debug(message)
            report.add_warning(message)
        else:
            logger.warning(message)
        return None
    return frontmatter
