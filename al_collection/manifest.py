"""Collection manifest loading.

The manifest (``collections/al-development.collection.yml``) lists every
published item in publication order:

    id: al-development
    name: AL Development
    description: ...
    items:
      - path: instructions/al-code-style.instructions.md
        kind: instruction
      - path: agents/al-architect.chatmode.md
        kind: chat-mode
        usage: recommended
    tags: [al, business-central]
    display:
      ordering: manual
      show_badge: true

Loading only checks that the file is a YAML mapping. Field-level checks are
the validator's job, so the raw mapping is kept alongside typed accessors.
"""

import enum
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

SLUG_RE = re.compile(r"[a-z0-9-]+")  # use with fullmatch

REQUIRED_FIELDS = ("id", "name", "description", "items")


class ManifestError(Exception):
    """Manifest cannot be read or parsed; the validation run cannot continue."""


class ItemKind(str, enum.Enum):
    INSTRUCTION = "instruction"
    PROMPT      = "prompt"
    CHAT_MODE   = "chat-mode"

    @property
    def suffix(self) -> str:
        """Filename suffix required by convention for this kind."""
        return _KIND_SUFFIXES[self]

    @classmethod
    def parse(cls, value: Any) -> "ItemKind | None":
        try:
            return cls(value)
        except ValueError:
            return None


_KIND_SUFFIXES = {
    ItemKind.INSTRUCTION: ".instructions.md",
    ItemKind.PROMPT: ".prompt.md",
    ItemKind.CHAT_MODE: ".chatmode.md",
}

KIND_SUFFIX_RE = re.compile(r"\.(instructions|prompt|chatmode)\.md$")

VALID_USAGES = ("recommended", "optional")
VALID_ORDERINGS = ("alpha", "manual")


def _text_or_none(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


@dataclass(frozen=True)
class Item:
    """One manifest row. ``position`` is 1-based, as shown to users."""

    position: int
    path: str | None
    kind: str | None
    usage: str | None = None

    @classmethod
    def from_raw(cls, position: int, raw: Any) -> "Item":
        if not isinstance(raw, dict):
            return cls(position=position, path=None, kind=None)
        return cls(
            position=position,
            path=_text_or_none(raw.get("path")),
            kind=_text_or_none(raw.get("kind")),
            usage=_text_or_none(raw.get("usage")),
        )

    @property
    def item_kind(self) -> ItemKind | None:
        return ItemKind.parse(self.kind)


@dataclass(frozen=True)
class Manifest:
    path: Path
    raw: dict[str, Any]

    @property
    def id(self) -> Any:
        return self.raw.get("id")

    @property
    def name(self) -> Any:
        return self.raw.get("name")

    @property
    def description(self) -> Any:
        return self.raw.get("description")

    @property
    def tags(self) -> Any:
        return self.raw.get("tags")

    @property
    def display(self) -> Any:
        return self.raw.get("display")

    @property
    def items_are_sequence(self) -> bool:
        return isinstance(self.raw.get("items"), list)

    @property
    def items(self) -> list[Item]:
        """Items in manifest order; empty when ``items`` is not a list."""
        raw_items = self.raw.get("items")
        if not isinstance(raw_items, list):
            return []
        return [Item.from_raw(i, raw) for i, raw in enumerate(raw_items, start=1)]


def load_manifest(path: Path) -> Manifest:
    """Parse the manifest YAML at ``path``.

    Raises:
        ManifestError: If the file is unreadable, is not valid YAML, or its
            top level is not a mapping.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ManifestError(f"Failed to read manifest {path}: {e}") from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ManifestError(f"Failed to parse YAML file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ManifestError(f"Manifest {path} must be a YAML mapping")
    return Manifest(path=path, raw=data)
