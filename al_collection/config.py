import json
import re
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

APP_NAME = "al-collection"

# Packaged collection content (agents/, instructions/, prompts/, collections/)
PAYLOAD_DIR = Path(__file__).resolve().parent / "payload"
TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

# Content categories copied by the installer, in install order.
# collections/ is optional in the source tree.
CATEGORIES: tuple[str, ...] = ("agents", "instructions", "prompts", "collections")
OPTIONAL_CATEGORIES: frozenset[str] = frozenset({"collections"})

# Subdirectories whose presence at the target means "existing installation"
MERGE_PROBE_DIRS: tuple[str, ...] = ("agents", "instructions", "prompts")

GUIDE_FILENAME = "getting-started.md"


class Settings(BaseModel):
    # Display
    theme: Literal["light", "dark"] = Field(default="light")

    # Validation
    manifest_path: str = Field(default="collections/al-development.collection.yml")
    naming_prefix: str = Field(default="al-")

    # Installation
    target_dirname: str = Field(default=".github")
    project_marker: str = Field(default="app.json")
    search_depth: int = Field(default=2, ge=0, le=5)

    @field_validator("naming_prefix")
    @classmethod
    def _validate_prefix(cls, v: str) -> str:
        if not re.fullmatch(r"[a-z0-9-]+", v):
            raise ValueError(f"naming_prefix must be lowercase with hyphens only, got '{v}'")
        return v


def find_project_config() -> Path | None:
    """Return .al-collection/settings.json in cwd if it exists, else None."""
    candidate = Path.cwd() / f".{APP_NAME}" / "settings.json"
    return candidate if candidate.is_file() else None


def load_config() -> Settings:
    data: dict = {}

    project_config = find_project_config()
    if project_config is not None:
        with open(project_config, "r") as f:
            try:
                data = json.load(f)
            except Exception as e:
                print(f"Error loading project config {project_config}: {e}. Using defaults.")

    return Settings.model_validate(data)


# Lazy settings singleton, loaded on first access rather than at import time.
_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the global Settings instance, creating it on first call."""
    global _settings
    if _settings is None:
        _settings = load_config()
    return _settings


def __getattr__(name: str):
    """Lazy module attribute — ``from al_collection.config import settings`` works without import-time side effects."""
    if name == "settings":
        return get_settings()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
