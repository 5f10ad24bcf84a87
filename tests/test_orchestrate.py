"""Functional tests for the install / update flows.

Questions are answered by a scripted prompter; copying runs against the real
packaged payload and tmp_path targets.
"""

from pathlib import Path

import pytest

from al_collection._orchestrate import (
    PrompterProtocol,
    detect_merge_mode,
    find_installation,
    find_projects,
    resolve_target_dir,
    run_install,
    run_update,
)
from al_collection.config import CATEGORIES, GUIDE_FILENAME, PAYLOAD_DIR, Settings
from al_collection.installer import EXCLUDED_NAMES, InstallError


class ScriptedPrompter:
    """Answers questions from fixed queues and records what was asked."""

    def __init__(self, confirms: list[bool] | None = None, answers: list[str] | None = None):
        self.confirms = list(confirms or [])
        self.answers = list(answers or [])
        self.asked: list[str] = []

    def confirm(self, question: str, default: bool = True) -> bool:
        self.asked.append(question)
        if not self.confirms:
            raise AssertionError(f"Unexpected confirmation: {question}")
        return self.confirms.pop(0)

    def ask(self, question: str, default: str = "") -> str:
        self.asked.append(question)
        if not self.answers:
            raise AssertionError(f"Unexpected question: {question}")
        return self.answers.pop(0) or default


CONFIG = Settings()


def _payload_files() -> set[str]:
    files = set()
    for category in CATEGORIES:
        for p in (PAYLOAD_DIR / category).rglob("*"):
            if p.is_file() and not set(p.relative_to(PAYLOAD_DIR).parts) & EXCLUDED_NAMES:
                files.add(str(p.relative_to(PAYLOAD_DIR)))
    return files


def _installed_files(target: Path) -> set[str]:
    return {str(p.relative_to(target)) for p in target.rglob("*") if p.is_file()}


def test_scripted_prompter_satisfies_protocol():
    assert isinstance(ScriptedPrompter(), PrompterProtocol)


# ---------------------------------------------------------------------------
# install
# ---------------------------------------------------------------------------


def test_install_into_empty_target_copies_everything_once(tmp_path):
    target = tmp_path / "project" / ".github"

    outcome = run_install(ScriptedPrompter(), tmp_path, target=target, config=CONFIG)

    expected = _payload_files()
    assert not outcome.cancelled
    assert outcome.merge is False
    assert outcome.result.skipped == 0
    assert outcome.result.copied == len(expected) + 1  # + getting-started.md
    assert _installed_files(outcome.target_dir) == expected | {GUIDE_FILENAME}


def test_install_guide_has_version(tmp_path):
    outcome = run_install(ScriptedPrompter(), tmp_path, target=tmp_path / ".github", config=CONFIG)

    guide = (outcome.target_dir / GUIDE_FILENAME).read_text()
    assert guide.startswith("# AL Development Collection - Quick Start")
    assert "{{version}}" not in guide


def test_reinstall_in_merge_mode_preserves_edits(tmp_path):
    target = tmp_path / ".github"
    first = run_install(ScriptedPrompter(), tmp_path, target=target, config=CONFIG)
    edited = first.target_dir / "agents" / "al-architect.chatmode.md"
    edited.write_text("customized")
    (first.target_dir / GUIDE_FILENAME).write_text("our own guide")

    prompter = ScriptedPrompter(confirms=[True])
    second = run_install(prompter, tmp_path, target=target, config=CONFIG)

    assert prompter.asked == ["Continue with merge?"]
    assert second.merge is True
    assert second.result.copied == 0
    assert second.result.skipped == first.result.copied
    assert edited.read_text() == "customized"
    assert (second.target_dir / GUIDE_FILENAME).read_text() == "our own guide"


def test_install_declined_merge_touches_nothing(tmp_path):
    target = tmp_path / ".github"
    (target / "prompts").mkdir(parents=True)

    outcome = run_install(ScriptedPrompter(confirms=[False]), tmp_path, target=target, config=CONFIG)

    assert outcome.cancelled
    assert _installed_files(target) == set()
    assert not (target / "agents").exists()


def test_install_without_collections_source_is_not_an_error(tmp_path):
    source = tmp_path / "source"
    for category in ("agents", "instructions", "prompts"):
        (source / category).mkdir(parents=True)
        (source / category / f"al-{category}.md").write_text(category)

    outcome = run_install(
        ScriptedPrompter(), tmp_path, target=tmp_path / "out", source_root=source, config=CONFIG,
    )

    assert outcome.result.copied == 4
    assert not (outcome.target_dir / "collections").exists()


def test_install_missing_required_category_fails(tmp_path):
    source = tmp_path / "source"
    (source / "agents").mkdir(parents=True)

    with pytest.raises(InstallError):
        run_install(ScriptedPrompter(), tmp_path, target=tmp_path / "out", source_root=source, config=CONFIG)


# ---------------------------------------------------------------------------
# target resolution
# ---------------------------------------------------------------------------


def test_resolve_explicit_relative_target(tmp_path):
    target = resolve_target_dir(ScriptedPrompter(), tmp_path, "custom/.github", CONFIG)

    assert target == (tmp_path / "custom" / ".github").resolve()


def test_resolve_in_project_directory(tmp_path):
    (tmp_path / "app.json").write_text("{}")
    prompter = ScriptedPrompter(confirms=[True])

    target = resolve_target_dir(prompter, tmp_path, None, CONFIG)

    assert target == tmp_path / ".github"


def test_resolve_in_project_directory_declined_asks_location(tmp_path):
    (tmp_path / "app.json").write_text("{}")
    prompter = ScriptedPrompter(confirms=[False], answers=["elsewhere"])

    target = resolve_target_dir(prompter, tmp_path, None, CONFIG)

    assert target == (tmp_path / "elsewhere").resolve()


def test_resolve_selects_nearby_project(tmp_path):
    for name in ("alpha", "beta"):
        (tmp_path / "apps" / name).mkdir(parents=True)
        (tmp_path / "apps" / name / "app.json").write_text("{}")
    prompter = ScriptedPrompter(answers=["2"])

    target = resolve_target_dir(prompter, tmp_path, None, CONFIG)

    assert target == tmp_path / "apps" / "beta" / ".github"


def test_resolve_invalid_selection_falls_back_to_location(tmp_path):
    (tmp_path / "one").mkdir()
    (tmp_path / "one" / "app.json").write_text("{}")
    prompter = ScriptedPrompter(answers=["9", ""])

    target = resolve_target_dir(prompter, tmp_path, None, CONFIG)

    assert target == tmp_path / ".github"


def test_resolve_superscript_digit_falls_back_to_location(tmp_path):
    (tmp_path / "one").mkdir()
    (tmp_path / "one" / "app.json").write_text("{}")
    prompter = ScriptedPrompter(answers=["²", ""])

    target = resolve_target_dir(prompter, tmp_path, None, CONFIG)

    assert target == tmp_path / ".github"
    assert prompter.asked[-1] == "Install location"


def test_run_install_prints_bracketed_paths(tmp_path):
    target = tmp_path / "odd[/x]" / ".github"

    outcome = run_install(ScriptedPrompter(), tmp_path, target=target, config=CONFIG)

    assert outcome.target_dir == target
    assert (target / GUIDE_FILENAME).is_file()


def test_resolve_no_projects_uses_default(tmp_path):
    target = resolve_target_dir(ScriptedPrompter(answers=[""]), tmp_path, None, CONFIG)

    assert target == tmp_path / ".github"


def test_find_projects_depth_and_skips(tmp_path):
    layout = [
        "a/app.json",               # depth 1
        "a/nested/app.json",        # inside a project: not searched
        "b/c/app.json",             # depth 2
        "b/c/d/e/app.json",         # inside a project
        "x/y/z/app.json",           # depth 3: too deep
        ".hidden/app.json",
        "node_modules/pkg/app.json",
    ]
    for rel in layout:
        path = tmp_path / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("{}")

    assert find_projects(tmp_path, max_depth=2) == [tmp_path / "a", tmp_path / "b" / "c"]


# ---------------------------------------------------------------------------
# merge detection / discovery
# ---------------------------------------------------------------------------


def test_detect_merge_mode_states(tmp_path):
    target = tmp_path / ".github"
    assert detect_merge_mode(target, ScriptedPrompter()).reason == "new"

    target.mkdir()
    (target / "workflows").mkdir()
    assert detect_merge_mode(target, ScriptedPrompter()).reason == "empty"

    (target / "agents").mkdir()
    (target / "prompts").mkdir()
    decision = detect_merge_mode(target, ScriptedPrompter(confirms=[True]))
    assert decision.merge
    assert decision.existing_dirs == ["agents/", "prompts/"]

    decision = detect_merge_mode(target, ScriptedPrompter(confirms=[False]))
    assert decision.cancelled
    assert not decision.merge


def test_find_installation_candidates(tmp_path):
    assert find_installation(tmp_path) is None

    (tmp_path / ".github" / "copilot" / "agents").mkdir(parents=True)
    assert find_installation(tmp_path) == tmp_path / ".github" / "copilot"

    (tmp_path / ".github" / "agents").mkdir()
    assert find_installation(tmp_path) == tmp_path / ".github"


# ---------------------------------------------------------------------------
# update
# ---------------------------------------------------------------------------


def test_update_merges_into_existing_installation(tmp_path):
    run_install(ScriptedPrompter(), tmp_path, target=tmp_path / ".github", config=CONFIG)
    removed = tmp_path / ".github" / "prompts" / "al-build.prompt.md"
    removed.unlink()
    edited = tmp_path / ".github" / "instructions" / "al-code-style.instructions.md"
    edited.write_text("house style")

    prompter = ScriptedPrompter(confirms=[True])
    outcome = run_update(prompter, tmp_path, config=CONFIG)

    assert prompter.asked == ["Update this installation?"]
    assert outcome is not None and outcome.merge
    assert outcome.result.copied == 1
    assert removed.exists()
    assert edited.read_text() == "house style"


def test_update_declined(tmp_path):
    (tmp_path / ".github" / "agents").mkdir(parents=True)

    assert run_update(ScriptedPrompter(confirms=[False]), tmp_path, config=CONFIG) is None
    assert list((tmp_path / ".github" / "agents").iterdir()) == []


def test_update_without_installation_offers_install(tmp_path):
    prompter = ScriptedPrompter(confirms=[True], answers=[""])

    outcome = run_update(prompter, tmp_path, config=CONFIG)

    assert prompter.asked[0] == "Run install command now?"
    assert outcome is not None
    assert outcome.target_dir == tmp_path / ".github"
    assert (tmp_path / ".github" / GUIDE_FILENAME).is_file()
