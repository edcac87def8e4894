# tests/test_config.py
from __future__ import annotations

import pytest

from divchain import config
from divchain.runtime import APPLY, CFG, current
from divchain.utility import UserInputError
from divchain.workspace import ensure_workspace_seeded, seed_workspace, workspace_dir


def test_workspace_follows_env(workspace):
    assert workspace_dir() == workspace.resolve()


def test_seeding_copies_packaged_profiles(workspace):
    root, seeded = ensure_workspace_seeded()
    assert seeded
    assert {p.stem for p in (root / "profiles").glob("*.toml")} >= {"default", "minimal", "verbose"}

    # second run copies nothing new
    _, seeded_again = ensure_workspace_seeded()
    assert not seeded_again


def test_seed_overwrite_replaces_edits(workspace):
    root, _ = seed_workspace()
    prof = root / "profiles" / "default.toml"
    prof.write_text("# edited\n", encoding="utf-8")
    _, copied = seed_workspace(overwrite=True)
    assert copied >= 3
    assert "SHOW_CHAIN" in prof.read_text(encoding="utf-8")


def test_load_default_profile():
    ensure_workspace_seeded()
    s = config.load_settings("default")
    assert s.name == "default"
    assert s.description != "(no description)"
    assert "_PROFILE_" not in s.data
    assert s.data["BEHAVIOUR"]["MAX_INPUT_SIZE"] == 20_000
    assert s.data["DISPLAY"]["SHOW_TABLES"] is False


def test_partial_profile_is_merged_over_defaults():
    ensure_workspace_seeded()
    s = config.load_settings("minimal")
    assert s.data["DISPLAY"]["SHOW_CHAIN"] is False
    assert s.data["FORMATTING"]["ELLIPSIS"] == "…"
    assert s.data["OUTPUT"]["OUTPUT_FILE"] == ""


def test_wrong_type_is_a_user_error(workspace):
    (workspace / "profiles").mkdir(parents=True)
    (workspace / "profiles" / "bad.toml").write_text('[BEHAVIOUR]\nMAX_INPUT_SIZE = "lots"\n', encoding="utf-8")
    with pytest.raises(UserInputError, match="MAX_INPUT_SIZE"):
        config.load_settings("bad")


def test_malformed_toml_reports_location(workspace):
    (workspace / "profiles").mkdir(parents=True)
    (workspace / "profiles" / "broken.toml").write_text("[BEHAVIOUR\nDEBUG = true\n", encoding="utf-8")
    with pytest.raises(UserInputError, match="broken.toml"):
        config.load_settings("broken")


def test_missing_profile():
    ensure_workspace_seeded()
    assert not config.has_profile("nope")
    with pytest.raises(FileNotFoundError):
        config.load_settings("nope")


def test_list_profiles_with_descriptions():
    ensure_workspace_seeded()
    names = [name for name, _ in config.list_profiles_with_descriptions()]
    assert names == sorted(names, key=str.lower)
    assert {"default", "minimal", "verbose"} <= set(names)
    assert config.list_all_profiles() == sorted(config.list_all_profiles())


def test_current_profile_roundtrip():
    assert config.read_current_profile() is None
    config.write_current_profile("verbose.toml")
    assert config.read_current_profile() == "verbose"


def test_runtime_apply_and_dotted_lookup():
    ensure_workspace_seeded()
    APPLY(config.load_settings("verbose"))
    assert current().profile_name == "verbose"
    assert CFG("DISPLAY.SHOW_TABLES") is True
    assert CFG("DISPLAY.NOPE", "fallback") == "fallback"
    assert CFG("", 1) == 1


def test_runtime_debug_follows_profile():
    APPLY({"BEHAVIOUR": {"DEBUG": True}})
    assert current().debug is True
    APPLY(config.default_settings())
    assert current().debug is False


@pytest.mark.parametrize("key", ["MAX_INPUT_SIZE", "MAX_DIGITS", "PROGRESS_THRESHOLD"])
def test_boolean_is_not_an_int_setting(workspace, key):
    (workspace / "profiles").mkdir(parents=True)
    (workspace / "profiles" / "bad.toml").write_text(f"[BEHAVIOUR]\n{key} = true\n", encoding="utf-8")
    with pytest.raises(UserInputError, match=f"BEHAVIOUR.{key} must be int"):
        config.load_settings("bad")


def test_default_profile_sets_digit_limit():
    ensure_workspace_seeded()
    assert config.load_settings("default").data["BEHAVIOUR"]["MAX_DIGITS"] == 100_000
