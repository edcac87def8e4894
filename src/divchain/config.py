from __future__ import annotations

import tomllib as toml
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from divchain.utility import UserInputError
from divchain.workspace import ensure_workspace_seeded, workspace_dir

# Defaults for every key a profile may set; profiles only override.
DEFAULTS: dict[str, dict[str, Any]] = {
    "BEHAVIOUR": {
        "DEBUG": False,
        "MAX_INPUT_SIZE": 20_000,
        "MAX_DIGITS": 100_000,
        "PROGRESS_THRESHOLD": 2_000,
    },
    "DISPLAY": {
        "SHOW_CHAIN": True,
        "SHOW_RATIOS": True,
        "SHOW_TABLES": False,
    },
    "FORMATTING": {
        "NUM_ABBR_HEAD": 10,
        "NUM_ABBR_TAIL": 10,
        "NUM_ABBR_THRESHOLD": 35,
        "ELLIPSIS": "…",
    },
    "OUTPUT": {
        "OUTPUT_FILE": "",
    },
}


@dataclass
class Settings:
    """
    Wrap the full TOML dict (without the [_PROFILE_] section), merged over DEFAULTS.
    .as_dict() feeds runtime.apply().

      - name:        resolved profile name (file stem if not provided in [_PROFILE_])
      - description: one-line description from [_PROFILE_] or "(no description)"
    """
    data: dict[str, Any]
    name: str
    description: str
    _source: Path | None = None

    def as_dict(self) -> dict[str, Any]:
        return self.data


# --- Paths -----------------------------------------------------------------

def _profiles_dir() -> Path:
    return workspace_dir() / "profiles"


def _profile_path(name: str) -> Path:
    return _profiles_dir() / f"{name}.toml"


# --- I/O -------------------------------------------------------------------


def _load_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as f:
            return toml.load(f)
    except toml.TOMLDecodeError as e:
        lineno = getattr(e, "lineno", None)
        colno = getattr(e, "colno", None)
        msg = getattr(e, "msg", str(e))
        where = []
        if lineno is not None:
            where.append(f"line {lineno}")
        if colno is not None:
            where.append(f"column {colno}")
        loc = f" (at {', '.join(where)})" if where else ""
        raise UserInputError(f"reading {path.name}: {msg}{loc}.") from None


# --- Metadata handling -----------------------------------------------------


def _sanitize_oneline(s: str) -> str:
    return " ".join(str(s).split()) or "(no description)"


def _split_profile_data(raw: dict[str, Any], fallback_name: str) -> tuple[dict[str, Any], str, str]:
    """
    Extract [_PROFILE_] meta (name, description) and return:
      (settings_without_profile, resolved_name, resolved_description)
    """
    meta = raw.get("_PROFILE_") or {}
    data = {k: v for k, v in raw.items() if k != "_PROFILE_"}

    name = str(meta.get("name") or fallback_name)
    description = _sanitize_oneline(str(meta.get("description") or ""))

    return data, name, description


def _same_type(value: Any, default: Any) -> bool:
    # bool is an int subclass; keep true/false out of numeric keys
    if isinstance(value, bool) and not isinstance(default, bool):
        return False
    return isinstance(value, type(default))


def merge_defaults(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay a profile's sections on DEFAULTS; a value of the wrong type is an error."""
    merged: dict[str, Any] = {}
    for section, defaults in DEFAULTS.items():
        given = data.get(section) or {}
        if not isinstance(given, dict):
            raise UserInputError(f"[{section}] must be a table, got {type(given).__name__}.")
        out = dict(defaults)
        for key, value in given.items():
            if key in defaults and not _same_type(value, defaults[key]):
                raise UserInputError(
                    f"{section}.{key} must be {type(defaults[key]).__name__}, got {value!r}."
                )
            out[key] = value
        merged[section] = out
    # unknown sections pass through untouched
    for section, value in data.items():
        merged.setdefault(section, value)
    return merged


# --- Public API ------------------------------------------------------------


def default_settings() -> Settings:
    return Settings(data=merge_defaults({}), name="default", description="built-in defaults")


def list_all_profiles() -> list[str]:
    """
    Return the list of available profile *names* (filename stems).
    """
    ensure_workspace_seeded()
    pdir = _profiles_dir()
    if not pdir.exists():
        return []
    return sorted(p.stem for p in pdir.glob("*.toml"))


def list_profiles_with_descriptions() -> list[tuple[str, str]]:
    """
    Return [(name, description), ...] for all profiles.
    Profiles lacking [_PROFILE_] get "(no description)".
    """
    items: list[tuple[str, str]] = []
    for p in _profiles_dir().glob("*.toml"):
        try:
            raw = _load_toml(p)
            _, nm, desc = _split_profile_data(raw, p.stem)
            items.append((nm, desc))
        except UserInputError:
            # listing is best-effort; fall back to the filename
            items.append((p.stem, "(unreadable profile)"))
    return sorted(items, key=lambda t: t[0].lower())


def has_profile(name: str) -> bool:
    return _profile_path(name).exists()


def load_settings(name: str | None) -> Settings:
    """
    Load a profile by name (default 'default'), strip the [_PROFILE_] metadata,
    merge it over DEFAULTS and return Settings(data=..., name=..., description=..., _source=path).
    """
    if not name:
        name = "default"

    path = _profile_path(name)
    if not path.exists():
        raise FileNotFoundError(f"Profile '{name}' not found at {path}")

    raw = _load_toml(path)
    data, resolved_name, description = _split_profile_data(raw, path.stem)

    return Settings(
        data=merge_defaults(data),
        name=resolved_name,
        description=description,
        _source=path,
    )


def _current_profile_path() -> Path:
    p = _profiles_dir()
    p.mkdir(parents=True, exist_ok=True)
    return p / ".current"


def read_current_profile() -> str | None:
    try:
        s = _current_profile_path().read_text(encoding="utf-8").strip()
    except OSError:
        return None
    return s[:-5] if s.lower().endswith(".toml") else (s or None)


def write_current_profile(name: str) -> None:
    nm = (name or "").strip()
    if nm.lower().endswith(".toml"):
        nm = nm[:-5]
    _current_profile_path().write_text(nm, encoding="utf-8")
