# src/divchain/parse.py
from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path

from divchain.runtime import CFG
from divchain.utility import UserInputError

# list separators: commas, semicolons, whitespace
_SPLIT_RE = re.compile(r"[,;\s]+")
_DEC_RE = re.compile(r"[+-]?\d[\d_]*")


def parse_int_literal(text: str) -> int | None:
    """Accepts: 42  -7  1_000_000  0xFF  0b1010  0o17
       Rejects: 3.14  1e3  0xG1  abc"""
    s = (text or "").strip()
    if not s:
        return None

    body = s.lstrip("+-")
    if body.lower().startswith(("0x", "0b", "0o")):
        try:
            return int(s.replace("_", ""), 0)
        except ValueError:
            return None

    if _DEC_RE.fullmatch(s):
        try:
            return int(s.replace("_", ""))
        except ValueError:
            return None

    return None


def parse_int_list(text: str) -> list[int]:
    """
    Parse '4 8 2', '4, 8, 2' or '[4, 8, 2]' into [4, 8, 2].
    '[]' or an empty string give []. Raises UserInputError on any bad token.
    """
    s = (text or "").strip()
    if s.startswith("[") and s.endswith("]"):
        s = s[1:-1]
    elif s.startswith("[") or s.endswith("]"):
        raise UserInputError(f"Invalid input: unbalanced brackets in {text!r}.")

    values: list[int] = []
    for tok in _SPLIT_RE.split(s):
        if not tok:
            continue
        n = parse_int_literal(tok)
        if n is None:
            raise UserInputError(f"Invalid input: {tok!r} is not an integer.")
        values.append(n)
    return values


def parse_items(items: Iterable[str]) -> list[int]:
    """Parse several CLI arguments (each may hold one or more integers) into one list."""
    out: list[int] = []
    for item in items:
        out.extend(parse_int_list(item))
    return out


def read_int_file(path: str | Path) -> list[int]:
    """
    Read integers from a text file, separated by commas or whitespace.
    Everything after '#' on a line is a comment.
    """
    p = Path(path).expanduser()
    try:
        text = p.read_text(encoding="utf-8-sig")
    except FileNotFoundError:
        raise UserInputError(f"Input file not found: {p}") from None
    except OSError as e:
        raise UserInputError(f"Cannot read input file {p}: {e.strerror or e}") from None

    values: list[int] = []
    for lineno, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.split("#", 1)[0].strip()
        if not line:
            continue
        try:
            values.extend(parse_int_list(line))
        except UserInputError as e:
            raise UserInputError(f"{p.name}, line {lineno}: {e}") from None
    return values


def validate_values(values: list[int]) -> list[int]:
    """Refuse non-positive integers and inputs above BEHAVIOUR.MAX_INPUT_SIZE."""
    bad = [v for v in values if v <= 0]
    if bad:
        shown = ", ".join(str(v) for v in bad[:5]) + (", …" if len(bad) > 5 else "")
        raise UserInputError(f"Invalid input: only positive integers are supported (got {shown}).")

    limit = int(CFG("BEHAVIOUR.MAX_INPUT_SIZE", 20_000))
    if len(values) > limit:
        raise UserInputError(
            f"Input has {len(values)} values; the limit is {limit}. "
            "Increase BEHAVIOUR.MAX_INPUT_SIZE in the profile or pass fewer values."
        )
    return values
