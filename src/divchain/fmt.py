# src/divchain/fmt.py
from __future__ import annotations

import re
from collections.abc import Iterable, Mapping

from colorama import Fore, Style

from divchain.runtime import CFG

# Single source of truth for ANSI stripping
ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


def format_int_list(values: Iterable[int]) -> str:
    """Render integers as a bracketed list: [4, 8, 2]. Empty input gives []."""
    return "[" + ", ".join(str(v) for v in values) + "]"


def abbr_int_fast(n: int, head: int = 10, tail: int = 10, threshold: int = 35, ellipsis: str = "…") -> str:
    """Abbreviate very large ints as first<head>…last<tail>."""
    if not isinstance(n, int):
        return str(n)

    sign = "-" if n < 0 else ""
    s = str(-n if n < 0 else n)
    d = len(s)
    if d <= threshold or head + tail >= d:
        return sign + s
    return f"{sign}{s[:head]}{ellipsis}{s[-tail:]}"


def abbr_int(n: int) -> str:
    """abbr_int_fast with the FORMATTING.* profile settings."""
    return abbr_int_fast(
        n,
        int(CFG("FORMATTING.NUM_ABBR_HEAD", 10)),
        int(CFG("FORMATTING.NUM_ABBR_TAIL", 10)),
        int(CFG("FORMATTING.NUM_ABBR_THRESHOLD", 35)),
        str(CFG("FORMATTING.ELLIPSIS", "…")),
    )


def format_chain(chain: Iterable[int], arrow: str = " | ") -> str:
    """Ascending chain a | b | c, big members abbreviated and highlighted."""
    parts = [f"{Fore.CYAN}{abbr_int(v)}{Style.RESET_ALL}" for v in sorted(chain)]
    return arrow.join(parts) if parts else "—"


def format_factorization(fac: Mapping[int, int]) -> str:
    """
    Turn {p: e, ...} into a tidy string like: 2^3 × 3 × 5^2
    """
    parts: list[str] = []
    for p, e in sorted(fac.items()):
        parts.append(f"{p}^{e}" if e > 1 else f"{p}")
    return " × ".join(parts) if parts else "1"


def strip_ansi(s: str | None) -> str:
    """Return s with ANSI escape sequences removed."""
    return "" if s is None else ANSI_RE.sub("", s)


def format_duration(seconds: float) -> str:
    """ms if <1s; s with millis if <60s; else mm:ss.mmm (and hh:mm:ss.mmm if ≥1h)."""
    MAX_SECONDS = 60
    if seconds < 1:
        ms = round(seconds * 1000)
        return f"{ms} ms"
    if seconds < MAX_SECONDS:
        return f"{seconds:.3f} s"
    m, s = divmod(seconds, MAX_SECONDS)
    if m < MAX_SECONDS:
        return f"{int(m)}:{s:06.3f}"               # mm:ss.mmm
    h, m = divmod(int(m), MAX_SECONDS)
    return f"{h}:{m:02d}:{s:06.3f}"                # hh:mm:ss.mmm
