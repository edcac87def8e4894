# src/divchain/progress.py
from __future__ import annotations

import sys
import time


def _comparisons(rows: int) -> int:
    # row i of the length/prev table tests i earlier values
    return rows * (rows - 1) // 2


class Progress:
    """Spinner and bar for filling the chain tables, measured in divisibility tests."""

    def __init__(self, rows: int, *, enabled: bool = True):
        self.rows = max(1, int(rows))
        self.total = max(1, _comparisons(self.rows))
        self.enabled = enabled
        self.last_draw = 0.0
        self.spin = "|/-\\"
        self.i = 0

    def update(self, rows_done: int, label: str = ""):
        THROTTLE = 0.05
        if not self.enabled:
            return
        now = time.perf_counter()
        if now - self.last_draw < THROTTLE:  # throttle to avoid flicker
            return
        self.last_draw = now
        self.i = (self.i + 1) % len(self.spin)
        tested = _comparisons(min(rows_done, self.rows))
        frac = min(max(tested / self.total, 0.0), 1.0)
        pct = int(frac * 100)
        bar_len = 24
        fill = int(frac * bar_len)
        bar = "#" * fill + "-" * (bar_len - fill)
        msg = f"\r[{self.spin[self.i]}] [{bar}] {pct:3d}%  {label[:30]}  {tested:,} of {self.total:,} tests"
        sys.stdout.write(msg)
        sys.stdout.flush()

    def done(self):
        if not self.enabled:
            return
        sys.stdout.write("\r" + " " * 100 + "\r")
        sys.stdout.flush()
