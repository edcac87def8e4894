# -----------------------------------------------------------------------------
#  subset.py
#  Largest divisible subset (dynamic programming over a sorted copy)
# -----------------------------------------------------------------------------

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from itertools import pairwise
from typing import TYPE_CHECKING

import gmpy2

if TYPE_CHECKING:
    from divchain.progress import Progress

# Above this bit length the modulo tests run on gmpy2.mpz copies
MPZ_BIT_THRESHOLD = 64


@dataclass(frozen=True)
class ChainTables:
    sorted: list[int]
    length: list[int]               # longest chain ending at i
    prev: list[int | None]          # previous chain index, None at the chain start
    best: int                       # first index with the maximal length


@dataclass(frozen=True)
class DivisibleChain:
    chain: list[int] = field(default_factory=list)   # largest element first
    tables: ChainTables | None = None

    @property
    def size(self) -> int:
        return len(self.chain)


def _divisibility_keys(values: list[int]) -> list:
    """Return values as-is, or as mpz when any of them is a big integer."""
    if any(v.bit_length() > MPZ_BIT_THRESHOLD for v in values):
        return [gmpy2.mpz(v) for v in values]
    return values


def find_largest_divisible_chain(values: Iterable[int], *, progress: Progress | None = None) -> DivisibleChain:
    """
    Longest chain of the input (in sorted order) where each element divides the next.

    length[i] is the size of the best chain ending at sorted[i]; prev[i] points at the
    element before it. Only a strict improvement replaces prev[i], so the earliest
    extending j wins, and `best` moves only on a strictly longer chain.

    The input is not modified. Returns an empty DivisibleChain for empty input.
    """
    work = sorted(values)
    n = len(work)
    if n == 0:
        return DivisibleChain()

    keys = _divisibility_keys(work)
    length = [1] * n
    prev: list[int | None] = [None] * n
    best = 0

    for i in range(1, n):
        ki = keys[i]
        for j in range(i):
            if ki % keys[j] == 0 and length[j] + 1 > length[i]:
                length[i] = length[j] + 1
                prev[i] = j
        if length[i] > length[best]:
            best = i
        if progress is not None:
            progress.update(i + 1, f"row {i + 1}/{n}")

    if progress is not None:
        progress.done()

    chain: list[int] = []
    k: int | None = best
    while k is not None:
        chain.append(work[k])
        k = prev[k]

    return DivisibleChain(chain=chain, tables=ChainTables(work, length, prev, best))


def order_like_input(chain: Sequence[int], values: Sequence[int]) -> list[int]:
    """
    Pick the chain's members out of `values`, scanning from the last element to the first.

    Matching is by value; each value is taken at most as often as it occurs in the chain.
    """
    remaining = Counter(chain)
    ordered: list[int] = []
    for v in reversed(values):
        if remaining[v] > 0:
            ordered.append(v)
            remaining[v] -= 1
    return ordered


def build_largest_divisible_subset(values: Iterable[int]) -> list[int]:
    """
    Largest subset of `values` that forms a divisor chain once sorted.

    The result lists the chosen elements in reverse order of their position in the input:

        >>> build_largest_divisible_subset([4, 8, 2])
        [2, 8, 4]
        >>> build_largest_divisible_subset([1, 2, 3])
        [2, 1]
    """
    original = list(values)
    if not original:
        return []
    found = find_largest_divisible_chain(original)
    return order_like_input(found.chain, original)


def is_divisor_chain(values: Iterable[int]) -> bool:
    """True if the values, sorted ascending, divide one another pairwise in sequence."""
    return all(b % a == 0 for a, b in pairwise(sorted(values)))
