# src/divchain/display.py
from __future__ import annotations

from collections.abc import Sequence
from itertools import pairwise

from colorama import Fore, Style
from sympy import factorint

from divchain.config import list_profiles_with_descriptions, read_current_profile
from divchain.fmt import abbr_int, format_chain, format_duration, format_factorization, format_int_list
from divchain.output_manager import OutputManager
from divchain.runtime import CFG
from divchain.runtime import current as _rt_current
from divchain.subset import ChainTables, DivisibleChain, is_divisor_chain

MAX_RATIO_BITS = 96          # don't factorize step ratios larger than this
MAX_TABLE_ROWS = 60


def _label(text: str) -> str:
    return f"{Fore.YELLOW}{text:<12}{Style.RESET_ALL}"


def format_ratio(a: int, b: int) -> str:
    """b/a for a chain step, factorized when small enough."""
    r = b // a
    if r == 1:
        return "×1"
    if r.bit_length() > MAX_RATIO_BITS:
        return f"×{abbr_int(r)}"
    return f"×{format_factorization(factorint(r))}"


def print_result(
    values: Sequence[int],
    result: Sequence[int],
    found: DivisibleChain,
    *,
    om: OutputManager,
    show_details: bool = True,
    elapsed: float | None = None,
) -> None:
    """Input, ordered result and (optionally) the chain with its step ratios."""
    om.write()
    om.write(_label("Input:"), format_int_list(abbr_int(v) for v in values))
    om.write(_label("Subset:"), f"{Fore.GREEN}{Style.BRIGHT}{format_int_list(abbr_int(v) for v in result)}{Style.RESET_ALL}")
    om.write(_label("Size:"), f"{len(result)} of {len(values)}")

    if not show_details or not found.chain:
        return

    if CFG("DISPLAY.SHOW_CHAIN", True):
        om.write(_label("Chain:"), format_chain(found.chain))
        if is_divisor_chain(result):
            om.write(_label("Check:"), "each element divides the next")
        else:
            om.write(_label("Check:"), f"{Fore.RED}not a divisor chain{Style.RESET_ALL}")

    if CFG("DISPLAY.SHOW_RATIOS", True) and len(found.chain) > 1:
        steps = [format_ratio(a, b) for a, b in pairwise(sorted(found.chain))]
        om.write(_label("Steps:"), ", ".join(steps))

    if (CFG("DISPLAY.SHOW_TABLES", False) or _rt_current().debug) and found.tables is not None:
        print_tables(found.tables, om=om)

    if elapsed is not None:
        om.write(_label("Time:"), format_duration(elapsed))


def print_tables(tables: ChainTables, *, om: OutputManager) -> None:
    """Sorted values with their chain length and predecessor, best end marked."""
    n = len(tables.sorted)
    om.write()
    om.write(f"{Style.BRIGHT}{'i':>5}  {'value':<24} {'length':>6}  {'prev':>5}{Style.RESET_ALL}")
    shown = range(min(n, MAX_TABLE_ROWS))
    for i in shown:
        prev = tables.prev[i]
        mark = f"  {Fore.GREEN}← best{Style.RESET_ALL}" if i == tables.best else ""
        om.write(f"{i:>5}  {abbr_int(tables.sorted[i]):<24} {tables.length[i]:>6}  {'-' if prev is None else prev:>5}{mark}")
    if n > MAX_TABLE_ROWS:
        om.write(f"{Fore.YELLOW}Truncated: showing {MAX_TABLE_ROWS} of {n} rows{Style.RESET_ALL}")


def print_profiles_with_descriptions() -> None:
    pairs = list_profiles_with_descriptions()
    if not pairs:
        print("\nAvailable profiles: (none)")
        return

    current = read_current_profile()
    lines = []
    for name, desc in pairs:
        mark = "→" if current and name == current else " "
        lines.append(f"{mark} {name:13} — {desc}")
    print("\nAvailable profiles:\n  " + "\n  ".join(lines))


def show_intro_help() -> None:
    lines = [
        "",
        f"{Fore.GREEN}Largest divisible subset{Style.RESET_ALL}",
        f"{'-'*72}",
        "Enter a list of positive integers. divchain finds the largest subset in",
        "which, once sorted, every element divides the next one.",
        "",
        f"{Fore.MAGENTA + Style.BRIGHT}Input:{Style.RESET_ALL}",
        "   4 8 2      4, 8, 2      [4, 8, 2]      0x10 0b100 1_000",
        "",
        f"{Fore.MAGENTA + Style.BRIGHT}Output:{Style.RESET_ALL}",
        "   The subset lists its members from the last input position to the first,",
        "   e.g. [4, 8, 2] gives [2, 8, 4].",
        "",
        f"{Fore.MAGENTA + Style.BRIGHT}Commands:{Style.RESET_ALL}",
        "   debug on|off|status  switch debug output on, off or show current status.",
        "   h or help            show this help.",
        "   hist                 show the lists entered in this session.",
        "   p                    list available profiles.",
        "   <profile name>       switch to that profile.",
        "   q or quit            leave.",
    ]
    print("\n".join(lines))
