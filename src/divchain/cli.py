# src/divchain/cli.py

"""
divchain - largest divisible subset of a list of positive integers

Description:
    Finds the largest subset of the input in which, once sorted, every element
    divides the next. Prints the subset (members listed from the last input
    position to the first), its size and the divisor chain.

usage: divchain -h
"""

from __future__ import annotations

import argparse
import faulthandler
import os
import platform
import sys
import textwrap
import threading
import time
import traceback
from importlib.resources import files as pkg_files
from typing import NamedTuple

from colorama import Fore, Style
from colorama import init as colorama_init

from divchain import __version__ as _ver
from divchain import config as CONFIG
from divchain.display import print_profiles_with_descriptions, print_result, show_intro_help
from divchain.fmt import format_duration, format_int_list
from divchain.output_manager import OutputManager
from divchain.parse import parse_int_list, parse_items, read_int_file, validate_values
from divchain.progress import Progress
from divchain.runtime import APPLY, CFG, debug_log, ensure_runtime_deps
from divchain.runtime import current as _rt_current
from divchain.subset import find_largest_divisible_chain, order_like_input
from divchain.utility import (
    UserInputError,
    clear_screen,
    flatten_dotted,
    typename,
    validate_output_setting,
)
from divchain.workspace import ensure_workspace_seeded, seed_workspace, workspace_dir

COMMANDS = ("init", "where", "profiles")


# In memory session history
class HistoryItem(NamedTuple):
    values: tuple[int, ...]
    profile: str | None
    timestamp: float


_HISTORY: list[HistoryItem] = []


def add_to_history(values: list[int], profile: str | None = None) -> None:
    _HISTORY.append(HistoryItem(values=tuple(values), profile=profile, timestamp=time.time()))


def get_history() -> list[HistoryItem]:
    return list(_HISTORY)


def _install_loud_error_handlers(debug: bool) -> None:
    if not debug:
        return
    faulthandler.enable()

    def _excepthook(exc_type, exc, tb):
        sys.stderr.write("\n[UNCAUGHT EXCEPTION]\n")
        traceback.print_exception(exc_type, exc, tb, file=sys.stderr)
        sys.stderr.flush()
    sys.excepthook = _excepthook

    def _thread_excepthook(args):
        sys.stderr.write("\n[UNCAUGHT THREAD EXCEPTION]\n")
        traceback.print_exception(args.exc_type, args.exc_value, args.exc_traceback, file=sys.stderr)
        sys.stderr.flush()
    threading.excepthook = _thread_excepthook


def _print_user_error(msg: str) -> None:
    """Uniform, one-line friendly error."""
    if msg.startswith("Invalid input:"):
        msg = msg.replace("Invalid input:", f"{Fore.RED}Invalid input:{Style.RESET_ALL}", 1)
    elif not msg.startswith("Error:"):
        msg = f"{Fore.RED}Error:{Style.RESET_ALL} {msg}"
    print(msg, file=sys.stderr)


def _configure_text_streams() -> None:
    if os.environ.get("PYTHONIOENCODING"):
        return
    # Only touch redirected output (pipes/files), leave TTY as-is
    if sys.stdout.isatty() or not hasattr(sys.stdout, "reconfigure"):
        return
    enc = (sys.stdout.encoding or "").lower()
    if platform.system() == "Windows" or enc in ("", "ascii", "us-ascii"):
        sys.stdout.reconfigure(encoding="utf-8", errors="replace")
        sys.stderr.reconfigure(encoding="utf-8", errors="replace")


# ---- argparse ----
def _build_parser() -> argparse.ArgumentParser:

    epilog = textwrap.dedent("""\
    commands:
      init
          Create the workspace folders and copy the packaged profiles if missing.

      init overwrite
          Meant for developers. Requires environment variable DIVCHAIN_DEV=1.
          Copies all packaged profiles over your own edits.

      profiles
          List available profiles.

      where
          Show the workspace and package paths.

    examples:
      divchain 4 8 2            -> [2, 8, 4]
      divchain "[1, 2, 4, 8]"   -> [8, 4, 2, 1]
      divchain --file nums.txt --plain
    """)

    p = argparse.ArgumentParser(
        prog="divchain",
        description="Largest divisible subset — every element divides the next once sorted",
        usage=(
            "divchain [integers ...] [--file FILE] [--profile NAME] [--output OUTPUT]\n"
            "                [--quiet] [--no-details] [--plain] [--debug]\n"
            "       divchain init [overwrite] | profiles | where\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=epilog,
    )
    p.add_argument("items", nargs="*", metavar="integers",
                   help="positive integers, e.g. 4 8 2 or \"[4, 8, 2]\"; none starts interactive mode")
    p.add_argument("--file", default=None, help="Read the integers from a text file ('#' starts a comment)")
    p.add_argument("--profile", default=None, help="Profile to use (default: last used, else 'default')")
    p.add_argument("--output", default=None, help="Write results to a file (also prints unless --quiet)")
    p.add_argument("--quiet", action="store_true", help="Suppress screen output (useful with --output)")
    p.add_argument("--no-details", action="store_true", help="Omit chain, step ratios and tables")
    p.add_argument("--plain", action="store_true", help="Print only the result list, e.g. [2, 8, 4]")
    p.add_argument("--debug", action="store_true", help="Show profile settings, timings and tracebacks")
    p.add_argument("--version", action="version", version=f"%(prog)s {_ver}")

    return p


def main(argv=None) -> int:
    """Thin wrapper: catch friendly errors, hide tracebacks unless debug."""
    try:
        return _main_impl(argv)
    except UserInputError as e:
        _print_user_error(str(e))
        return 2
    except KeyboardInterrupt:
        print("Aborted by user.", file=sys.stderr)
        return 130
    except Exception as e:
        if "--debug" in (argv if argv is not None else sys.argv) or _rt_current().debug:
            raise
        print(f"Unexpected error: {e.__class__.__name__}: {e}", file=sys.stderr)
        print("Run with --debug for a full traceback.", file=sys.stderr)
        return 1


def _select_profile_name(explicit: str | None) -> str:
    """
    Precedence:
      1) explicit --profile
      2) last used (from workspace)
      3) 'default'
    """
    if explicit:
        return explicit
    last = CONFIG.read_current_profile()
    if last and CONFIG.has_profile(last):
        return last
    return "default"


def _apply_digit_limit() -> None:
    """Let int<->str conversion go up to BEHAVIOUR.MAX_DIGITS unless PYTHONINTMAXSTRDIGITS is set."""
    if os.environ.get("PYTHONINTMAXSTRDIGITS"):
        return
    limit = int(CFG("BEHAVIOUR.MAX_DIGITS", 100_000))
    try:
        sys.set_int_max_str_digits(limit)
    except ValueError as e:
        debug_log(f"MAX_DIGITS={limit} ignored: {e}")


def _apply_profile(name: str, *, explicit: bool, debug: bool = False) -> str:
    """Load and install a profile; returns the name actually applied. debug=True wins over the profile."""
    if not CONFIG.has_profile(name):
        if explicit:
            available = ", ".join(CONFIG.list_all_profiles()) or "(none)"
            raise UserInputError(f"Unknown profile: '{name}'. Available profiles: {available}")
        APPLY(CONFIG.default_settings())
        if debug:
            _rt_current().debug = True
        _apply_digit_limit()
        return "default"

    selected = CONFIG.load_settings(name)
    APPLY(selected)
    if debug:
        _rt_current().debug = True
    _apply_digit_limit()

    if _rt_current().debug:
        debug_log(f"active profile: {selected.name}")
        if selected._source:
            debug_log(f"profile file: {selected._source}")
        flat = flatten_dotted(_rt_current().settings)
        debug_log("profile keys (runtime value/type):")
        for k in sorted(flat, key=str.lower):
            v = flat[k]
            print(f"        {k:.<40} {v!r} ({typename(v)})", file=sys.stderr)
    return name


def _run_command(cmd: str, rest: list[str]) -> int:
    if cmd == "init":
        if rest == ["overwrite"]:
            if os.environ.get("DIVCHAIN_DEV") != "1":
                print("Refusing to overwrite: set DIVCHAIN_DEV=1 to enable developer overwrite.")
                return 2
            ws, copied = seed_workspace(overwrite=True)
            print(f"Workspace ready at: {ws} (overwrote existing files)")
        else:
            ws, copied = seed_workspace(overwrite=False)
            print(f"Workspace ready at: {ws}")
        print(f"Copied -> profiles: {copied}")
        return 0
    if cmd == "profiles":
        print_profiles_with_descriptions()
        return 0
    # where
    print(f"Workspace: {workspace_dir()}")
    print(f"Package:   {pkg_files('divchain')}")
    return 0


def solve(values: list[int], *, om: OutputManager, show_details: bool, plain: bool, quiet: bool) -> list[int]:
    """Validate, compute and render one input list; returns the ordered subset."""
    validate_values(values)

    threshold = int(CFG("BEHAVIOUR.PROGRESS_THRESHOLD", 2_000))
    progress = Progress(len(values), enabled=not (quiet or plain) and len(values) >= threshold)

    start = time.perf_counter()
    found = find_largest_divisible_chain(values, progress=progress)
    result = order_like_input(found.chain, values)
    elapsed = time.perf_counter() - start

    debug_log(f"n={len(values)} chain length={found.size} in {format_duration(elapsed)}")
    if found.tables is not None:
        debug_log(f"best end index={found.tables.best} (sorted value {found.tables.sorted[found.tables.best]})")

    if plain:
        om.write(format_int_list(result))
    else:
        print_result(values, result, found, om=om, show_details=show_details,
                     elapsed=elapsed if _rt_current().debug else None)
    return result


# ---- main ----
def _main_impl(argv=None) -> int:

    colorama_init(autoreset=True)
    _configure_text_streams()

    parser = _build_parser()
    args = parser.parse_args(argv)
    rt = _rt_current()
    rt.debug = bool(args.debug)

    _install_loud_error_handlers(args.debug)

    if not ensure_runtime_deps(strict=True):
        return 1

    ensure_workspace_seeded()

    if args.items and args.items[0].lower() in COMMANDS:
        return _run_command(args.items[0].lower(), args.items[1:])

    profile_name = _apply_profile(_select_profile_name(args.profile), explicit=bool(args.profile), debug=args.debug)

    # --- output routing (CLI --output overrides profile OUTPUT_FILE) ---
    try:
        cli_output_target = validate_output_setting(args.output)
        profile_output_target = validate_output_setting(CFG("OUTPUT.OUTPUT_FILE", None))
    except ValueError as e:
        print(f"Fatal error in output setting: {e}", file=sys.stderr)
        return 1

    def make_output_manager(values: list[int]) -> OutputManager:
        target = cli_output_target if cli_output_target is not None else profile_output_target
        return OutputManager(output_file=target, quiet=args.quiet, values=values)

    # --- one-shot path ---
    if args.items or args.file:
        values = parse_items(args.items)
        if args.file:
            values.extend(read_int_file(args.file))
        with make_output_manager(values) as om:
            solve(values, om=om, show_details=not args.no_details, plain=args.plain, quiet=args.quiet)
        return 0

    # --- REPL ---
    if not rt.debug:
        clear_screen()
    print(f"{Fore.YELLOW}{Style.BRIGHT}divchain v{_ver} — Largest divisible subset{Style.RESET_ALL}")

    current_profile = profile_name
    while True:
        try:
            prompt = f"\nProfile: {current_profile} — Enter integers, a command or a profile (h=Help, q=Quit): "
            user_input = input(prompt).strip()

            low = user_input.lower()
            if low in {"", "q", "quit"}:
                break

            if low in {"h", "help"}:
                show_intro_help()
                continue

            if low in {"p", "profiles"}:
                print_profiles_with_descriptions()
                continue

            if low in {"hist", "history"}:
                hist = get_history()
                if not hist:
                    print("History is empty.")
                for item in hist:
                    ts = time.strftime("%H:%M:%S", time.localtime(item.timestamp))
                    print(f"{ts}  {format_int_list(item.values):<40}  profile={item.profile or '-'}")
                continue

            if low.startswith("debug"):
                parts = low.split()
                if len(parts) == 1 or parts[1] == "status":
                    print(f"Debug is currently {'ON' if rt.debug else 'OFF'}.")
                elif parts[1] == "on":
                    rt.debug = True
                    print("Debug mode enabled for this session.")
                elif parts[1] == "off":
                    rt.debug = False
                    print("Debug mode disabled for this session.")
                else:
                    print("Usage: DEBUG [on|off|status]")
                continue

            # profile switch?
            if CONFIG.has_profile(user_input):
                _apply_profile(user_input, explicit=True, debug=rt.debug)
                CONFIG.write_current_profile(user_input)
                current_profile = user_input
                print(f"Applied profile: {current_profile}")
                continue

            values = parse_int_list(user_input)
            with make_output_manager(values) as om:
                solve(values, om=om, show_details=not args.no_details, plain=args.plain, quiet=args.quiet)
            add_to_history(values, current_profile)

        except UserInputError as e:
            _print_user_error(str(e))
        except (EOFError, KeyboardInterrupt):
            print()
            break
        except Exception as e:
            if rt.debug:
                traceback.print_exc()
            else:
                _print_user_error(f"{e.__class__.__name__}: {e}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
