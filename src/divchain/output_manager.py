# output_manager.py

import hashlib
import os
import re
from collections.abc import Sequence

from divchain.fmt import strip_ansi
from divchain.workspace import workspace_dir

_SAFE_CHARS_RE = re.compile(r"[^A-Za-z0-9._=-]+")


def resolve_output_path(path: str, workspace_root: str) -> str:
    """
    Resolve user-provided output path.

    Rules:
    - '~' expanded to user home
    - Absolute paths unchanged
    - Relative paths are relative to workspace_root
    """
    if not path:
        raise ValueError("Output path is empty")

    path = os.path.expanduser(path)

    if os.path.isabs(path):
        return os.path.normpath(path)

    return os.path.normpath(os.path.join(workspace_root, path))


def _fallback_filename_for_values(values: Sequence[int], ext: str = ".txt", head: int = 4) -> str:
    """
    Filesystem-safe shortened filename that still lets you recognize the input.

    Format:
      n=<count>_<first values>_sha=<sha12>.txt
    """
    s = ",".join(str(v) for v in values)
    sha12 = hashlib.sha256(s.encode("utf-8")).hexdigest()[:12]
    head_part = "_".join(str(v)[:12] for v in values[:head])
    stem = f"n={len(values)}_{head_part}_sha={sha12}"
    stem = _SAFE_CHARS_RE.sub("_", stem).strip("._-=")
    return stem + ext


def _choose_split_output_path(directory: str, values: Sequence[int], ext: str = ".txt", max_full_path_len: int = 250) -> str:
    """
    Use '<v1>_<v2>_..._<vn>.txt' when the FULL path length is < max_full_path_len.
    Otherwise use a shortened, recognizable name.
    """
    stem = "_".join(str(v) for v in values) or "empty"
    original = os.path.join(directory, f"{stem}{ext}")
    if len(original) < max_full_path_len:
        return original

    return os.path.join(directory, _fallback_filename_for_values(values, ext=ext))


class OutputManager:
    """
    Handles all printing/output, including to screen and/or file.

    Usage:
        # Split mode (one file per input):
        om = OutputManager(output_file="runs/", values=[4, 8, 2])
        om.write("Hello")   # prints and buffers; file written on close()
        om.close()

        # Single file (append all runs to one file):
        om = OutputManager(output_file="runs/all.txt")
        om.write("Hello")   # prints and appends
        om.close()
    """

    def __init__(self, output_file: str | None = None, quiet: bool = False, values: Sequence[int] | None = None):
        """
        Parameters:
            output_file:
                None or ""       => screen only
                "." or "./"      => one file per input in the workspace
                endswith "/"     => one file per input in that directory
                path/to/file.txt => append all runs to this file
            quiet: if True, no output to screen (only to file)
            values: the input list, used for the filename in split mode
        """
        self.quiet = quiet
        self.output_file = output_file or ""
        self.values = list(values) if values is not None else None
        self._buffer: list[str] = []

        # Resolve mode & paths; no files are opened here.
        self._mode: str = "none"     # "none" | "split" | "single"
        self._split_path: str | None = None
        self._single_path: str | None = None

        if self.output_file in (".", "./") or self.output_file.endswith("/"):
            if self.values is None:
                raise ValueError("Input values must be provided when outputting to a directory.")
            directory = resolve_output_path(self.output_file, str(workspace_dir()))
            os.makedirs(directory, exist_ok=True)
            self._mode = "split"
            self._split_path = _choose_split_output_path(directory, self.values)

        elif self.output_file:
            path = resolve_output_path(self.output_file, str(workspace_dir()))
            parent = os.path.dirname(path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            self._mode = "single"
            self._single_path = path

    @property
    def path(self) -> str | None:
        return self._split_path or self._single_path

    def write(self, *args, sep: str = " ", end: str = "\n") -> None:
        """Write to screen and file (if configured)."""
        text = sep.join(str(a) for a in args) + end
        self._buffer.append(text)

        if not self.quiet:
            print(text, end="")

        if self._mode == "single" and self._single_path:
            try:
                with open(self._single_path, "a", encoding="utf-8") as fh:
                    fh.write(strip_ansi(text))
            except OSError as e:
                self._warn(self._single_path, e)
                self._mode = "none"
        # split mode writes once on close()

    def write_screen(self, *args, sep: str = " ", end: str = "\n", flush: bool = True) -> None:
        """Write only to the screen, never to the file."""
        if self.quiet:
            return
        print(*args, sep=sep, end=end, flush=flush)

    def _warn(self, path: str, e: OSError) -> None:
        self.write_screen(f"[WARNING] Could not write output file: {path} ({type(e).__name__}: {e})")

    def close(self) -> None:
        """Flush buffered output to the per-input file (split mode) or add a separator (single mode)."""
        if self._mode == "split" and self._split_path and self._buffer:
            try:
                with open(self._split_path, "w", encoding="utf-8") as fh:
                    fh.write(strip_ansi("".join(self._buffer)))
            except OSError as e:
                self._warn(self._split_path, e)
            self._mode = "none"
            return

        if self._mode == "single" and self._single_path and self._buffer:
            try:
                with open(self._single_path, "a", encoding="utf-8") as fh:
                    fh.write("\n")  # one empty line between runs
            except OSError as e:
                self._warn(self._single_path, e)
            self._mode = "none"

    def __enter__(self) -> "OutputManager":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
