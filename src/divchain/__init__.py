from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version

# Version
try:
    __version__ = _pkg_version("divchain")
except PackageNotFoundError:
    __version__ = "0+unknown"

# Public API re-exports
from .config import has_profile, load_settings, read_current_profile
from .fmt import format_int_list
from .runtime import APPLY, CFG
from .subset import (
    ChainTables,
    DivisibleChain,
    build_largest_divisible_subset,
    find_largest_divisible_chain,
    is_divisor_chain,
    order_like_input,
)
from .workspace import workspace_dir

__all__ = [
    "APPLY",
    "CFG",
    "ChainTables",
    "DivisibleChain",
    "__version__",
    "build_largest_divisible_subset",
    "find_largest_divisible_chain",
    "format_int_list",
    "has_profile",
    "is_divisor_chain",
    "load_settings",
    "order_like_input",
    "read_current_profile",
    "workspace_dir",
]
