# tests/conftest.py
from __future__ import annotations

import pytest

from divchain import cli, runtime


@pytest.fixture(autouse=True)
def workspace(tmp_path, monkeypatch):
    """Every test gets its own workspace and a fresh runtime."""
    home = tmp_path / "ws"
    monkeypatch.setenv("DIVCHAIN_HOME", str(home))
    runtime.reset()
    yield home
    runtime.reset()


@pytest.fixture
def run_cli(monkeypatch):
    """Call cli.main() without letting colorama re-wrap the captured streams."""
    monkeypatch.setattr(cli, "colorama_init", lambda **kw: None)

    def _run(*argv: str) -> int:
        return cli.main(list(argv))

    return _run
