"""Smoke test: the quickstart example runs end to end."""
from __future__ import annotations

import importlib.util
from pathlib import Path

import pytest

QUICKSTART = Path(__file__).parent.parent / "examples" / "01_quickstart.py"


def _load_quickstart():
    spec = importlib.util.spec_from_file_location("quickstart_example", QUICKSTART)
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_quickstart_import() -> None:
    module = _load_quickstart()
    assert callable(module.main)


def test_quickstart_runs(capsys: pytest.CaptureFixture[str]) -> None:
    _load_quickstart().main()
    output = capsys.readouterr().out

    assert "Registered" in output
    assert "Transfer success=True, recipient balance=1000000000000000000" in output
    assert "Refused: DelegateExpired" in output
    assert "Delegates after revoke: []" in output.splitlines()
