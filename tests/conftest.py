"""
Shared test fixtures and configuration.
"""

import os
import stat
import sys
import textwrap
from pathlib import Path

import pytest

from updatewiz.engine.models import OutputChunk


def make_script(directory: Path, body: str, name: str = "htotheizzo.sh") -> Path:
    """Write an executable Python script standing in for the maintenance script."""
    path = directory / name
    path.write_text(f"#!{sys.executable}\n" + textwrap.dedent(body))
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


def exit_command(code: int):
    """Elevation command that exits with ``code``."""
    return (sys.executable, "-c", f"import sys; sys.exit({code})")


def chunk(text: str, seq: int = 0, stream: str = "stdout") -> OutputChunk:
    return OutputChunk(seq=seq, text=text, stream=stream)


@pytest.fixture
def script_factory(tmp_path: Path):
    """Return a callable that writes a fake maintenance script into tmp_path."""
    def _factory(body: str, name: str = "htotheizzo.sh") -> Path:
        return make_script(tmp_path, body, name)
    return _factory


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every UPDATEWIZ_* variable so settings come from defaults."""
    for key in list(os.environ):
        if key.startswith("UPDATEWIZ_"):
            monkeypatch.delenv(key, raising=False)
