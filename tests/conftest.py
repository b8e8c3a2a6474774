"""Shared fixtures"""

from pathlib import Path

import pytest

from chat_rewriter.services import macro_store


@pytest.fixture
def macros_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the macro store at an empty temporary file location"""
    path = tmp_path / "macros.toml"
    monkeypatch.setattr(macro_store, "MACROS_FILE", str(path))
    return path


@pytest.fixture
def stored_macros(macros_file: Path) -> Path:
    """A macro file holding a few simple macros"""
    macros_file.write_text(
        'gr = "Hello {{1}}"\n'
        'ex = "Explain {{*}} step by step."\n'
        'two = "{{1}} and {{2}}"\n',
        encoding="utf-8",
    )
    return macros_file
