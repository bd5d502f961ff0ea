"""Shared fixtures for strata-config tests."""

from pathlib import Path

import pytest

APP = "fruit"


class MemoryVault:
    """Vault keeping accounts in a dict."""

    name = "memory"

    def __init__(self):
        self.store: dict[str, str] = {}
        self.saves = 0

    def load(self, account: str) -> str | None:
        return self.store.get(account)

    def save(self, account: str, value: str) -> None:
        self.saves += 1
        self.store[account] = value


@pytest.fixture
def vault():
    """Create an empty in-memory vault."""
    return MemoryVault()


@pytest.fixture
def dirs(tmp_path, monkeypatch):
    """Create separate project and home directories.

    The OS home is pointed inside tmp_path so the project search never
    escapes the test directory.
    """
    project = tmp_path / "project"
    home = tmp_path / "home" / f".{APP}"
    project.mkdir(parents=True)
    home.mkdir(parents=True)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.delenv("FRUIT_CLI_HOME", raising=False)
    return {"project": project, "home": home}


def write_json(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path
