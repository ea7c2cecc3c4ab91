"""Shared test fixtures for tandem tests."""

from collections.abc import Callable
from pathlib import Path

import pytest
from rich.console import Console


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def console() -> Console:
    return Console(
        width=70,
        force_terminal=True,
        highlight=False,
        color_system=None,
        legacy_windows=False,
    )


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove environment variables that feed into configuration."""
    import os

    monkeypatch.delenv("PORT", raising=False)
    for key in list(os.environ):
        if key.startswith("TANDEM_"):
            monkeypatch.delenv(key)


@pytest.fixture
def write_config(tmp_path: Path) -> Callable[[str], Path]:
    """Return a helper that writes a tandem.toml into tmp_path."""

    def _write(content: str) -> Path:
        path = tmp_path / "tandem.toml"
        _ = path.write_text(content)
        return path

    return _write
