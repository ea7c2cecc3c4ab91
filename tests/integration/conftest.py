import os
import sys
from pathlib import Path

import pytest


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        if Path(item.path).is_relative_to(Path(__file__).parent):
            item.add_marker(pytest.mark.integration)


@pytest.fixture
def sleeper() -> tuple[str, ...]:
    """Command for a child that runs until it is signalled."""
    return (sys.executable, "-c", "import time; time.sleep(60)")


@pytest.fixture
def exiter() -> tuple[str, ...]:
    """Command for a child that exits with status 3 right away."""
    return (sys.executable, "-c", "import sys; sys.exit(3)")


@pytest.fixture
def subprocess_env() -> dict[str, str]:
    """Environment for running tandem itself as a subprocess."""
    env = {
        key: value
        for key, value in os.environ.items()
        if key != "PORT" and not key.startswith("TANDEM_")
    }
    env["PYTHONUNBUFFERED"] = "1"
    return env
