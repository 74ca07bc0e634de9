from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

1. Puts the 'src' directory on sys.path.
2. Resets the diagnostics channel around every test.
3. Provides logger factories that keep the background scheduler quiet
   unless a test drives it explicitly.
"""

import os
import sys
from datetime import timedelta
from typing import Any, Callable, Generator, List

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from chronolog.core.logger import Logger  # noqa: E402
from chronolog.domain.config import LoggerConfig  # noqa: E402
from chronolog.infra.logging import reset_logging  # noqa: E402

# Long enough that the scheduler thread never ticks during a test
QUIET_INTERVAL = timedelta(hours=1)


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture(autouse=True)
def clean_diagnostics() -> Generator[None, None, None]:
    """Undo any diagnostics configuration installed by a test (e.g. the CLI)."""
    reset_logging()
    yield
    reset_logging()


@pytest.fixture
def log_path(tmp_path: Any) -> str:
    return str(tmp_path / "logs" / "app.log")


@pytest.fixture
def make_logger(log_path: str) -> Generator[Callable[..., Logger], None, None]:
    """
    Build loggers on ``log_path`` and close the ones a test leaves open.

    Keyword arguments are forwarded to LoggerConfig.
    """
    created: List[Logger] = []

    def _factory(**kwargs: Any) -> Logger:
        kwargs.setdefault("file_path", log_path)
        kwargs.setdefault("rotation_check_interval", QUIET_INTERVAL)
        instance = Logger(LoggerConfig(**kwargs))
        created.append(instance)
        return instance

    yield _factory

    for instance in created:
        if not instance.closed:
            instance.close()
