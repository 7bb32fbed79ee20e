"""Shared test fixtures for quotafetch.

Provides an isolated config environment, a clean global output manager,
and a recording logger that captures the debug lines emitted by the
cache and the governor.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from quotafetch.output import OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Install a non-verbose OutputManager for each test and drop it afterwards."""
    set_output(OutputManager(no_color=True))
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Logger capture
# ---------------------------------------------------------------------------


class RecordingLogger:
    """Logger stand-in that keeps every debug message."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def debug(self, message: str) -> None:
        self.messages.append(message)

    def matching(self, fragment: str) -> list[str]:
        return [m for m in self.messages if fragment in m]


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points XDG_CONFIG_HOME at tmp_path and clears every QUOTAFETCH_*
    environment variable so tests never read the developer's real config.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("quotafetch.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))

    for var in [
        "QUOTAFETCH_TOKEN",
        "QUOTAFETCH_TOKEN_SOURCE",
        "QUOTAFETCH_BASE_URL",
        "QUOTAFETCH_CACHE_TTL",
        "QUOTAFETCH_PACING_INTERVAL",
        "QUOTAFETCH_RATE_LIMIT_WINDOW",
        "QUOTAFETCH_VERBOSE",
    ]:
        monkeypatch.delenv(var, raising=False)

    return tmp_path
