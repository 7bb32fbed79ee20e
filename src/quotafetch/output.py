"""Diagnostic output for quotafetch.

quotafetch never writes to stdout; everything it reports (queue depth,
cache activity, rate-limit pauses) is a debug diagnostic and goes to
stderr, and only in verbose mode.  Colour respects ``NO_COLOR``,
``TERM=dumb``, and the ``no_color`` constructor flag.

:class:`OutputManager` is the default logger of the cache and the
governor.  Any object with a ``debug(message)`` method can stand in for
it.  :func:`get_output` and :func:`set_output` manage the process-wide
instance those components fall back to.
"""

from __future__ import annotations

import os
import sys
from typing import Optional

from rich.console import Console


class OutputManager:
    """Stderr diagnostics sink backed by a Rich :class:`~rich.console.Console`.

    Args:
        no_color: Disable all colour.
        verbose: Print debug messages.  Without it :meth:`debug` is a no-op.
    """

    def __init__(self, no_color: bool = False, verbose: bool = False) -> None:
        self._no_color = no_color or _should_disable_color()
        self._verbose = verbose
        self._stderr = Console(
            file=sys.stderr,
            no_color=self._no_color,
            stderr=True,
        )

    @property
    def is_verbose(self) -> bool:
        """Whether verbose mode is enabled."""
        return self._verbose

    def debug(self, message: str) -> None:
        """Print a debug message, prefixed with ``[debug]``. Verbose mode only."""
        if self._verbose:
            if self._no_color:
                print(f"[debug] {message}", file=sys.stderr, flush=True)
            else:
                # markup=False: URLs with [brackets] in query strings are not markup
                self._stderr.print(f"[debug] {message}", style="dim", markup=False)


def _should_disable_color() -> bool:
    """Check if color should be disabled per clig.dev.

    Returns True when NO_COLOR env var is set (any value) or TERM=dumb.
    """
    if os.environ.get("NO_COLOR") is not None:
        return True
    if os.environ.get("TERM") == "dumb":
        return True
    return False


# ------------------------------------------------------------------ #
# Global output instance
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the global :class:`OutputManager`, creating a default one lazily."""
    global _output
    if _output is None:
        _output = OutputManager(verbose=bool(os.environ.get("QUOTAFETCH_VERBOSE")))
    return _output


def set_output(output: OutputManager) -> None:
    """Install *output* as the global :class:`OutputManager` instance."""
    global _output
    _output = output


def reset_output() -> None:
    """Reset the global :class:`OutputManager` to ``None``.

    Primarily useful in test suites to ensure a clean state between tests.
    """
    global _output
    _output = None
