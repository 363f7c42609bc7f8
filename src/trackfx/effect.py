"""Effects — computations that re-run when the reactive data they read changes.

Every run starts by detaching the effect from all the subscriber sets it
joined last time, then executes the body with the effect on top of the
engine's stack so each read re-subscribes it. Reads that sat on a branch no
longer taken simply don't come back.

Effects are created through Engine.register() / Engine.effect, not directly.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from trackfx.engine import Engine

logger = logging.getLogger("trackfx.effect")


class Effect:
    """A registered computation bound to one engine."""

    __slots__ = ("_fn", "_engine", "_deps", "_disposed")

    def __init__(self, engine: Engine, fn: Callable[[], object]) -> None:
        self._fn = fn
        self._engine = engine
        # Reverse dependency list: every subscriber set this effect is in.
        self._deps: list[set[Effect]] = []
        self._disposed = False

    @property
    def fn(self) -> Callable[[], object]:
        return self._fn

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def dependency_count(self) -> int:
        """Number of (source, field) pairs read during the last run."""
        return len(self._deps)

    def run(self) -> None:
        """Detach, then execute the body with this effect active.

        Exceptions from the body propagate; the stack is rebalanced first.
        A disposed effect never runs.
        """
        if self._disposed:
            return

        self._detach()

        with self._engine.stack.running(self):
            try:
                self._fn()
            except Exception:
                logger.debug("%r raised during run", self)
                raise

    def dispose(self) -> None:
        """Stop this effect. Disconnects from all dependencies."""
        if self._disposed:
            return
        self._disposed = True
        self._detach()
        logger.debug("Disposed %r", self)

    def _subscribe(self, subscribers: set[Effect]) -> None:
        if self._disposed or self in subscribers:
            return
        subscribers.add(self)
        self._deps.append(subscribers)

    def _detach(self) -> None:
        for subscribers in self._deps:
            subscribers.discard(self)
        self._deps.clear()

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else "active"
        name = getattr(self._fn, "__name__", type(self._fn).__name__)
        return f"Effect({name}, {state})"
