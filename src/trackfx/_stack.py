"""Active-effect stack.

The top of the stack is the effect that receives new trackings. A stack
rather than a single slot is what lets a nested effect take over attribution
and hand it back to its parent when it finishes.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Iterator

if TYPE_CHECKING:
    from trackfx.effect import Effect


class EffectStack:
    """Stack of currently-running effects. Top is the active one."""

    __slots__ = ("_effects",)

    def __init__(self) -> None:
        self._effects: list[Effect] = []

    @property
    def active(self) -> Effect | None:
        """The currently executing effect, or None outside any effect."""
        return self._effects[-1] if self._effects else None

    @property
    def depth(self) -> int:
        return len(self._effects)

    @contextmanager
    def running(self, effect: Effect) -> Iterator[Effect]:
        """Make effect active for the duration of the block.

        The pop happens on every exit path, so a raising body can't leave a
        stale effect on top.
        """
        self._effects.append(effect)
        try:
            yield effect
        finally:
            self._effects.pop()

    def __repr__(self) -> str:
        return f"EffectStack(depth={len(self._effects)})"
