"""The reactive engine — registry + active-effect stack + track/trigger.

An interception layer (see trackfx.reactive, or roll your own) calls
track(source, field) on every reactive read and trigger(source, field) on
every write. Everything else follows:

    engine = Engine()
    state = {"foo": True}

    def read(key):
        engine.track(state, key)
        return state[key]

    def write(key, value):
        state[key] = value
        engine.trigger(state, key)

    engine.register(lambda: print(read("foo")))   # prints True
    write("foo", False)                           # prints False

Everything is synchronous and single-threaded. trigger() runs subscribers
inline, and writes made by those subscribers recurse through trigger().
Nothing guards against an effect that unconditionally writes a field it
reads; that recurses until RecursionError.
"""

from __future__ import annotations

import logging
from typing import Callable, Hashable

from trackfx._registry import DependencyRegistry
from trackfx._stack import EffectStack
from trackfx.effect import Effect

logger = logging.getLogger("trackfx.engine")


class Engine:
    """Owns one dependency registry and one active-effect stack.

    Engines share nothing, so independent reactive systems (and tests) can
    live side by side.
    """

    __slots__ = ("name", "registry", "stack")

    def __init__(
        self,
        name: str = "default",
        *,
        registry: DependencyRegistry | None = None,
        stack: EffectStack | None = None,
    ) -> None:
        self.name = name
        self.registry = registry if registry is not None else DependencyRegistry()
        self.stack = stack if stack is not None else EffectStack()

    @property
    def active_effect(self) -> Effect | None:
        return self.stack.active

    # ─── Effects ─────────────────────────────────────────────────────────────

    def register(self, fn: Callable[[], object]) -> Effect:
        """Wrap fn in an effect and run it once, right away.

        Returns the Effect; keep it only if you intend to dispose it.

        Usage:
            state = ReactiveDict(engine, {"count": 0})
            log = []

            engine.register(lambda: log.append(state["count"]))
            # log == [0] — ran immediately

            state["count"] = 1
            # log == [0, 1]
        """
        if not callable(fn):
            raise TypeError(f"effect body must be callable, got {type(fn).__name__}")
        effect = Effect(self, fn)
        logger.debug("[%s] registering %r (depth=%d)", self.name, effect, self.stack.depth)
        effect.run()
        return effect

    def effect(self, fn: Callable[[], object]) -> Effect:
        """Decorator form of register().

        Usage:
            @engine.effect
            def render():
                print(state["title"])
        """
        return self.register(fn)

    def dispose(self, effect: Effect) -> None:
        """Detach effect from everything and make it inert. Idempotent."""
        effect.dispose()

    def detach(self, effect: Effect) -> None:
        """Remove effect from every subscriber set it joined in its last run."""
        effect._detach()

    def forget(self, source: object) -> None:
        """Drop all dependency records for source.

        Only needed for sources that can't be weakly referenced; the rest are
        dropped automatically once collected.
        """
        self.registry.discard(source)

    # ─── Track / trigger ─────────────────────────────────────────────────────

    def track(self, source: object, field: Hashable) -> None:
        """Subscribe the active effect to (source, field). No-op outside effects."""
        effect = self.stack.active
        if effect is None:
            return
        effect._subscribe(self.registry.subscribers_for(source, field))

    def trigger(self, source: object, field: Hashable) -> None:
        """Re-run every effect subscribed to (source, field).

        Runs a snapshot of the subscriber set: each re-run detaches and
        re-subscribes, mutating the live set, and an effect must run at most
        once per trigger() call.
        """
        subscribers = self.registry.get(source, field)
        if not subscribers:
            return
        snapshot = tuple(subscribers)
        logger.debug(
            "[%s] trigger %s.%s -> %d effect(s)",
            self.name, type(source).__name__, field, len(snapshot),
        )
        for effect in snapshot:
            effect.run()

    def __repr__(self) -> str:
        return f"Engine({self.name!r}, {len(self.registry)} sources, depth={self.stack.depth})"
