"""Reactive proxies — the interception layer that feeds an Engine.

Reads call engine.track(target, key) before the value is returned; writes
commit to the target first, then call engine.trigger(target, key). The
registry is keyed on the raw target, so every proxy over the same target
shares dependencies.

Writes always trigger, even when the new value equals the old one.
Iteration and len() are untracked: only per-key reads create dependencies.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from typing import Generic, Iterator, TypeVar

from trackfx.engine import Engine

KT = TypeVar("KT")
VT = TypeVar("VT")


class ReactiveDict(MutableMapping, Generic[KT, VT]):
    """A mapping view over a plain dict that tracks reads and triggers on writes."""

    __slots__ = ("_trackfx_engine", "_trackfx_target")

    def __init__(self, engine: Engine, data: dict[KT, VT] | None = None) -> None:
        self._trackfx_engine = engine
        self._trackfx_target = data if data is not None else {}

    # --- Read operations (track) ---

    def __getitem__(self, key: KT) -> VT:
        self._trackfx_engine.track(self._trackfx_target, key)
        return self._trackfx_target[key]

    def get(self, key: KT, default: VT | None = None) -> VT | None:
        self._trackfx_engine.track(self._trackfx_target, key)
        return self._trackfx_target.get(key, default)

    def __contains__(self, key: object) -> bool:
        self._trackfx_engine.track(self._trackfx_target, key)
        return key in self._trackfx_target

    # --- Untracked ---

    def __iter__(self) -> Iterator[KT]:
        return iter(self._trackfx_target)

    def __len__(self) -> int:
        return len(self._trackfx_target)

    # --- Write operations (trigger) ---

    def __setitem__(self, key: KT, value: VT) -> None:
        self._trackfx_target[key] = value
        self._trackfx_engine.trigger(self._trackfx_target, key)

    def __delitem__(self, key: KT) -> None:
        del self._trackfx_target[key]
        self._trackfx_engine.trigger(self._trackfx_target, key)

    def __repr__(self) -> str:
        return f"ReactiveDict({self._trackfx_target!r})"


class ReactiveObject:
    """Attribute proxy: obj.x reads track, obj.x = v writes trigger.

    The proxy keeps its own state in _trackfx_engine / _trackfx_target; target
    attributes with those two names are shadowed.
    """

    __slots__ = ("_trackfx_engine", "_trackfx_target")

    def __init__(self, engine: Engine, target: object) -> None:
        object.__setattr__(self, "_trackfx_engine", engine)
        object.__setattr__(self, "_trackfx_target", target)

    def __getattr__(self, name: str):
        self._trackfx_engine.track(self._trackfx_target, name)
        return getattr(self._trackfx_target, name)

    def __setattr__(self, name: str, value) -> None:
        setattr(self._trackfx_target, name, value)
        self._trackfx_engine.trigger(self._trackfx_target, name)

    def __delattr__(self, name: str) -> None:
        delattr(self._trackfx_target, name)
        self._trackfx_engine.trigger(self._trackfx_target, name)

    def __repr__(self) -> str:
        return f"ReactiveObject({self._trackfx_target!r})"


def reactive(engine: Engine, target):
    """Wrap target in the right proxy: ReactiveDict for dicts, ReactiveObject otherwise.

    A proxy bound to engine is returned as is; one bound to another engine is
    rewrapped around its raw target.

    Usage:
        engine = Engine()
        state = reactive(engine, {"foo": True, "bar": True})
        engine.register(lambda: print(state["foo"]))
    """
    if isinstance(target, (ReactiveDict, ReactiveObject)):
        if object.__getattribute__(target, "_trackfx_engine") is engine:
            return target
        target = raw(target)
    if isinstance(target, dict):
        return ReactiveDict(engine, target)
    if isinstance(target, Mapping):
        raise TypeError(f"only plain dicts can be wrapped as mappings, got {type(target).__name__}")
    return ReactiveObject(engine, target)


def raw(proxy):
    """Return the object a proxy wraps. Non-proxies are returned unchanged."""
    if isinstance(proxy, (ReactiveDict, ReactiveObject)):
        return object.__getattribute__(proxy, "_trackfx_target")
    return proxy
