"""Dependency registry — which effects depend on which (source, field) pairs.

Two-level mapping: source identity -> field key -> set of effects.

Sources are keyed by id(), never by hash/eq, so plain dicts and objects with
value equality work as sources. The registry does not own its sources, and
since subscribed effects usually close over the very source they read, it
can't own their field maps either (source -> effect -> source would then be
rooted in the registry). Three storage modes:

- owned: sources with an instance __dict__ carry their own field map under
  OWNED_ATTR. The registry holds weak refs to the source and to the map, so
  a source and the effects that only it reaches are collected together.
- weak: weakly referenceable sources without a __dict__. The registry keeps
  the field map; the entry is evicted when the source is collected, which
  can only happen once no subscribed effect reaches the source.
- pinned: sources that can't be weakly referenced (dict, list, ...). Held
  strongly until discard().
"""

from __future__ import annotations

import itertools
import logging
import weakref
from typing import TYPE_CHECKING, Hashable

if TYPE_CHECKING:
    from trackfx.effect import Effect

logger = logging.getLogger("trackfx._registry")

# Attribute an owned source keeps its field maps under, one per registry.
OWNED_ATTR = "__trackfx_deps__"

_registry_ids = itertools.count(1)


class _FieldMap(dict):
    """field key -> subscriber set. A dict subclass so it can be weakly referenced."""

    __slots__ = ("__weakref__",)


class _Pin:
    """Strong stand-in for weakref.ref."""

    __slots__ = ("_obj",)

    def __init__(self, obj: object) -> None:
        self._obj = obj

    def __call__(self) -> object:
        return self._obj


class _Entry:
    __slots__ = ("ref", "fields", "mode")

    def __init__(self, ref, fields, mode: str) -> None:
        self.ref = ref
        self.fields = fields
        self.mode = mode


class DependencyRegistry:
    """Maps (source, field) to the set of effects subscribed to it."""

    def __init__(self) -> None:
        self._id = next(_registry_ids)
        self._entries: dict[int, _Entry] = {}

    def subscribers_for(self, source: object, field: Hashable) -> set[Effect]:
        """Return the subscriber set for (source, field), creating it if absent."""
        fields = self._fields(source)
        if fields is None:
            fields = self._add_entry(source)
        subscribers = fields.get(field)
        if subscribers is None:
            subscribers = fields[field] = set()
        return subscribers

    def get(self, source: object, field: Hashable) -> set[Effect] | None:
        """Non-creating lookup. Returns None when nobody ever tracked the pair."""
        fields = self._fields(source)
        if fields is None:
            return None
        return fields.get(field)

    def discard(self, source: object) -> None:
        """Drop every entry for source. Silent if there is none."""
        entry = self._entry(source)
        if entry is None:
            return
        del self._entries[id(source)]
        if entry.mode == "owned":
            owned = vars(source).get(OWNED_ATTR)
            if owned is not None:
                owned.pop(self._id, None)
        logger.debug("Evicted %s source %#x", type(source).__name__, id(source))

    def mode_of(self, source: object) -> str | None:
        """Storage mode for source ("owned", "weak", "pinned"), None if untracked."""
        entry = self._entry(source)
        return entry.mode if entry is not None else None

    def _entry(self, source: object) -> _Entry | None:
        entry = self._entries.get(id(source))
        # A dead weakref whose callback hasn't fired yet means the id now
        # belongs to a different object.
        if entry is None or entry.ref() is not source:
            return None
        return entry

    def _fields(self, source: object) -> _FieldMap | None:
        entry = self._entry(source)
        if entry is None:
            return None
        return entry.fields()

    def _add_entry(self, source: object) -> _FieldMap:
        key = id(source)
        self_ref = weakref.ref(self)
        fields = _FieldMap()

        def _evict(_ref, key=key):
            registry = self_ref()
            if registry is not None:
                entry = registry._entries.get(key)
                if entry is not None and entry.ref is _ref:
                    del registry._entries[key]
                    logger.debug("Source %#x collected, entry evicted", key)

        try:
            ref = weakref.ref(source, _evict)
        except TypeError:
            logger.debug(
                "%s source %#x is not weakly referenceable, pinning until discarded",
                type(source).__name__, key,
            )
            entry = _Entry(_Pin(source), _Pin(fields), "pinned")
        else:
            instance_dict = getattr(source, "__dict__", None)
            if isinstance(instance_dict, dict):
                instance_dict.setdefault(OWNED_ATTR, {})[self._id] = fields
                entry = _Entry(ref, weakref.ref(fields), "owned")
            else:
                entry = _Entry(ref, _Pin(fields), "weak")

        self._entries[key] = entry
        return fields

    def __contains__(self, source: object) -> bool:
        return self._entry(source) is not None

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"DependencyRegistry({len(self._entries)} sources)"
