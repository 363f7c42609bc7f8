"""trackfx: dependency-tracking reactive effects for Python."""

from importlib.metadata import version as _version

__version__ = _version("trackfx")

from trackfx._registry import DependencyRegistry
from trackfx._stack import EffectStack
from trackfx.effect import Effect
from trackfx.engine import Engine
from trackfx.reactive import ReactiveDict, ReactiveObject, reactive, raw

__all__ = [
    "Engine",
    "Effect",
    "EffectStack",
    "DependencyRegistry",
    "ReactiveDict",
    "ReactiveObject",
    "reactive",
    "raw",
]
