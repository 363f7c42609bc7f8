"""Tests for EffectStack — push/pop discipline."""

import pytest

from trackfx import EffectStack


class TestEffectStack:
    def test_empty(self):
        s = EffectStack()
        assert s.active is None
        assert s.depth == 0

    def test_running_sets_active(self):
        s = EffectStack()
        marker = object()
        with s.running(marker):
            assert s.active is marker
            assert s.depth == 1
        assert s.active is None

    def test_nesting_restores_outer(self):
        s = EffectStack()
        outer, inner = object(), object()
        with s.running(outer):
            with s.running(inner):
                assert s.active is inner
            assert s.active is outer
            assert s.depth == 1
        assert s.depth == 0

    def test_pops_on_exception(self):
        s = EffectStack()
        outer, inner = object(), object()
        with s.running(outer):
            with pytest.raises(ValueError):
                with s.running(inner):
                    raise ValueError("boom")
            assert s.active is outer
        assert s.active is None
