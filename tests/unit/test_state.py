"""
Unit tests for ScrollState snapshots.

Tests construction, the invariant checks and the derived views.
"""

from dataclasses import FrozenInstanceError

import pytest

from infiniscroll.exceptions import StateInvariantError
from infiniscroll.state import ScrollPhase, ScrollState


@pytest.mark.unit
class TestScrollStateConstruction:
    """Test factories and copies."""

    def test_initial_state(self):
        state = ScrollState.initial()

        assert state.items == ()
        assert state.pages == ()
        assert state.current_page == 0
        assert state.cursor is None
        assert state.has_more is True
        assert state.is_loading is True
        assert state.is_loading_more is False
        assert state.is_refreshing is False
        assert state.error is None
        assert state.total_items is None

    def test_initial_state_without_auto_load(self):
        state = ScrollState.initial(current_page=2, total_items=100, is_loading=False)

        assert state.is_loading is False
        assert state.current_page == 2
        assert state.total_items == 100

    def test_is_frozen(self):
        state = ScrollState()
        with pytest.raises(FrozenInstanceError):
            state.error = "boom"

    def test_evolve_returns_new_instance(self):
        state = ScrollState()
        changed = state.evolve(error="boom")

        assert changed is not state
        assert changed.error == "boom"
        assert state.error is None

    def test_with_pages_flattens(self):
        state = ScrollState().with_pages((("a", "b"), ("c",)), current_page=1)

        assert state.items == ("a", "b", "c")
        assert state.pages == (("a", "b"), ("c",))
        assert state.current_page == 1

    def test_equal_snapshots_compare_equal(self):
        assert ScrollState.initial() == ScrollState.initial()


@pytest.mark.unit
class TestScrollStateInvariants:
    """Test check_invariants()."""

    def test_valid_state_passes(self):
        ScrollState().with_pages((("a",), ("b",)), is_loading_more=True).check_invariants()

    def test_items_must_match_pages(self):
        state = ScrollState(items=("a",), pages=(("a",), ("b",)))
        with pytest.raises(StateInvariantError, match="flattened"):
            state.check_invariants()

    def test_items_order_matters(self):
        state = ScrollState(items=("b", "a"), pages=(("a", "b"),))
        with pytest.raises(StateInvariantError):
            state.check_invariants()

    @pytest.mark.parametrize(
        "flags",
        [
            {"is_loading": True, "is_loading_more": True},
            {"is_loading": True, "is_refreshing": True},
            {"is_loading_more": True, "is_refreshing": True},
            {"is_loading": True, "is_loading_more": True, "is_refreshing": True},
        ],
    )
    def test_at_most_one_loading_flag(self, flags):
        with pytest.raises(StateInvariantError, match="loading flag"):
            ScrollState(**flags).check_invariants()

    def test_current_page_not_negative(self):
        with pytest.raises(StateInvariantError):
            ScrollState(current_page=-1).check_invariants()


@pytest.mark.unit
class TestScrollStateDerivedViews:
    """Test phase and convenience properties."""

    def test_idle(self):
        state = ScrollState.initial(is_loading=False)
        assert state.phase is ScrollPhase.IDLE
        assert state.has_loaded is False
        assert state.is_empty is True

    def test_loading(self):
        assert ScrollState.initial().phase is ScrollPhase.LOADING

    def test_ready(self):
        state = ScrollState().with_pages((("a",),))
        assert state.phase is ScrollPhase.READY
        assert state.has_loaded is True
        assert state.loaded_count == 1

    def test_ready_with_empty_first_page(self):
        state = ScrollState().with_pages(((),), has_more=False)
        assert state.phase is ScrollPhase.READY
        assert state.is_empty is True

    def test_loading_more(self):
        state = ScrollState().with_pages((("a",),), is_loading_more=True)
        assert state.phase is ScrollPhase.LOADING_MORE
        assert state.is_busy is True

    def test_refreshing(self):
        assert ScrollState(is_refreshing=True).phase is ScrollPhase.REFRESHING

    def test_failed(self):
        state = ScrollState().with_pages((("a",),), error="network down")
        assert state.phase is ScrollPhase.FAILED

    def test_can_load_more(self):
        ready = ScrollState().with_pages((("a",),), has_more=True)
        assert ready.can_load_more is True
        assert ready.evolve(has_more=False).can_load_more is False
        assert ready.evolve(is_loading=True).can_load_more is False
        assert ready.evolve(is_loading_more=True).can_load_more is False
