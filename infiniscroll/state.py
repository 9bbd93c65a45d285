"""
Scroll state snapshots.

ScrollState is the single source of truth a renderer observes. Instances are
immutable; the state machine replaces its snapshot on every mutation and
checks the invariants before publishing it.
"""

from dataclasses import dataclass, replace
from enum import Enum
from itertools import chain
from typing import Any

from .exceptions import StateInvariantError


class ScrollPhase(str, Enum):
    """Coarse lifecycle position derived from a snapshot."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    LOADING_MORE = "loading_more"
    REFRESHING = "refreshing"
    FAILED = "failed"


@dataclass(frozen=True)
class ScrollState:
    """
    Accumulated pagination data plus "which operation is in flight" flags.

    Attributes:
        items: All loaded items, always equal to pages flattened in order
        pages: Fetched batches in fetch order
        current_page: Last page index fetched (page mode only)
        cursor: Continuation token for the next batch (cursor mode only)
        has_more: Whether a further fetch is expected to return data
        is_loading: Initial load in flight (or pending, when auto-loading)
        is_loading_more: Load-more in flight
        is_refreshing: Refresh in flight
        error: Message of the most recent failed operation
        total_items: Externally known size of the collection
    """

    items: tuple[Any, ...] = ()
    pages: tuple[tuple[Any, ...], ...] = ()
    current_page: int = 0
    cursor: str | None = None
    has_more: bool = True
    is_loading: bool = False
    is_loading_more: bool = False
    is_refreshing: bool = False
    error: str | None = None
    total_items: int | None = None

    @classmethod
    def initial(
        cls, current_page: int = 0, total_items: int | None = None, is_loading: bool = True
    ) -> "ScrollState":
        """Empty state a machine starts from and returns to on reset."""
        return cls(current_page=current_page, total_items=total_items, is_loading=is_loading)

    def evolve(self, **changes: Any) -> "ScrollState":
        """Returns a copy with the given fields replaced."""
        return replace(self, **changes)

    def with_pages(self, pages: tuple[tuple[Any, ...], ...], **changes: Any) -> "ScrollState":
        """Returns a copy holding the given pages and their flattened items."""
        return replace(self, pages=pages, items=tuple(chain.from_iterable(pages)), **changes)

    def check_invariants(self) -> None:
        """
        Verifies the structural invariants of the snapshot.

        Raises:
            StateInvariantError: If items is not pages flattened, more than one
                                 loading flag is set, or current_page is negative
        """
        if self.items != tuple(chain.from_iterable(self.pages)):
            raise StateInvariantError("items must equal pages flattened in order")

        active = [self.is_loading, self.is_loading_more, self.is_refreshing]
        if sum(active) > 1:
            raise StateInvariantError("at most one loading flag may be set")

        if self.current_page < 0:
            raise StateInvariantError("current_page must not be negative")

    # --- DERIVED VIEWS ---

    @property
    def phase(self) -> ScrollPhase:
        if self.is_loading:
            return ScrollPhase.LOADING
        if self.is_loading_more:
            return ScrollPhase.LOADING_MORE
        if self.is_refreshing:
            return ScrollPhase.REFRESHING
        if self.error is not None:
            return ScrollPhase.FAILED
        if self.pages:
            return ScrollPhase.READY
        return ScrollPhase.IDLE

    @property
    def is_busy(self) -> bool:
        return self.is_loading or self.is_loading_more or self.is_refreshing

    @property
    def can_load_more(self) -> bool:
        """True when a load-more call would not be rejected by the state flags."""
        return self.has_more and not self.is_loading and not self.is_loading_more

    @property
    def has_loaded(self) -> bool:
        """True once a first batch has been stored (even an empty one)."""
        return bool(self.pages)

    @property
    def is_empty(self) -> bool:
        return not self.items and not self.is_loading

    @property
    def loaded_count(self) -> int:
        return len(self.items)
