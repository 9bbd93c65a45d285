"""
The pagination state machine.

PaginationStateMachine owns one ScrollState and drives it through the four
operations a scrolling list needs: load_initial, load_more, refresh and reset.
Fetch failures never escape these operations; they are recorded on the state.
"""

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from enum import Enum
from types import TracebackType
from typing import Any

from ._logging import logger, redact_cursor
from .config import CursorBasedConfig, PageBasedConfig, parse_config
from .exceptions import FetchFailure
from .guard import ConcurrencyGuard
from .state import ScrollState
from .strategy import FetchOutcome, PaginationStrategy, resolve_strategy
from .threshold import calculate_end_reached_threshold

Listener = Callable[[ScrollState], None]


class Operation(str, Enum):
    """Guarded operations, also used as the 'operation' logging field."""

    LOAD_INITIAL = "load_initial"
    LOAD_MORE = "load_more"
    REFRESH = "refresh"


# Shown when a fetch function fails with an empty message.
DEFAULT_ERROR_MESSAGES: dict[Operation, str] = {
    Operation.LOAD_INITIAL: "Failed to load data",
    Operation.LOAD_MORE: "Failed to load more items",
    Operation.REFRESH: "Failed to refresh data",
}

_IN_FLIGHT_FLAG: dict[Operation, str] = {
    Operation.LOAD_INITIAL: "is_loading",
    Operation.LOAD_MORE: "is_loading_more",
    Operation.REFRESH: "is_refreshing",
}


def _flags(operation: Operation | None) -> dict[str, bool]:
    """Loading flags with only the flag of operation set (all clear for None)."""
    flags = dict.fromkeys(_IN_FLIGHT_FLAG.values(), False)
    if operation is not None:
        flags[_IN_FLIGHT_FLAG[operation]] = True
    return flags


class PaginationStateMachine:
    """
    Incrementally materializes a paginated collection into a ScrollState.

    At most one fetch is in flight per machine. An operation triggered while
    another is running is dropped, not queued: callers re-trigger once the
    flags clear. Every operation returns the snapshot it left behind, and
    subscribers receive each new snapshot as it is published.

    Usage:
        machine = PaginationStateMachine(PageBasedConfig(fetch_data=api.list_items))
        async with machine:                # runs load_initial() when auto_load
            await machine.load_more()
            print(machine.items)
    """

    def __init__(self, config: PageBasedConfig | CursorBasedConfig | Mapping[str, Any]) -> None:
        self._config = parse_config(config)
        self._strategy: PaginationStrategy[Any] = resolve_strategy(self._config)
        self._guard = ConcurrencyGuard()
        self._listeners: list[Listener] = []
        self._disposed = False
        self._last_failed: Operation | None = None

        self._state = self._initial_state()
        self._state.check_invariants()

    # --- PROPERTIES ---

    @property
    def config(self) -> PageBasedConfig | CursorBasedConfig:
        return self._config

    @property
    def state(self) -> ScrollState:
        """The current immutable snapshot."""
        return self._state

    @property
    def items(self) -> tuple[Any, ...]:
        return self._state.items

    @property
    def mode(self) -> str:
        return self._strategy.mode

    @property
    def can_load_more(self) -> bool:
        """True when load_more() would issue a fetch right now."""
        state = self._state
        return (
            state.can_load_more
            and state.has_loaded
            and not self._guard.busy
            and self._strategy.can_continue(state)
        )

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @property
    def end_reached_threshold(self) -> float:
        """Fraction-from-end at which the renderer should call on_end_reached()."""
        return calculate_end_reached_threshold(self._config.threshold)

    def get_item_key(self, item: Any, index: int) -> str:
        return self._config.item_key(item, index)

    # --- SUBSCRIPTIONS ---

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Registers a listener called with every snapshot the machine publishes.

        Returns:
            A callable that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # --- OPERATIONS ---

    async def load_initial(self) -> ScrollState:
        """
        Fetches the first batch and replaces the state with it.

        Runs only while nothing has been loaded yet or after a failed
        operation; use refresh() to reload a list that is already shown.
        """
        if self._skip(Operation.LOAD_INITIAL):
            return self._state

        if self._state.has_loaded and self._state.error is None:
            logger.debug(
                "Operation skipped: data already loaded",
                extra={"operation": Operation.LOAD_INITIAL.value, "mode": self.mode},
            )
            return self._state

        return await self._execute(
            Operation.LOAD_INITIAL, self._strategy.fetch_first, self._replace
        )

    async def load_more(self) -> ScrollState:
        """
        Fetches the next batch and appends it.

        Silently does nothing when there is nothing more to load, another
        operation is in flight, no first batch exists yet, or (cursor mode) the
        last batch came without a cursor. A failure keeps every loaded item.
        """
        if self._skip(Operation.LOAD_MORE):
            return self._state

        state = self._state
        if not state.can_load_more or not state.has_loaded:
            logger.debug(
                "Operation skipped: nothing to load",
                extra={
                    "operation": Operation.LOAD_MORE.value,
                    "mode": self.mode,
                    "has_more": state.has_more,
                },
            )
            return state

        if not self._strategy.can_continue(state):
            logger.debug(
                "Operation skipped: no cursor available",
                extra={"operation": Operation.LOAD_MORE.value, "mode": self.mode},
            )
            return state

        return await self._execute(
            Operation.LOAD_MORE, lambda: self._strategy.fetch_next(self._state), self._append
        )

    async def refresh(self) -> ScrollState:
        """
        Refetches the first batch and replaces the state with it.

        Flags is_refreshing instead of is_loading so the renderer can keep the
        current list on screen. A failure keeps the old items visible.
        """
        if self._skip(Operation.REFRESH):
            return self._state

        return await self._execute(Operation.REFRESH, self._strategy.fetch_first, self._replace)

    def reset(self) -> ScrollState:
        """
        Discards all loaded data and flags, returning to the initial state.

        Always permitted. A fetch still in flight completes, but its result is
        discarded.
        """
        self._guard.invalidate()
        self._last_failed = None
        self._commit(self._initial_state())

        logger.debug("State reset", extra={"mode": self.mode})
        return self._state

    # --- LIFECYCLE ---

    async def start(self) -> ScrollState:
        """Mount hook: performs the initial load when auto_load is enabled."""
        if self._config.auto_load:
            return await self.load_initial()
        return self._state

    async def retry(self) -> ScrollState:
        """Re-invokes the operation that failed last. Does nothing if none failed."""
        operation = self._last_failed
        if operation is None:
            return self._state

        if operation is Operation.LOAD_MORE:
            return await self.load_more()
        if operation is Operation.REFRESH:
            return await self.refresh()
        return await self.load_initial()

    async def on_end_reached(self) -> ScrollState:
        """Renderer callback for 'scrolled within the threshold of the end'."""
        if self._config.auto_load and self.can_load_more:
            return await self.load_more()
        return self._state

    def dispose(self) -> None:
        """
        Detaches the machine from its observers.

        Later operations are no-ops, and results of fetches still in flight are
        dropped without touching the state.
        """
        self._disposed = True
        self._listeners.clear()
        logger.debug("State machine disposed", extra={"mode": self.mode})

    async def __aenter__(self) -> "PaginationStateMachine":
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.dispose()

    # --- INTERNALS ---

    def _initial_state(self) -> ScrollState:
        return ScrollState.initial(
            current_page=self._config.initial_page_index,
            total_items=self._config.total_items,
            is_loading=self._config.auto_load,
        )

    def _skip(self, operation: Operation) -> bool:
        """Entry check shared by the guarded operations. No side effects."""
        if self._disposed:
            logger.debug(
                "Operation skipped: state machine disposed",
                extra={"operation": operation.value, "mode": self.mode},
            )
            return True
        if self._guard.busy:
            logger.debug(
                "Operation skipped: another operation is in flight",
                extra={"operation": operation.value, "mode": self.mode},
            )
            return True
        return False

    def _is_stale(self, token: int) -> bool:
        return self._disposed or not self._guard.is_current(token)

    async def _execute(
        self,
        operation: Operation,
        fetch: Callable[[], Awaitable[FetchOutcome]],
        merge: Callable[[ScrollState, FetchOutcome], ScrollState],
    ) -> ScrollState:
        token = self._guard.try_acquire()
        if token is None:
            return self._state

        try:
            self._commit(self._state.evolve(error=None, **_flags(operation)))

            try:
                outcome = await fetch()
            except FetchFailure as e:
                if self._is_stale(token):
                    return self._state
                self._fail(operation, e)
                return self._state
            except asyncio.CancelledError:
                if not self._is_stale(token):
                    self._commit(self._state.evolve(**_flags(None)))
                raise

            if self._is_stale(token):
                logger.debug(
                    "Discarding result of a superseded fetch",
                    extra={"operation": operation.value, "mode": self.mode},
                )
                return self._state

            self._last_failed = None
            self._commit(merge(self._state, outcome))

            logger.info(
                "Batch loaded",
                extra={
                    "operation": operation.value,
                    "mode": self.mode,
                    "page": outcome.page,
                    "batch_size": len(outcome.batch),
                    "loaded_count": self._state.loaded_count,
                    "has_more": outcome.has_more,
                    "cursor_hash": redact_cursor(outcome.cursor),
                },
            )
            return self._state
        finally:
            self._guard.release(token)

    def _fail(self, operation: Operation, error: FetchFailure) -> None:
        message = error.message or DEFAULT_ERROR_MESSAGES[operation]
        logger.warning(
            "Fetch failed",
            extra={"operation": operation.value, "mode": self.mode, "error": message},
        )
        self._last_failed = operation
        # Accumulated items are kept on every failure path.
        self._commit(self._state.evolve(error=message, **_flags(None)))

    def _replace(self, state: ScrollState, outcome: FetchOutcome) -> ScrollState:
        return state.with_pages(
            (outcome.batch,),
            current_page=outcome.page,
            cursor=outcome.cursor,
            has_more=outcome.has_more,
            error=None,
            total_items=self._config.total_items,
            **_flags(None),
        )

    def _append(self, state: ScrollState, outcome: FetchOutcome) -> ScrollState:
        return state.with_pages(
            (*state.pages, outcome.batch),
            current_page=outcome.page,
            cursor=outcome.cursor,
            has_more=outcome.has_more,
            error=None,
            **_flags(None),
        )

    def _commit(self, state: ScrollState) -> None:
        if self._disposed:
            return

        state.check_invariants()
        self._state = state

        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Scroll state listener failed", extra={"mode": self.mode})
