"""
Fetch strategies.

A strategy knows how one pagination mode fetches a batch and how it derives
the "has more" signal. Strategies are stateless: everything they need about
progress so far is read from the ScrollState passed in.
"""

import inspect
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pydantic import ValidationError

from ._logging import logger, redact_cursor
from .config import CursorBasedConfig, PageBasedConfig
from .exceptions import (
    ConfigurationError,
    InvalidFetchResultError,
    MissingCursorError,
    handle_fetch_errors,
)
from .pagination import PaginatedResult, has_more_items
from .state import ScrollState

C = TypeVar("C", PageBasedConfig, CursorBasedConfig)


@dataclass(frozen=True)
class FetchOutcome:
    """
    What a strategy hands back to the state machine after a successful fetch.

    Attributes:
        batch: Items returned by the fetch
        page: Page index the batch belongs to (unchanged in cursor mode)
        cursor: Cursor for the following batch (always None in page mode)
        has_more: Whether a further fetch is expected to return data
    """

    batch: tuple[Any, ...]
    page: int
    cursor: str | None
    has_more: bool


async def _invoke(fetch: Callable[..., Any], *args: Any) -> Any:
    """Calls a fetch function, awaiting its result when it is awaitable."""
    with handle_fetch_errors():
        result = fetch(*args)
        if inspect.isawaitable(result):
            result = await result
    return result


class PaginationStrategy(ABC, Generic[C]):
    """Base class for the per-mode fetch logic."""

    mode: str

    def __init__(self, config: C) -> None:
        self.config = config

    @property
    def page_size(self) -> int:
        return self.config.page_size

    @abstractmethod
    async def fetch_first(self) -> FetchOutcome:
        """Fetches the first batch (initial page or no cursor)."""

    @abstractmethod
    async def fetch_next(self, state: ScrollState) -> FetchOutcome:
        """Fetches the batch following what state already holds."""

    def can_continue(self, state: ScrollState) -> bool:
        """Whether fetch_next has what it needs to address the next batch."""
        return True


class PageStrategy(PaginationStrategy[PageBasedConfig]):
    """Batches addressed by an increasing page index."""

    mode = "page"

    async def fetch_first(self) -> FetchOutcome:
        page = self.config.initial_page
        batch = await self._fetch(page)
        return FetchOutcome(
            batch=batch, page=page, cursor=None, has_more=self._has_more(batch, (batch,))
        )

    async def fetch_next(self, state: ScrollState) -> FetchOutcome:
        page = state.current_page + 1
        batch = await self._fetch(page)
        return FetchOutcome(
            batch=batch,
            page=page,
            cursor=None,
            has_more=self._has_more(batch, (*state.pages, batch)),
        )

    async def _fetch(self, page: int) -> tuple[Any, ...]:
        logger.debug(
            "Fetching page",
            extra={"mode": self.mode, "page": page, "page_size": self.page_size},
        )
        result = await _invoke(self.config.fetch_data, page, self.page_size)

        if isinstance(result, (str, bytes)) or not isinstance(result, Sequence):
            raise InvalidFetchResultError(
                f"fetch_data must return a sequence of items, got {type(result).__name__}"
            )
        return tuple(result)

    def _has_more(self, batch: tuple[Any, ...], all_pages: tuple[tuple[Any, ...], ...]) -> bool:
        if self.config.has_more is not None:
            with handle_fetch_errors():
                has_more = bool(self.config.has_more(batch, all_pages))
        else:
            has_more = has_more_items(batch, all_pages, self.page_size)

        # A known collection size caps the optimistic full-batch rule.
        if self.config.total_items is not None:
            loaded = sum(len(page) for page in all_pages)
            has_more = has_more and loaded < self.config.total_items

        return has_more


class CursorStrategy(PaginationStrategy[CursorBasedConfig]):
    """Batches addressed by the opaque cursor returned with the previous batch."""

    mode = "cursor"

    async def fetch_first(self) -> FetchOutcome:
        result = await self._fetch(None)
        return self._outcome(result, page=0)

    async def fetch_next(self, state: ScrollState) -> FetchOutcome:
        if not state.cursor:
            # Rejected before any I/O: the caller has no further batch to address.
            raise MissingCursorError()

        result = await self._fetch(state.cursor)
        return self._outcome(result, page=state.current_page)

    def can_continue(self, state: ScrollState) -> bool:
        return bool(state.cursor)

    async def _fetch(self, cursor: str | None) -> PaginatedResult:
        logger.debug(
            "Fetching cursor batch",
            extra={
                "mode": self.mode,
                "cursor_hash": redact_cursor(cursor),
                "page_size": self.page_size,
            },
        )
        result = await _invoke(self.config.fetch_cursor, cursor, self.page_size)

        if isinstance(result, PaginatedResult):
            return result

        try:
            if isinstance(result, Mapping):
                return PaginatedResult.model_validate(dict(result))
            return PaginatedResult.model_validate(result, from_attributes=True)
        except ValidationError as e:
            raise InvalidFetchResultError(
                f"fetch_cursor returned {type(result).__name__} that is not a paginated result",
                original_error=e,
            ) from e

    @staticmethod
    def _outcome(result: PaginatedResult, page: int) -> FetchOutcome:
        return FetchOutcome(
            batch=tuple(result.items),
            page=page,
            cursor=result.next_cursor,
            has_more=result.has_more,
        )


_STRATEGIES: dict[str, type[PaginationStrategy[Any]]] = {
    PageStrategy.mode: PageStrategy,
    CursorStrategy.mode: CursorStrategy,
}


def resolve_strategy(config: PageBasedConfig | CursorBasedConfig) -> PaginationStrategy[Any]:
    """
    Returns the strategy for a config variant, dispatching on its pagination_mode tag.

    Raises:
        ConfigurationError: If the config carries an unknown mode
    """
    strategy_cls = _STRATEGIES.get(config.pagination_mode)
    if strategy_cls is None:
        raise ConfigurationError(f"Unknown pagination mode '{config.pagination_mode}'")
    return strategy_cls(config)
