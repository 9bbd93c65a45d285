from .config import (
    DEFAULT_INITIAL_PAGE,
    DEFAULT_PAGE_SIZE,
    DEFAULT_THRESHOLD,
    CursorBasedConfig,
    PageBasedConfig,
    ScrollConfig,
    parse_config,
)
from .exceptions import (
    ConfigurationError,
    FetchFailure,
    InfiniscrollError,
    InvalidFetchResultError,
    MissingCursorError,
    StateInvariantError,
)
from .guard import ConcurrencyGuard
from .machine import Operation, PaginationStateMachine
from .pagination import PaginatedResult, get_page_slice, has_more_items
from .state import ScrollPhase, ScrollState
from .strategy import (
    CursorStrategy,
    FetchOutcome,
    PageStrategy,
    PaginationStrategy,
    resolve_strategy,
)
from .threshold import calculate_end_reached_threshold

__all__ = [
    "PaginationStateMachine",
    "Operation",
    "ScrollState",
    "ScrollPhase",
    # Configuration
    "PageBasedConfig",
    "CursorBasedConfig",
    "ScrollConfig",
    "parse_config",
    "DEFAULT_PAGE_SIZE",
    "DEFAULT_THRESHOLD",
    "DEFAULT_INITIAL_PAGE",
    # Strategies
    "PaginationStrategy",
    "PageStrategy",
    "CursorStrategy",
    "FetchOutcome",
    "resolve_strategy",
    "ConcurrencyGuard",
    # Helpers
    "PaginatedResult",
    "has_more_items",
    "get_page_slice",
    "calculate_end_reached_threshold",
    # Exceptions
    "InfiniscrollError",
    "FetchFailure",
    "InvalidFetchResultError",
    "MissingCursorError",
    "ConfigurationError",
    "StateInvariantError",
]
