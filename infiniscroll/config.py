from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from .exceptions import ConfigurationError
from .pagination import PaginatedResult

DEFAULT_PAGE_SIZE = 20
DEFAULT_THRESHOLD = 5
DEFAULT_INITIAL_PAGE = 0

# Fetch contract. Coroutine functions and plain callables are both accepted.
FetchPage = Callable[[int, int], Awaitable[Sequence[Any]] | Sequence[Any]]
FetchCursor = Callable[
    [str | None, int],
    Awaitable[PaginatedResult | Mapping[str, Any]] | PaginatedResult | Mapping[str, Any],
]
HasMoreFn = Callable[[Sequence[Any], Sequence[Sequence[Any]]], bool]
ItemKeyFn = Callable[[Any, int], str]


class BaseScrollConfig(BaseModel):
    """
    Fields shared by both pagination modes.

    Architectural Note:
    -------------------
    Configs are frozen: a state machine keeps the instance it was built with for
    its whole lifetime. Fields accept snake_case names and their camelCase
    aliases (pageSize, autoLoad, ...) so configs can be built from JSON-ish dicts.
    """

    model_config = ConfigDict(
        frozen=True, extra="forbid", alias_generator=to_camel, populate_by_name=True
    )

    page_size: int = Field(default=DEFAULT_PAGE_SIZE, gt=0)
    threshold: int = Field(default=DEFAULT_THRESHOLD, ge=0)
    auto_load: bool = True
    total_items: int | None = Field(default=None, ge=0)
    get_item_key: ItemKeyFn | None = None

    @property
    def initial_page_index(self) -> int:
        """Page index the state machine starts from (and returns to on reset)."""
        return DEFAULT_INITIAL_PAGE

    def item_key(self, item: Any, index: int) -> str:
        """Stable identity for an item, as used by list renderers."""
        if self.get_item_key is not None:
            return self.get_item_key(item, index)
        return f"item-{index}"


class PageBasedConfig(BaseScrollConfig):
    """
    Offset/page-addressed pagination.

    fetch_data(page, page_size) returns the batch for a 0-indexed page.
    has_more(last_batch, all_pages) optionally overrides the default
    "batch is at full capacity" rule.
    """

    pagination_mode: Literal["page"] = "page"
    fetch_data: FetchPage
    has_more: HasMoreFn | None = None
    initial_page: int = Field(default=DEFAULT_INITIAL_PAGE, ge=0)

    @property
    def initial_page_index(self) -> int:
        return self.initial_page


class CursorBasedConfig(BaseScrollConfig):
    """
    Opaque-cursor pagination.

    fetch_cursor(cursor, page_size) is called with None for the first batch and
    with the previous batch's next_cursor afterwards.
    """

    pagination_mode: Literal["cursor"] = "cursor"
    fetch_cursor: FetchCursor


def _config_mode(value: Any) -> str:
    """Discriminator for the config union. Untagged input is page-based."""
    if isinstance(value, Mapping):
        return str(value.get("pagination_mode", value.get("paginationMode", "page")))
    return str(getattr(value, "pagination_mode", "page"))


ScrollConfig = Annotated[
    Union[
        Annotated[PageBasedConfig, Tag("page")],
        Annotated[CursorBasedConfig, Tag("cursor")],
    ],
    Discriminator(_config_mode),
]

_config_adapter: TypeAdapter[PageBasedConfig | CursorBasedConfig] = TypeAdapter(ScrollConfig)


def parse_config(
    data: PageBasedConfig | CursorBasedConfig | Mapping[str, Any],
) -> PageBasedConfig | CursorBasedConfig:
    """
    Validates configuration input into one of the two config variants.

    Args:
        data: A config model (returned unchanged) or a mapping. Mappings without a
              pagination_mode are treated as page-based.

    Raises:
        ConfigurationError: If the input does not describe a valid configuration
    """
    if isinstance(data, (PageBasedConfig, CursorBasedConfig)):
        return data

    try:
        return _config_adapter.validate_python(data)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid scroll configuration ({e.error_count()} error(s)): {e}", original_error=e
        ) from e
