from collections.abc import Generator
from contextlib import contextmanager


class InfiniscrollError(Exception):
    """Base exception for all Infiniscroll errors."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class FetchFailure(InfiniscrollError):
    """Raised when a caller-supplied fetch function raises or rejects."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        super().__init__(message, original_error)


class InvalidFetchResultError(FetchFailure):
    """Raised when a fetch function returns something that is not a valid batch."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        super().__init__(f"Invalid fetch result: {message}", original_error)


class MissingCursorError(InfiniscrollError):
    """Raised when a cursor-mode continuation is requested without a cursor."""

    def __init__(
        self, message: str = "No cursor available", original_error: Exception | None = None
    ) -> None:
        super().__init__(message, original_error)


class ConfigurationError(InfiniscrollError):
    """Raised when a scroll configuration fails validation."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        super().__init__(message, original_error)


class StateInvariantError(InfiniscrollError):
    """Raised when a state snapshot violates one of the ScrollState invariants."""

    def __init__(self, invariant: str, original_error: Exception | None = None) -> None:
        super().__init__(f"ScrollState invariant violated: {invariant}", original_error)
        self.invariant = invariant


@contextmanager
def handle_fetch_errors() -> Generator[None, None, None]:
    """
    Context manager that catches anything raised by a caller-supplied fetch
    function and raises it as a FetchFailure carrying the original message.

    Library errors pass through untouched. BaseException subclasses such as
    asyncio.CancelledError are not caught.

    Usage:
        with handle_fetch_errors():
            batch = await config.fetch_data(page, page_size)
    """
    try:
        yield
    except InfiniscrollError:
        raise
    except Exception as e:
        raise FetchFailure(message=str(e), original_error=e) from e
