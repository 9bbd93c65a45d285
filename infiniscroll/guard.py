class ConcurrencyGuard:
    """
    Single "operation in flight" token for one state machine.

    There is no real parallelism under one event loop, only interleaved
    continuations, so a plain flag checked and set without an intervening
    await is enough. Each acquisition gets a token; only the current holder can
    release the guard, and invalidate() makes every outstanding token stale
    (used by reset, so a fetch started before the reset can neither release
    the guard nor publish its result).
    """

    def __init__(self) -> None:
        self._epoch = 0
        self._holder: int | None = None

    @property
    def busy(self) -> bool:
        return self._holder is not None

    def try_acquire(self) -> int | None:
        """Takes the guard. Returns a token, or None when it is already held."""
        if self._holder is not None:
            return None
        self._epoch += 1
        self._holder = self._epoch
        return self._holder

    def release(self, token: int) -> None:
        """Releases the guard if token is still the current holder."""
        if self._holder == token:
            self._holder = None

    def is_current(self, token: int) -> bool:
        return self._holder == token

    def invalidate(self) -> None:
        """Force-releases the guard and orphans any outstanding token."""
        self._epoch += 1
        self._holder = None
