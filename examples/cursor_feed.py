"""
Cursor-based infinite scroll example

Simulates a Firestore-style API that returns an opaque continuation token with
every batch, including a transient failure and an explicit retry.
"""

import asyncio
import base64

from infiniscroll import CursorBasedConfig, PaginatedResult, PaginationStateMachine

MESSAGES = [f"message {n}" for n in range(25)]
_failed_once = False


def encode(offset: int) -> str:
    return base64.urlsafe_b64encode(f"offset:{offset}".encode()).decode()


def decode(cursor: str) -> int:
    return int(base64.urlsafe_b64decode(cursor.encode()).decode().split(":")[1])


async def fetch_messages(cursor: str | None, page_size: int) -> PaginatedResult:
    global _failed_once

    start = decode(cursor) if cursor else 0
    if start > 0 and not _failed_once:
        _failed_once = True
        raise ConnectionError("upstream timed out")

    end = start + page_size
    has_more = end < len(MESSAGES)
    return PaginatedResult(
        items=MESSAGES[start:end],
        next_cursor=encode(end) if has_more else None,
        has_more=has_more,
    )


async def main() -> None:
    feed = PaginationStateMachine(CursorBasedConfig(fetch_cursor=fetch_messages, page_size=10))

    await feed.start()
    print(f"loaded {feed.state.loaded_count}, phase={feed.state.phase.value}")

    state = await feed.load_more()
    print(f"load_more failed: {state.error!r}, still showing {state.loaded_count} messages")

    state = await feed.retry()
    while state.can_load_more:
        state = await feed.load_more()

    print(f"done: {state.loaded_count} messages, has_more={state.has_more}")
    feed.dispose()


if __name__ == "__main__":
    asyncio.run(main())
