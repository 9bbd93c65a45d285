"""
End-to-end scroll scenarios.

Drives a PaginationStateMachine the way a list renderer would: mount, scroll
to the end repeatedly, pull to refresh, and recover from failures.
"""

import pytest
from helpers.fake_backend import FakeCollection

from infiniscroll import (
    CursorBasedConfig,
    PageBasedConfig,
    PaginatedResult,
    PaginationStateMachine,
    ScrollPhase,
)


@pytest.mark.integration
class TestPageBasedScenarios:
    """Page-based pagination end to end."""

    @pytest.mark.asyncio
    async def test_two_full_pages_then_empty(self):
        """pageSize=2, batches [a,b], [c,d], [] -> four items, then no more."""
        collection = FakeCollection(["a", "b", "c", "d"])
        machine = PaginationStateMachine(
            PageBasedConfig(fetch_data=collection.fetch_page, page_size=2)
        )

        await machine.load_initial()
        await machine.load_more()
        assert machine.items == ("a", "b", "c", "d")
        assert machine.state.has_more is True

        state = await machine.load_more()

        assert state.items == ("a", "b", "c", "d")
        assert state.pages == (("a", "b"), ("c", "d"), ())
        assert state.has_more is False
        assert collection.page_calls == [(0, 2), (1, 2), (2, 2)]

    @pytest.mark.asyncio
    async def test_initial_load_failure(self):
        collection = FakeCollection(["a", "b"])
        collection.fail_on(0, ConnectionError("network down"))
        machine = PaginationStateMachine(PageBasedConfig(fetch_data=collection.fetch_page))

        state = await machine.start()

        assert state.error == "network down"
        assert state.is_loading is False
        assert state.items == ()

        state = await machine.retry()
        assert state.items == ("a", "b")
        assert state.phase is ScrollPhase.READY

    @pytest.mark.asyncio
    async def test_load_more_failure_after_two_pages(self):
        collection = FakeCollection(list(range(10)))
        collection.fail_on(2, ConnectionError("network down"))
        machine = PaginationStateMachine(
            PageBasedConfig(fetch_data=collection.fetch_page, page_size=3)
        )

        await machine.start()
        await machine.on_end_reached()
        state = await machine.on_end_reached()

        assert state.items == (0, 1, 2, 3, 4, 5)
        assert state.error == "network down"
        assert state.is_loading_more is False
        assert state.phase is ScrollPhase.FAILED

    @pytest.mark.asyncio
    async def test_scroll_to_the_end(self, collection, page_config):
        machine = PaginationStateMachine(page_config)
        await machine.start()

        while machine.can_load_more:
            await machine.on_end_reached()

        assert list(machine.items) == collection.items
        assert len(collection.page_calls) == 3
        keys = [machine.get_item_key(item, i) for i, item in enumerate(machine.items)]
        assert len(set(keys)) == len(keys)

    @pytest.mark.asyncio
    async def test_pull_to_refresh_picks_up_new_data(self, collection, page_config):
        machine = PaginationStateMachine(page_config)
        await machine.start()
        await machine.load_more()

        collection.items.insert(0, "fresh")
        state = await machine.refresh()

        assert state.items[0] == "fresh"
        assert state.loaded_count == 20
        assert state.has_more is True


@pytest.mark.integration
class TestCursorBasedScenarios:
    """Cursor-based pagination end to end."""

    @pytest.mark.asyncio
    async def test_two_cursor_batches(self):
        calls = []

        async def fetch_cursor(cursor, page_size):
            calls.append((cursor, page_size))
            if cursor is None:
                return {"items": ["x"], "nextCursor": "tok1", "hasMore": True}
            return PaginatedResult(items=["y"], next_cursor=None, has_more=False)

        machine = PaginationStateMachine(CursorBasedConfig(fetch_cursor=fetch_cursor))

        await machine.load_initial()
        await machine.load_more()
        state = await machine.load_more()

        assert calls == [(None, 20), ("tok1", 20)]
        assert state.items == ("x", "y")
        assert state.has_more is False
        assert state.cursor is None

    @pytest.mark.asyncio
    async def test_from_plain_mapping(self, collection):
        machine = PaginationStateMachine(
            {
                "paginationMode": "cursor",
                "fetchCursor": collection.fetch_cursor,
                "pageSize": 15,
                "getItemKey": lambda item, index: item,
            }
        )

        async with machine:
            while machine.can_load_more:
                await machine.on_end_reached()

        assert list(machine.items) == collection.items
        assert collection.cursor_calls == [(None, 15), ("tok15", 15), ("tok30", 15)]
        assert machine.get_item_key("item-3", 3) == "item-3"
