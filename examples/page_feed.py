"""
Page-based infinite scroll example

Simulates a REST endpoint returning 0-indexed pages of articles and a list
view that keeps scrolling until the feed runs out.
"""

import asyncio
import logging

from infiniscroll import PageBasedConfig, PaginationStateMachine, ScrollState

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

ARTICLES = [{"id": f"article-{n}", "title": f"Article #{n}"} for n in range(53)]


async def fetch_articles(page: int, page_size: int) -> list[dict]:
    # Stand-in for: await client.get("/articles", params={"page": page, "limit": page_size})
    await asyncio.sleep(0.05)
    start = page * page_size
    return ARTICLES[start : start + page_size]


def render(state: ScrollState) -> None:
    if state.is_loading:
        print("[spinner]")
    elif state.error:
        print(f"[error] {state.error}")
    elif state.is_loading_more:
        print(f"{state.loaded_count} articles shown, loading more...")
    else:
        print(f"{state.loaded_count} articles shown (has_more={state.has_more})")


async def main() -> None:
    config = PageBasedConfig(
        fetch_data=fetch_articles,
        page_size=10,
        get_item_key=lambda article, index: article["id"],
    )

    async with PaginationStateMachine(config) as feed:
        feed.subscribe(render)
        print(f"onEndReachedThreshold = {feed.end_reached_threshold}")

        # The user keeps scrolling to the bottom of the list
        while feed.can_load_more:
            await feed.on_end_reached()

        # Pull to refresh
        await feed.refresh()
        print([feed.get_item_key(a, i) for i, a in enumerate(feed.items[:3])])


if __name__ == "__main__":
    asyncio.run(main())
