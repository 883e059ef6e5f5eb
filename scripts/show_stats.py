#!/usr/bin/env python3
"""Print engagement stats from the configured store.

Builds the production container, so it doubles as a smoke test of the
wiring and the store connection.
"""

import asyncio
import sys

import logfire

from yayonay.util.di.container import create_container, create_engine_from_container


async def run() -> int:
    container = create_container()
    try:
        engine = await create_engine_from_container(container)

        print("Hot items:")
        for hot in await engine.hot_items(limit=10):
            print(f"  {hot.name:<30} yay={hot.yay_count:<6} nay={hot.nay_count}")

        print("Top categories:")
        for category in await engine.top_categories():
            print(f"  {category.category_id:<30} {category.total_votes}")

        print("Today's top:")
        for entry in await engine.todays_top():
            print(f"  {entry.item_key:<30} {entry.votes}")

        await engine.close()
        return 0
    except Exception as e:
        logfire.error(
            "Stats run failed",
            error=str(e),
            error_type=type(e).__name__,
            _exc_info=sys.exc_info(),
        )
        raise
    finally:
        await container.close()


def main() -> int:
    return asyncio.run(run())


if __name__ == "__main__":
    sys.exit(main())
