"""Aggregate request timings in the background and print each flush.

Run with: python examples/background_flush.py
"""

import asyncio
import logging
import random

from aggregatemetrics import (
    AggregateMetricQueue,
    AsyncTimedDrainHandler,
    counter,
    encode_ndjson,
    gauge,
)

logger = logging.getLogger(__name__)


def ship(drained, coalesced) -> None:
    """Stand-in transport: print the statistic sets a backend would receive."""
    logger.info("flushing %d aggregates", len(drained))
    print(encode_ndjson(entry.compacted() for entry in coalesced), end="")


async def simulate_requests(queue: AggregateMetricQueue) -> None:
    """Record a burst of request samples every 50ms."""
    while True:
        dimensions = {"route": random.choice(["/orders", "/users"])}
        latency = random.choice([10.0, 20.0, 40.0])
        queue.add(
            counter("requests", dimensions=dimensions),
            gauge("latency", latency, dimensions, unit="Milliseconds"),
        )
        await asyncio.sleep(0.05)


async def main() -> None:
    logging.basicConfig(level=logging.INFO)
    queue = AggregateMetricQueue()
    async with AsyncTimedDrainHandler(queue, ship, interval_ms=1000):
        producer = asyncio.create_task(simulate_requests(queue))
        await asyncio.sleep(3.5)
        producer.cancel()


if __name__ == "__main__":
    asyncio.run(main())
