"""Bounded concurrent fan-out over a collection of ids.

One coroutine per item, at most ``limit`` in flight. Failures are collected
per item instead of cancelling the rest, so callers decide whether a partial
result is acceptable.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Hashable, Iterable

from errors import UpstreamError

logger = logging.getLogger(__name__)


@dataclass
class FanOutResult:
    results: dict[Hashable, Any] = field(default_factory=dict)
    failures: dict[Hashable, BaseException] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures

    def raise_for_failures(self, label: str) -> None:
        """Raise ``UpstreamError`` naming every failed item, if any failed."""
        if self.ok:
            return
        failed = ", ".join(str(item) for item in self.failures)
        raise UpstreamError(f"{label} failed for {len(self.failures)} item(s): {failed}")


async def gather_bounded(
    items: Iterable[Hashable],
    worker: Callable[[Any], Awaitable[Any]],
    limit: int = 10,
) -> FanOutResult:
    """Run ``worker(item)`` for every item with at most ``limit`` concurrent calls.

    ``results`` preserves input order for the items that succeeded.
    """
    items = list(items)
    semaphore = asyncio.Semaphore(max(1, limit))

    async def _run(item):
        async with semaphore:
            return await worker(item)

    outcomes = await asyncio.gather(*[_run(item) for item in items], return_exceptions=True)

    result = FanOutResult()
    for item, outcome in zip(items, outcomes):
        if isinstance(outcome, BaseException) and not isinstance(outcome, Exception):
            # cancellation, KeyboardInterrupt, SystemExit
            raise outcome
        if isinstance(outcome, Exception):
            logger.warning("Fan-out call failed for %s: %s", item, outcome)
            result.failures[item] = outcome
        else:
            result.results[item] = outcome
    return result
