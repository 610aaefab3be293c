"""Data feed protocol — the provider-agnostic interface layer.

Architecture
------------
Every market-data provider is wrapped in an adapter that translates its
own wire format into the canonical ``PricePoint`` model:

    Provider REST API → <Provider>DataFeed → list[PricePoint] → Consumer

Code that needs prices depends only on ``DataFeed``. Adding a provider
means writing one class with an ``update`` coroutine; neither this
protocol nor its callers change.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pricefeed.feeds.models import PricePoint


@runtime_checkable
class DataFeed(Protocol):
    """Consumer-facing interface for fetching intraday prices.

    Implementations hold only read-only configuration (credentials, base
    URL), so one instance can serve concurrent ``update`` calls.
    """

    async def update(self, symbol: str) -> list[PricePoint]:
        """Fetch the latest intraday samples for ``symbol``.

        Returns
        -------
        list[PricePoint]
            One point per sample whose local time resolved to a single
            instant. Callers must not rely on the order.

        Raises
        ------
        PriceFeedError
            A response-fatal failure (transport, shape, number, timestamp
            layout or time zone). No partial results are returned.
        """
        ...
