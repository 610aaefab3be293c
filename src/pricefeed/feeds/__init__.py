"""Provider-agnostic intraday price ingestion.

Architecture
------------
Each provider gets one adapter class that turns its wire format into the
canonical ``PricePoint`` model:

    REST API → DataFeed.update(symbol) → list[PricePoint] → Consumer

Key abstractions:

- ``PricePoint``: Canonical OHLCV sample with a zone-aware timestamp.
- ``DataFeed``: Consumer-facing async protocol.
- ``coerce_float`` / ``coerce_int``: the string-or-number choke point.
- ``localize``: wall-clock time + zone → instant, or a ``Resolution``
  explaining why the sample is dropped.

Built-in implementations:

- ``AlphaVantageDataFeed``: Fetches ``TIME_SERIES_INTRADAY``.
- ``AlphaVantageParser``: Decodes Alpha Vantage JSON into typed records.
"""

from pricefeed.feeds.alpha_vantage import (
    AlphaVantageBar,
    AlphaVantageDataFeed,
    AlphaVantageMetadata,
    AlphaVantageParser,
    AlphaVantageResponse,
)
from pricefeed.feeds.coercion import coerce_float, coerce_int
from pricefeed.feeds.models import PricePoint
from pricefeed.feeds.provider import DataFeed
from pricefeed.feeds.timestamps import (
    Resolution,
    localize,
    parse_local_timestamp,
    resolve_timezone,
)

__all__ = [
    # Models
    "PricePoint",
    # Protocols
    "DataFeed",
    # Normalization
    "coerce_float",
    "coerce_int",
    "Resolution",
    "localize",
    "parse_local_timestamp",
    "resolve_timezone",
    # Alpha Vantage
    "AlphaVantageBar",
    "AlphaVantageDataFeed",
    "AlphaVantageMetadata",
    "AlphaVantageParser",
    "AlphaVantageResponse",
]
