"""Alpha Vantage intraday data feed — direct HTTP implementation.

Uses the ``TIME_SERIES_INTRADAY`` function of the ``/query`` endpoint via
httpx. A response looks like::

    {
      "Meta Data": {"1. Information": "...", "2. Symbol": "IBM",
                    "3. Last Refreshed": "2024-03-08 19:55:00",
                    "4. Interval": "5min", "5. Output Size": "Compact",
                    "6. Time Zone": "US/Eastern"},
      "Time Series (5min)": {
        "2024-03-08 19:55:00": {"1. open": "191.5000", "2. high": "191.6000",
                                "3. low": "191.4000", "4. close": "191.5500",
                                "5. volume": "1520"},
        ...
      }
    }

Numbers arrive as strings or as JSON numbers depending on the response, and
timestamps are wall-clock readings in the declared zone.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

import httpx
from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
)

from pricefeed.core.config import AlphaVantageConfig, Interval
from pricefeed.core.exceptions import (
    ConfigError,
    DecodeError,
    MalformedNumber,
    TransportFailure,
    UnrecognizedResponseShape,
)
from pricefeed.feeds.coercion import coerce_float, coerce_int
from pricefeed.feeds.models import PricePoint
from pricefeed.feeds.timestamps import (
    Resolution,
    localize,
    parse_local_timestamp,
    resolve_timezone,
)

logger = logging.getLogger(__name__)

_FUNCTION = "TIME_SERIES_INTRADAY"
_META_DATA_KEY = "Meta Data"
# Keys Alpha Vantage uses in place of data when it refuses a request
_PROVIDER_MESSAGE_KEYS = ("Error Message", "Note", "Information")


def series_key(interval: Interval) -> str:
    """Return the envelope key holding samples for ``interval``."""
    return f"Time Series ({interval})"


class AlphaVantageMetadata(BaseModel):
    """The ``Meta Data`` block of an intraday response."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    information: str | None = Field(default=None, validation_alias="1. Information")
    symbol: str | None = Field(default=None, validation_alias="2. Symbol")
    last_refreshed: str | None = Field(default=None, validation_alias="3. Last Refreshed")
    interval: str | None = Field(default=None, validation_alias="4. Interval")
    output_size: str | None = Field(default=None, validation_alias="5. Output Size")
    time_zone: str = Field(validation_alias="6. Time Zone")


class AlphaVantageBar(BaseModel):
    """One OHLCV record of the time-series block, numerically coerced."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    open: float = Field(validation_alias=AliasChoices("1. open", "open"))
    high: float = Field(validation_alias=AliasChoices("2. high", "high"))
    low: float = Field(validation_alias=AliasChoices("3. low", "low"))
    close: float = Field(validation_alias=AliasChoices("4. close", "close"))
    volume: int = Field(validation_alias=AliasChoices("5. volume", "volume"))

    @field_validator("open", "high", "low", "close", mode="before")
    @classmethod
    def coerce_price(cls, v: Any, info: ValidationInfo) -> float:
        try:
            return coerce_float(v)
        except MalformedNumber as e:
            e.context["field"] = info.field_name
            raise

    @field_validator("volume", mode="before")
    @classmethod
    def coerce_volume(cls, v: Any, info: ValidationInfo) -> int:
        try:
            return coerce_int(v)
        except MalformedNumber as e:
            e.context["field"] = info.field_name
            raise


class AlphaVantageResponse(BaseModel):
    """A fully decoded intraday response: metadata plus keyed records."""

    model_config = ConfigDict(frozen=True)

    metadata: AlphaVantageMetadata
    series: dict[str, AlphaVantageBar]


class AlphaVantageParser:
    """Decodes raw intraday JSON into an ``AlphaVantageResponse``.

    Decoding is all or nothing: the first malformed number or missing
    block raises and nothing is returned. Unknown keys are ignored.

    Parameters
    ----------
    interval : Interval
        Which ``Time Series (...)`` block to read. Default: 5min.
    """

    def __init__(self, interval: Interval = Interval.FIVE_MINUTES) -> None:
        self._series_key = series_key(interval)

    def parse(self, raw: Any) -> AlphaVantageResponse:
        """Decode a response document (dict) or raw body (bytes/str).

        Raises
        ------
        UnrecognizedResponseShape
            If the body is not a JSON object, or the metadata block, the
            time-series block or a record field is missing or mis-shaped.
        MalformedNumber
            If any OHLCV value cannot be coerced.
        """
        document = self._load(raw)
        provider_message = _provider_message(document)

        meta = document.get(_META_DATA_KEY)
        if not isinstance(meta, Mapping):
            raise _missing_block(_META_DATA_KEY, provider_message)
        try:
            metadata = AlphaVantageMetadata.model_validate(meta)
        except ValidationError as e:
            raise UnrecognizedResponseShape(
                f"Malformed '{_META_DATA_KEY}' block: {_summarize(e)}",
                context={"field": _META_DATA_KEY, "provider_message": provider_message},
            ) from e

        series = document.get(self._series_key)
        if not isinstance(series, Mapping):
            raise _missing_block(self._series_key, provider_message)

        bars: dict[str, AlphaVantageBar] = {}
        for timestamp, record in series.items():
            if not isinstance(record, Mapping):
                raise UnrecognizedResponseShape(
                    f"Record {timestamp!r} is a {type(record).__name__}, not an object",
                    context={"field": self._series_key, "timestamp": timestamp},
                )
            try:
                bars[timestamp] = AlphaVantageBar.model_validate(record)
            except MalformedNumber as e:
                e.context["timestamp"] = timestamp
                raise
            except ValidationError as e:
                raise UnrecognizedResponseShape(
                    f"Malformed record {timestamp!r}: {_summarize(e)}",
                    context={"field": self._series_key, "timestamp": timestamp},
                ) from e

        return AlphaVantageResponse(metadata=metadata, series=bars)

    @staticmethod
    def _load(raw: Any) -> Mapping[str, Any]:
        if isinstance(raw, (bytes, bytearray, str)):
            try:
                raw = json.loads(raw)
            except ValueError as e:
                raise UnrecognizedResponseShape(
                    f"Response body is not valid JSON: {e}",
                    context={"field": "body"},
                ) from e
        if not isinstance(raw, Mapping):
            raise UnrecognizedResponseShape(
                f"Response must be a JSON object, got {type(raw).__name__}",
                context={"field": "body"},
            )
        return raw


class AlphaVantageDataFeed:
    """Fetches intraday prices from Alpha Vantage.

    Holds only read-only configuration, so concurrent ``update`` calls on
    one instance never share state. Each call makes exactly one request;
    there is no retry.

    Parameters
    ----------
    api_key : str
        Alpha Vantage API key. Passed through unchanged.
    config : AlphaVantageConfig | None
        Endpoint, interval, output size and timeout. Defaults if None.
        Its own ``api_key`` fields are ignored here.
    client : httpx.AsyncClient | None
        Shared client to send requests with. When None, a client is opened
        and closed inside each ``update`` call.
    """

    def __init__(
        self,
        api_key: str,
        config: AlphaVantageConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if not api_key:
            raise ConfigError(
                "Alpha Vantage API key must not be empty",
                context={"field": "api_key"},
            )
        self._api_key = api_key
        self._config = config or AlphaVantageConfig()
        self._client = client
        self._parser = AlphaVantageParser(self._config.interval)

    @property
    def interval(self) -> Interval:
        return self._config.interval

    def query_params(self, symbol: str) -> dict[str, str]:
        """Build the query string for one intraday request."""
        return {
            "function": _FUNCTION,
            "symbol": symbol,
            "interval": str(self._config.interval),
            "outputsize": str(self._config.output_size),
            "apikey": self._api_key,
        }

    async def update(self, symbol: str) -> list[PricePoint]:
        """Fetch and normalize the intraday series for ``symbol``.

        Samples whose local time is ambiguous or non-existent in the
        declared zone are logged and left out. Points are returned in
        ascending timestamp order.
        """
        document = await self._fetch(symbol)
        try:
            response = self._parser.parse(document)
            return self._to_price_points(response, symbol)
        except DecodeError as e:
            e.context.setdefault("symbol", symbol)
            raise

    async def _fetch(self, symbol: str) -> Any:
        """Perform the single GET request and decode its JSON body."""
        params = self.query_params(symbol)
        url = self._redacted_url(params)
        timeout = self._config.request_timeout

        try:
            if self._client is not None:
                resp = await self._client.get(self._config.base_url, params=params, timeout=timeout)
            else:
                async with httpx.AsyncClient(timeout=timeout) as client:
                    resp = await client.get(self._config.base_url, params=params)
        except httpx.HTTPError as e:
            logger.error("Alpha Vantage request error for %s: %s", symbol, e)
            raise TransportFailure(
                f"Request to Alpha Vantage failed for {symbol}: {e}",
                context={"symbol": symbol, "url": url, "status_code": None},
            ) from e

        if resp.status_code != 200:
            logger.error(
                "Alpha Vantage HTTP error for %s: %s %s",
                symbol,
                resp.status_code,
                resp.text[:200],
            )
            raise TransportFailure(
                f"HTTP {resp.status_code} from Alpha Vantage for {symbol}",
                context={"symbol": symbol, "url": url, "status_code": resp.status_code},
            )

        try:
            return resp.json()
        except ValueError as e:
            raise TransportFailure(
                f"Alpha Vantage returned a non-JSON body for {symbol}",
                context={"symbol": symbol, "url": url, "status_code": resp.status_code},
            ) from e

    def _to_price_points(
        self, response: AlphaVantageResponse, symbol: str
    ) -> list[PricePoint]:
        zone = resolve_timezone(response.metadata.time_zone)

        points: list[PricePoint] = []
        for timestamp, bar in response.series.items():
            resolved = localize(parse_local_timestamp(timestamp), zone)
            if isinstance(resolved, Resolution):
                logger.warning(
                    "Skipping %s sample at %s: local time is %s in %s",
                    symbol,
                    timestamp,
                    resolved,
                    response.metadata.time_zone,
                )
                continue
            points.append(
                PricePoint(
                    open=bar.open,
                    high=bar.high,
                    low=bar.low,
                    close=bar.close,
                    volume=bar.volume,
                    timestamp=resolved,
                )
            )

        dropped = len(response.series) - len(points)
        if dropped:
            logger.info(
                "Dropped %d of %d samples for %s", dropped, len(response.series), symbol
            )
        return sorted(points, key=lambda p: p.timestamp)

    def _redacted_url(self, params: dict[str, str]) -> str:
        return str(httpx.URL(self._config.base_url, params={**params, "apikey": "***"}))


def _provider_message(document: Mapping[str, Any]) -> str | None:
    for key in _PROVIDER_MESSAGE_KEYS:
        message = document.get(key)
        if isinstance(message, str):
            return message
    return None


def _missing_block(key: str, provider_message: str | None) -> UnrecognizedResponseShape:
    detail = f" (provider said: {provider_message})" if provider_message else ""
    return UnrecognizedResponseShape(
        f"Response has no '{key}' object{detail}",
        context={"field": key, "provider_message": provider_message},
    )


def _summarize(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
        for err in error.errors()
    )
