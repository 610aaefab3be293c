"""Resolution of provider-local, zone-naive timestamps to absolute instants.

Providers stamp each sample with a local wall-clock reading and declare the
zone once per response. A wall-clock reading maps to one instant, none
(spring-forward gap) or two (fall-back overlap). Only the first is usable;
the other two are reported as a ``Resolution`` so the caller can drop the
record without failing the whole batch.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from enum import StrEnum
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pricefeed.core.exceptions import MalformedTimestamp, UnknownTimezone

LOCAL_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
_LOCAL_TIMESTAMP_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2} [0-9]{2}:[0-9]{2}:[0-9]{2}")


class Resolution(StrEnum):
    """Why a local time could not be mapped to a single instant."""

    NONEXISTENT = "nonexistent"
    AMBIGUOUS = "ambiguous"


def parse_local_timestamp(value: str) -> datetime:
    """Parse a zero-padded ``YYYY-MM-DD HH:MM:SS`` string into a naive datetime.

    Raises
    ------
    MalformedTimestamp
        If the layout does not match or the fields are out of range.
    """
    if not _LOCAL_TIMESTAMP_RE.fullmatch(value):
        raise MalformedTimestamp(
            f"Timestamp {value!r} does not match YYYY-MM-DD HH:MM:SS",
            context={"timestamp": value},
        )
    try:
        return datetime.strptime(value, LOCAL_TIMESTAMP_FORMAT)
    except ValueError as e:
        raise MalformedTimestamp(
            f"Timestamp {value!r} is not a valid date/time: {e}",
            context={"timestamp": value},
        ) from e


def resolve_timezone(name: str) -> ZoneInfo:
    """Look up an IANA zone identifier such as ``US/Eastern``.

    Raises
    ------
    UnknownTimezone
        If the identifier is not in the tz database.
    """
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as e:
        raise UnknownTimezone(
            f"Unknown time zone: {name!r}",
            context={"time_zone": name},
        ) from e


def localize(naive: datetime, zone: ZoneInfo) -> datetime | Resolution:
    """Attach ``zone`` to a naive local time.

    Returns the zone-aware datetime when exactly one instant matches,
    ``Resolution.NONEXISTENT`` inside a gap and ``Resolution.AMBIGUOUS``
    inside an overlap.
    """
    instants = set()
    for fold in (0, 1):
        instant = naive.replace(tzinfo=zone, fold=fold).astimezone(timezone.utc)
        # a candidate only counts if it reads back as the same wall-clock time
        if instant.astimezone(zone).replace(tzinfo=None) == naive:
            instants.add(instant)

    if not instants:
        return Resolution.NONEXISTENT
    if len(instants) > 1:
        return Resolution.AMBIGUOUS
    return instants.pop().astimezone(zone)
