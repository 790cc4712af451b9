"""
Timestamp Normalization
Pass records may carry provider timestamp wrappers or native datetimes.
Every value is decoded into a timezone-aware UTC datetime, or None when it
is neither form.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional, Tuple

from bson import Timestamp

logger = logging.getLogger(__name__)

# Keys of the exported provider timestamp mapping, plain and underscored
_SECONDS_KEYS = ("seconds", "_seconds")
_NANOS_KEYS = ("nanoseconds", "_nanoseconds")


def utcnow() -> datetime:
    """Current time as an aware UTC datetime"""
    return datetime.now(timezone.utc)


def _first_present(value: Mapping, keys: Tuple[str, ...]) -> Any:
    for key in keys:
        if key in value:
            return value[key]
    return None


def decode_provider_timestamp(value: Any) -> Optional[datetime]:
    """Decode a BSON Timestamp or a {seconds, nanoseconds} mapping"""
    if isinstance(value, Timestamp):
        return value.as_datetime().astimezone(timezone.utc)

    if isinstance(value, Mapping):
        seconds = _first_present(value, _SECONDS_KEYS)
        nanos = _first_present(value, _NANOS_KEYS) or 0
        if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
            return None
        if isinstance(nanos, bool) or not isinstance(nanos, (int, float)):
            return None
        try:
            return datetime.fromtimestamp(seconds + nanos / 1e9, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    return None


def decode_native_datetime(value: Any) -> Optional[datetime]:
    """Accept datetime values; naive ones are read as UTC (MongoDB's convention)"""
    if not isinstance(value, datetime):
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


_DECODERS: Tuple[Callable[[Any], Optional[datetime]], ...] = (
    decode_provider_timestamp,
    decode_native_datetime,
)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Normalize a stored timestamp.

    Decoders are tried in order: provider wrapper, then native datetime.
    Missing values and values matching neither form come back as None.
    """
    if value is None:
        return None

    for decode in _DECODERS:
        parsed = decode(value)
        if parsed is not None:
            return parsed

    logger.debug("Ignoring unrecognized timestamp value of type %s", type(value).__name__)
    return None
