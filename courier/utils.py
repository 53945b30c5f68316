from __future__ import annotations

import inspect
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from .errors import InvalidArgument


PLATFORM_EPOCH = 1420070400000
TIMESTAMP_OFFSET = 22


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_time(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def parse_snowflake(value: int | str) -> int:
    """Parse ``value`` as an unsigned 64-bit snowflake.

    Raises :class:`InvalidArgument` for anything that is not a non-negative
    integer fitting in 64 bits.
    """
    try:
        snowflake = int(str(value).strip())
    except (TypeError, ValueError):
        raise InvalidArgument(f"The specified ID is not a valid snowflake ({value!r})") from None
    if snowflake < 0 or snowflake >= 1 << 64:
        raise InvalidArgument(f"The specified ID is not a valid snowflake ({value!r})")
    return snowflake


def snowflake_time(snowflake: int | str) -> Optional[datetime]:
    try:
        value = int(snowflake)
    except (TypeError, ValueError):
        return None
    timestamp = (value >> TIMESTAMP_OFFSET) + PLATFORM_EPOCH
    return datetime.fromtimestamp(timestamp / 1000, tz=timezone.utc)


def time_snowflake(dt: datetime, *, high: bool = False) -> int:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    timestamp = int(dt.timestamp() * 1000)
    snowflake = (timestamp - PLATFORM_EPOCH) << TIMESTAMP_OFFSET
    if high:
        snowflake |= (1 << TIMESTAMP_OFFSET) - 1
    return snowflake


async def maybe_coroutine(func: Callable[..., Any], /, *args: Any, **kwargs: Any) -> Any:
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        return await result
    return result
