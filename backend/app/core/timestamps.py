"""Normalization of instants to UTC epoch seconds.

Instants arrive as epoch-second integers (or numeric strings), ISO-8601
strings, or ``datetime`` objects. Anything without an explicit offset is
interpreted in the site timezone configured by ``APP_TIMEZONE``.
"""

import re
from datetime import UTC, date, datetime, timedelta, timezone, tzinfo
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from app.core.config import settings
from app.core.exceptions import ValidationError

SECONDS_PER_DAY = 86400

_OFFSET_RE = re.compile(r"^([+-])(\d{2}):?(\d{2})$")
_NUMERIC_RE = re.compile(r"^-?\d+$")

_datetime_adapter: TypeAdapter[datetime] = TypeAdapter(datetime)


def site_timezone() -> tzinfo:
    """Resolve ``APP_TIMEZONE`` to a tzinfo.

    Accepts ``UTC``, a fixed ``+HH:MM`` offset, or an IANA zone name.
    """
    name = settings.APP_TIMEZONE.strip()
    if not name or name.upper() == "UTC":
        return UTC

    match = _OFFSET_RE.match(name)
    if match:
        sign, hours, minutes = match.groups()
        offset = timedelta(hours=int(hours), minutes=int(minutes))
        return timezone(-offset if sign == "-" else offset)

    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone in APP_TIMEZONE: {name!r}") from e


def to_datetime(value: Any) -> datetime:
    """Convert an instant to an aware UTC datetime.

    Raises:
        ValidationError: If the value cannot be read as an instant.
    """
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"Invalid instant: {value!r}")

    if isinstance(value, int | float):
        return _from_epoch(value)

    if isinstance(value, str) and _NUMERIC_RE.match(value.strip()):
        return _from_epoch(int(value.strip()))

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = _datetime_adapter.validate_python(value.strip())
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid date string: {value!r}") from e
    else:
        raise ValidationError(f"Invalid instant: {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=site_timezone())
    try:
        return parsed.astimezone(UTC)
    except OverflowError as e:
        raise ValidationError(f"Instant out of range: {value!r}") from e


def _from_epoch(value: int | float) -> datetime:
    # Bounded by datetime's year 1..9999 range
    try:
        return datetime.fromtimestamp(int(value), UTC)
    except (OverflowError, OSError, ValueError) as e:
        raise ValidationError(f"Instant out of range: {value!r}") from e


def to_timestamp(value: Any) -> int:
    """Convert an instant to UTC epoch seconds.

    Raises:
        ValidationError: If the value is not an instant or falls outside the
            range a datetime can represent.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        _from_epoch(value)
        return value
    return int(to_datetime(value).timestamp())


def utc_day(timestamp: int) -> date:
    """Calendar day (UTC) of an epoch-second timestamp."""
    return datetime.fromtimestamp(timestamp, UTC).date()
