# file_manager/utils.py
from __future__ import annotations
from datetime import datetime, timedelta, timezone
from typing import Optional, Union
from zoneinfo import ZoneInfo

SIZE_UNITS = ("B", "KB", "MB", "GB", "TB", "PB")

_DURATIONS = (
    ("year", 365 * 86400),
    ("month", 30 * 86400),
    ("week", 7 * 86400),
    ("day", 86400),
    ("hour", 3600),
    ("minute", 60),
)

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def _trim_number(value: float) -> str:
    text = f"{round(value, 2):.2f}".rstrip("0").rstrip(".")
    return text or "0"


def format_size(num_bytes: Union[int, float]) -> str:
    """1536 -> "1.5 KB". Binary scaling, capped at PB."""
    value = float(num_bytes)
    i = 0
    while value >= 1024 and i < len(SIZE_UNITS) - 1:
        value /= 1024
        i += 1
    return f"{_trim_number(value)} {SIZE_UNITS[i]}"


def diff_for_humans(moment: datetime, now: Optional[datetime] = None) -> str:
    """Relative wording such as "3 hours ago" or "2 days from now"."""
    now = now or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    seconds = (now - moment).total_seconds()
    suffix = "ago" if seconds >= 0 else "from now"
    seconds = abs(seconds)

    unit, count = "second", max(int(seconds), 1)
    for name, span in _DURATIONS:
        if seconds >= span:
            unit, count = name, int(seconds // span)
            break

    plural = "" if count == 1 else "s"
    return f"{count} {unit}{plural} {suffix}"


def to_datetime_string(moment: datetime, tz: str = "UTC") -> str:
    return moment.astimezone(ZoneInfo(tz)).strftime(DATETIME_FORMAT)


def from_timestamp(ts: Union[int, float]) -> datetime:
    return datetime.fromtimestamp(ts, tz=timezone.utc)


def add_duration(moment: datetime, unit: str, value: Union[int, float]) -> datetime:
    """moment + value * unit, unit being one of seconds/minutes/hours/days/weeks."""
    return moment + timedelta(**{unit: value})


def classify_mime(mime: str) -> str:
    primary = mime.split("/", 1)[0]
    if primary in ("image", "video", "audio", "text"):
        return primary
    if primary == "application":
        return mime.rsplit("/", 1)[-1]
    return "unknown"
