"""Resolve Grafana relative time expressions into absolute UTC instants.

Supported forms (``N`` defaults to 1):

- ``1706193792``: Unix timestamp in seconds
- ``now``
- ``now-<N><unit>``: shift back, unit one of ``s m h d w M y``
- ``now/<unit>``: start (``from``) or end (``to``) of the current period
- ``now-<N><unit>/<snap>``: shift back, then snap to the period boundary

Seconds, minutes and hours are fixed durations. Days, weeks, months and years
follow the calendar; month and year shifts clamp the day to the length of the
target month. Weeks start on Sunday.
"""

from __future__ import annotations

import calendar
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from grafana_reporter.core.errors import TimeParseError

ROLE_FROM = "from"
ROLE_TO = "to"

DISPLAY_FORMAT = "%Y-%m-%d %H:%M:%S +0000 UTC"

_SECONDS_PER_UNIT = {"s": 1, "m": 60, "h": 3600}
_SHIFT_UNITS = "smhdwMy"
_SNAP_UNITS = "mhdwMy"

_TIMESTAMP = re.compile(r"^[+-]?\d+$")
_RELATIVE = re.compile(
    rf"^now-(?P<count>\d*)(?P<unit>[{_SHIFT_UNITS}])(?:/(?P<snap>[{_SNAP_UNITS}]))?$"
)
_BOUNDARY = re.compile(rf"^now/(?P<unit>[{_SNAP_UNITS}])$")


@dataclass(frozen=True)
class TimeRange:
    """Raw time range expressions and the instants they resolve to."""

    time_from: str
    time_to: str
    resolved_from: datetime
    resolved_to: datetime

    @property
    def display_from(self) -> str:
        return self.resolved_from.strftime(DISPLAY_FORMAT)

    @property
    def display_to(self) -> str:
        return self.resolved_to.strftime(DISPLAY_FORMAT)


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def _shift_months(moment: datetime, months: int) -> datetime:
    index = moment.year * 12 + (moment.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def _shift_back(moment: datetime, count: int, unit: str) -> datetime:
    if unit in _SECONDS_PER_UNIT:
        return moment - timedelta(seconds=count * _SECONDS_PER_UNIT[unit])
    if unit == "d":
        return moment - timedelta(days=count)
    if unit == "w":
        return moment - timedelta(days=7 * count)
    if unit == "M":
        return _shift_months(moment, -count)
    return _shift_months(moment, -12 * count)


def _period_start(moment: datetime, unit: str) -> datetime:
    if unit == "m":
        return moment.replace(second=0, microsecond=0)
    if unit == "h":
        return moment.replace(minute=0, second=0, microsecond=0)
    midnight = moment.replace(hour=0, minute=0, second=0, microsecond=0)
    if unit == "d":
        return midnight
    if unit == "w":
        # Sunday is day 0 of the week
        return midnight - timedelta(days=(moment.weekday() + 1) % 7)
    if unit == "M":
        return midnight.replace(day=1)
    return midnight.replace(month=1, day=1)


def _period_end(moment: datetime, unit: str) -> datetime:
    if unit == "m":
        return moment.replace(second=59, microsecond=999999)
    if unit == "h":
        return moment.replace(minute=59, second=59, microsecond=999999)
    last_instant = moment.replace(hour=23, minute=59, second=59, microsecond=999999)
    if unit == "d":
        return last_instant
    if unit == "w":
        return last_instant + timedelta(days=6 - (moment.weekday() + 1) % 7)
    if unit == "M":
        return last_instant.replace(day=calendar.monthrange(moment.year, moment.month)[1])
    return last_instant.replace(month=12, day=31)


def _snap(moment: datetime, unit: str, role: str) -> datetime:
    if role.lower() == ROLE_FROM:
        return _period_start(moment, unit)
    return _period_end(moment, unit)


def _snap_or_fail(moment: datetime, unit: str, role: str, expression: str) -> datetime:
    # Period boundaries can fall outside the representable date range.
    try:
        return _snap(moment, unit, role)
    except (OverflowError, ValueError) as exc:
        raise TimeParseError(expression) from exc


def resolve_time(now: datetime, expression: str, role: str) -> datetime:
    """Resolve ``expression`` relative to ``now``.

    ``role`` is ``"from"`` or ``"to"`` and only decides which boundary a
    snapped period resolves to.

    Raises:
        TimeParseError: the expression does not follow the grammar.
    """
    if _TIMESTAMP.match(expression):
        try:
            return datetime.fromtimestamp(int(expression), tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as exc:
            raise TimeParseError(expression) from exc

    current = _as_utc(now)
    if expression == "now":
        return current

    match = _BOUNDARY.match(expression)
    if match:
        return _snap_or_fail(current, match.group("unit"), role, expression)

    match = _RELATIVE.match(expression)
    if match is None:
        raise TimeParseError(expression)

    count = int(match.group("count") or 1)
    try:
        shifted = _shift_back(current, count, match.group("unit"))
    except (OverflowError, ValueError) as exc:
        raise TimeParseError(expression) from exc

    snap_unit = match.group("snap")
    if snap_unit:
        return _snap_or_fail(shifted, snap_unit, role, expression)
    return shifted


def resolve_time_range(now: datetime, time_from: str, time_to: str) -> TimeRange:
    """Resolve both ends of a range against the same instant."""
    return TimeRange(
        time_from=time_from,
        time_to=time_to,
        resolved_from=resolve_time(now, time_from, ROLE_FROM),
        resolved_to=resolve_time(now, time_to, ROLE_TO),
    )
