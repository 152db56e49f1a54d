# -*- coding: utf-8 -*-

from __future__ import annotations

import calendar
import datetime as dt
from functools import total_ordering
from typing import List, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError, available_timezones

_UNITS = {
    "year": "years",
    "years": "years",
    "y": "years",
    "month": "months",
    "months": "months",
    "week": "weeks",
    "weeks": "weeks",
    "w": "weeks",
    "day": "days",
    "days": "days",
    "d": "days",
    "hour": "hours",
    "hours": "hours",
    "h": "hours",
    "minute": "minutes",
    "minutes": "minutes",
    "m": "minutes",
    "second": "seconds",
    "seconds": "seconds",
    "s": "seconds",
}

_SECONDS_PER = {"weeks": 604800, "days": 86400, "hours": 3600, "minutes": 60, "seconds": 1}


def _unit(name: str) -> str:
    try:
        return _UNITS[str(name).strip().lower()]
    except KeyError:
        raise ValueError(f"Unknown unit: {name!r}") from None


def _zone(name: Optional[str]) -> dt.tzinfo:
    if name is None:
        return dt.datetime.now().astimezone().tzinfo
    if str(name).upper() == "UTC":
        return dt.timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"Unknown time zone: {name!r}") from None


def _add_months(value: dt.datetime, months: int) -> dt.datetime:
    # clamp the day to the last day of the target month
    total = value.year * 12 + (value.month - 1) + months
    y, m = divmod(total, 12)
    m += 1
    last_day = calendar.monthrange(y, m)[1]
    return value.replace(year=y, month=m, day=min(value.day, last_day))


@total_ordering
class Moment:
    """An aware point in time with a chainable, copy-on-write API."""

    def __init__(self, value: dt.datetime):
        if value.tzinfo is None:
            value = value.astimezone()
        self._value = value

    # ---- conversions ----
    def datetime(self) -> dt.datetime:
        return self._value

    def iso(self) -> str:
        return self._value.isoformat()

    def unix(self) -> int:
        return int(self._value.timestamp())

    def format(self, pattern: str = "%Y-%m-%d %H:%M:%S %Z") -> str:
        return self._value.strftime(pattern)

    def zone(self) -> str:
        return self._value.tzname() or ""

    # ---- fields ----
    @property
    def year(self) -> int:
        return self._value.year

    @property
    def month(self) -> int:
        return self._value.month

    @property
    def day(self) -> int:
        return self._value.day

    @property
    def hour(self) -> int:
        return self._value.hour

    @property
    def minute(self) -> int:
        return self._value.minute

    @property
    def second(self) -> int:
        return self._value.second

    @property
    def weekday(self) -> str:
        return calendar.day_name[self._value.weekday()]

    # ---- manipulation ----
    def clone(self) -> "Moment":
        return Moment(self._value)

    def tz(self, name: str) -> "Moment":
        return Moment(self._value.astimezone(_zone(name)))

    def add(self, amount: Union[int, float], unit: str = "days") -> "Moment":
        unit = _unit(unit)
        if unit == "years":
            return Moment(_add_months(self._value, int(amount) * 12))
        if unit == "months":
            return Moment(_add_months(self._value, int(amount)))
        return Moment(self._value + dt.timedelta(**{unit: amount}))

    def subtract(self, amount: Union[int, float], unit: str = "days") -> "Moment":
        return self.add(-amount, unit)

    def start_of(self, unit: str) -> "Moment":
        unit = _unit(unit)
        v = self._value
        if unit == "years":
            v = v.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)
        elif unit == "months":
            v = v.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        elif unit == "weeks":
            v = (v - dt.timedelta(days=v.weekday())).replace(
                hour=0, minute=0, second=0, microsecond=0
            )
        elif unit == "days":
            v = v.replace(hour=0, minute=0, second=0, microsecond=0)
        elif unit == "hours":
            v = v.replace(minute=0, second=0, microsecond=0)
        elif unit == "minutes":
            v = v.replace(second=0, microsecond=0)
        else:
            v = v.replace(microsecond=0)
        return Moment(v)

    def end_of(self, unit: str) -> "Moment":
        start = self.start_of(unit)
        nxt = start.add(1, unit)
        return Moment(nxt._value - dt.timedelta(microseconds=1))

    def diff(self, other: "Moment", unit: str = "seconds") -> int:
        unit = _unit(unit)
        if unit in ("years", "months"):
            a, b = self._value, other._value.astimezone(self._value.tzinfo)
            months = (a.year - b.year) * 12 + (a.month - b.month)
            # drop a partial month
            if months > 0 and _add_months(b, months) > a:
                months -= 1
            elif months < 0 and _add_months(b, months) < a:
                months += 1
            return int(months / 12) if unit == "years" else months
        seconds = (self._value - other._value).total_seconds()
        return int(seconds / _SECONDS_PER[unit])

    def is_before(self, other: "Moment") -> bool:
        return self._value < other._value

    def is_after(self, other: "Moment") -> bool:
        return self._value > other._value

    # ---- protocol ----
    def __eq__(self, other) -> bool:
        if not isinstance(other, Moment):
            return NotImplemented
        return self._value == other._value

    def __lt__(self, other) -> bool:
        if not isinstance(other, Moment):
            return NotImplemented
        return self._value < other._value

    def __hash__(self) -> int:
        return hash(self._value)

    def __str__(self) -> str:
        return self.iso()

    def __repr__(self) -> str:
        return f"Moment({self.iso()})"


class Clock:
    """The date/time capability handed to sandbox scripts as `clock`."""

    def now(self, tz: Optional[str] = None) -> Moment:
        return Moment(dt.datetime.now(_zone(tz)))

    def utc(self) -> Moment:
        return Moment(dt.datetime.now(dt.timezone.utc))

    def parse(self, text: str, tz: Optional[str] = None) -> Moment:
        try:
            value = dt.datetime.fromisoformat(str(text).strip())
        except ValueError:
            raise ValueError(f"Cannot parse date: {text!r}") from None
        if value.tzinfo is None:
            value = value.replace(tzinfo=_zone(tz))
        return Moment(value)

    def unix(self, ts: Union[int, float], tz: Optional[str] = None) -> Moment:
        return Moment(dt.datetime.fromtimestamp(ts, _zone(tz or "UTC")))

    def zones(self) -> List[str]:
        return sorted(available_timezones())

    def __repr__(self) -> str:
        return "<clock>"
