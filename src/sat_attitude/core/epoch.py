from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Union

from sat_attitude.core.constants import JD_J2000, SECONDS_PER_DAY

J2000_UTC = datetime(2000, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

# Fixed English abbreviations so rendered times do not depend on the locale
MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


@dataclass(frozen=True, order=True)
class Epoch:
    """
    A point in continuous simulation time.

    Stored as seconds since J2000 (2000-01-01 12:00:00 UTC). UTC is treated
    as a uniform scale, leap seconds are not modelled inside a run.

    Arithmetic:
        epoch + seconds -> Epoch
        epoch - seconds -> Epoch
        epoch - epoch   -> float seconds
    """
    seconds_since_j2000: float

    def __post_init__(self):
        if not math.isfinite(self.seconds_since_j2000):
            raise ValueError(f"Epoch must be finite. Got: {self.seconds_since_j2000}")

    @classmethod
    def from_calendar(
        cls,
        year: int,
        month: int,
        day: int,
        hour: int = 0,
        minute: int = 0,
        second: float = 0.0,
    ) -> Epoch:
        """Build an epoch from UTC calendar fields (raises ValueError on invalid fields)."""
        if not (0.0 <= second < 60.0):
            raise ValueError(f"Second must be in range [0, 60). Got: {second}")
        whole = int(math.floor(second))
        dt = datetime(year, month, day, hour, minute, whole, tzinfo=timezone.utc)
        return cls((dt - J2000_UTC).total_seconds() + (second - whole))

    @classmethod
    def from_datetime(cls, dt: datetime) -> Epoch:
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return cls((dt - J2000_UTC).total_seconds())

    def __add__(self, dt_s: float) -> Epoch:
        return Epoch(self.seconds_since_j2000 + dt_s)

    def __sub__(self, other: Union[Epoch, float]) -> Union[Epoch, float]:
        if isinstance(other, Epoch):
            return self.seconds_since_j2000 - other.seconds_since_j2000
        return Epoch(self.seconds_since_j2000 - other)

    @property
    def julian_day(self) -> float:
        return JD_J2000 + self.seconds_since_j2000 / SECONDS_PER_DAY

    def to_datetime(self) -> datetime:
        return J2000_UTC + timedelta(seconds=self.seconds_since_j2000)

    def __str__(self) -> str:
        return format_epoch(self)


def format_epoch(epoch: Epoch) -> str:
    """
    Render an epoch as "day Mon year hh:mm:ss.sss", e.g. "1 Jan 2020 00:00:00.000".
    Rounded to the millisecond first so the seconds field never reads 60.000.
    """
    ms = int(round(epoch.seconds_since_j2000 * 1000.0))
    dt = J2000_UTC + timedelta(milliseconds=ms)
    seconds = dt.second + dt.microsecond / 1e6
    return (
        f"{dt.day} {MONTH_ABBREVIATIONS[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{seconds:06.3f}"
    )
