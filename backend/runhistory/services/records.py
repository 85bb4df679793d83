from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal
import math
import re
from typing import Any

SOURCE_TZ = timezone(timedelta(hours=8))
DEFAULT_TIME = "00:00:00"

ISO_DAY_RE = re.compile(r"([0-9]{4})-([0-9]{2})-([0-9]{2})")
CLOCK_RE = re.compile(r"([0-9]{2}):([0-9]{2})(?::([0-9]{2})(?:\.([0-9]+))?)?")

RawRecord = dict[str, Any]


def _number_text(value: float) -> str:
    """Render a float with JavaScript Number-to-string rules."""
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    text = repr(value)
    if "e" not in text:
        return text
    mantissa, exponent_text = text.split("e")
    exponent = int(exponent_text)
    if -7 < exponent < 21:
        return format(Decimal(text), "f")
    sign = "+" if exponent > 0 else "-"
    return f"{mantissa}e{sign}{abs(exponent)}"


def field_text(value: Any) -> str | None:
    # Falsy upstream values (None, "", 0, False, NaN) count as absent.
    if value is None or value is False or value == "" or value == 0:
        return None
    if value is True:
        return "true"
    if isinstance(value, float):
        if math.isnan(value):
            return None
        return _number_text(value)
    return str(value)


@dataclass(frozen=True)
class RunRecord:
    score_id: str | None = None
    day: str | None = None
    run_time: str | None = None
    mileage: str | None = None
    raw: RawRecord = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_payload(cls, payload: Any) -> RunRecord:
        if not isinstance(payload, dict):
            return cls(raw={})
        return cls(
            score_id=field_text(payload.get("scoreId")),
            day=field_text(payload.get("day")),
            run_time=field_text(payload.get("runTime")),
            mileage=field_text(payload.get("mileage")),
            raw=payload,
        )


@dataclass(frozen=True)
class ResolvedRecord:
    record: RunRecord
    identity_key: str
    day: str
    instant: datetime


def build_identity_key(record: RunRecord) -> str:
    if record.score_id:
        return record.score_id
    return f"{record.day or ''}-{record.run_time or ''}-{record.mileage or ''}"


def resolve_day(record: RunRecord) -> str | None:
    if record.day:
        return record.day
    if not record.run_time:
        return None
    candidate = record.run_time.split(" ")[0]
    if ISO_DAY_RE.fullmatch(candidate):
        return candidate
    return None


def _time_portion(run_time: str | None) -> str:
    if run_time and " " in run_time:
        time_text = run_time.split(" ")[1]
    else:
        time_text = run_time
    if time_text and ":" in time_text:
        return time_text
    return DEFAULT_TIME


def parse_source_instant(day: str, time_text: str = DEFAULT_TIME) -> datetime | None:
    """Build ``{day}T{time}+08:00``; ``None`` when it is not a real timestamp."""
    day_match = ISO_DAY_RE.fullmatch(day)
    clock_match = CLOCK_RE.fullmatch(time_text)
    if day_match is None or clock_match is None:
        return None
    year, month, day_of_month = (int(part) for part in day_match.groups())
    hour, minute, second, fraction = clock_match.groups()
    microsecond = int(fraction[:6].ljust(6, "0")) if fraction else 0
    try:
        return datetime(
            year,
            month,
            day_of_month,
            int(hour),
            int(minute),
            int(second or 0),
            microsecond,
            tzinfo=SOURCE_TZ,
        )
    except ValueError:
        return None


def resolve_instant(record: RunRecord) -> ResolvedRecord | None:
    day = resolve_day(record)
    if not day:
        return None
    instant = parse_source_instant(day, _time_portion(record.run_time))
    if instant is None:
        return None
    return ResolvedRecord(
        record=record,
        identity_key=build_identity_key(record),
        day=day,
        instant=instant,
    )
