from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone

from runhistory.services.records import (
    RawRecord,
    ResolvedRecord,
    RunRecord,
    parse_source_instant,
    resolve_instant,
)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
DAY_START_TIME = "00:00:00"
DAY_END_TIME = "23:59:59"


@dataclass(frozen=True)
class DateRange:
    start: datetime
    end: datetime

    @classmethod
    def from_days(cls, start_date: str, end_date: str) -> DateRange:
        start = parse_source_instant(start_date, DAY_START_TIME)
        end = parse_source_instant(end_date, DAY_END_TIME)
        if start is None or end is None or start > end:
            raise ValueError("Invalid date range")
        return cls(start=start, end=end)

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant <= self.end


@dataclass(frozen=True)
class AggregationResult:
    distinct_days: list[str] = field(default_factory=list)
    records: list[RawRecord] = field(default_factory=list)


def _sort_instant(record: RunRecord) -> datetime:
    resolved = resolve_instant(record)
    return resolved.instant if resolved else EPOCH


class RecordAggregator:
    """Identity-keyed merge of run records inside one date range.

    Days are collected before the identity upsert, so a day stays in the
    result even if the record that contributed it is later replaced by a
    same-identity record from another day.
    """

    def __init__(self, date_range: DateRange):
        self.date_range = date_range
        self._days: set[str] = set()
        self._by_identity: dict[str, RunRecord] = {}

    def add(self, payload: RawRecord) -> ResolvedRecord | None:
        record = RunRecord.from_payload(payload)
        resolved = resolve_instant(record)
        if resolved is None:
            return None
        if not self.date_range.contains(resolved.instant):
            return None
        self._days.add(resolved.day)
        self._by_identity[resolved.identity_key] = record
        return resolved

    def extend(self, payloads: Iterable[RawRecord]) -> None:
        for payload in payloads:
            self.add(payload)

    def result(self) -> AggregationResult:
        ordered = sorted(self._by_identity.values(), key=_sort_instant, reverse=True)
        return AggregationResult(
            distinct_days=sorted(self._days),
            records=[record.raw for record in ordered],
        )


def aggregate(records: Iterable[RawRecord], date_range: DateRange) -> AggregationResult:
    aggregator = RecordAggregator(date_range)
    aggregator.extend(records)
    return aggregator.result()
