from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from runhistory.enums import PaginationState
from runhistory.services.records import RawRecord
from runhistory.services.sunrun_client import RunApi, RunCredentials

HISTORY_PAGE_SIZE = 10
HISTORY_MAX_PAGES = 20


@dataclass(frozen=True)
class PartitionFetch:
    month_id: str | None
    state: PaginationState
    pages_fetched: int
    records: list[RawRecord] = field(default_factory=list)


def next_pagination_state(
    page_number: int,
    page_length: int,
    *,
    page_size: int = HISTORY_PAGE_SIZE,
    max_pages: int = HISTORY_MAX_PAGES,
) -> PaginationState:
    if page_length <= 0:
        return PaginationState.DONE_EMPTY
    if page_length < page_size:
        return PaginationState.DONE_SHORT_PAGE
    if page_number >= max_pages:
        return PaginationState.DONE_CAPPED
    return PaginationState.FETCHING


def _page_rows(payload: Any) -> list[RawRecord]:
    if not isinstance(payload, dict):
        return []
    rows = payload.get("runList")
    if not isinstance(rows, list):
        return []
    return list(rows)


def fetch_partition_records(
    api: RunApi,
    credentials: RunCredentials,
    month_id: str | None = None,
    *,
    page_size: int = HISTORY_PAGE_SIZE,
    max_pages: int = HISTORY_MAX_PAGES,
) -> PartitionFetch:
    """Walk pages 1..max_pages of one partition, strictly in order.

    Request errors propagate to the caller untouched.
    """
    records: list[RawRecord] = []
    state = PaginationState.FETCHING if max_pages > 0 else PaginationState.DONE_CAPPED
    page_number = 0

    while state is PaginationState.FETCHING:
        page_number += 1
        payload = api.fetch_record_page(
            credentials,
            month_id=month_id or None,
            page_number=page_number,
            page_size=page_size,
        )
        rows = _page_rows(payload)
        records.extend(rows)
        state = next_pagination_state(
            page_number,
            len(rows),
            page_size=page_size,
            max_pages=max_pages,
        )

    return PartitionFetch(
        month_id=month_id or None,
        state=state,
        pages_fetched=page_number,
        records=records,
    )
