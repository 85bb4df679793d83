from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Callable

from runhistory.enums import PaginationState, PartitionEventKind
from runhistory.services.pagination import (
    HISTORY_MAX_PAGES,
    HISTORY_PAGE_SIZE,
    fetch_partition_records,
)
from runhistory.services.records import RawRecord, field_text
from runhistory.services.sunrun_client import RunApi, RunCredentials

logger = logging.getLogger(__name__)

CURRENT_TERM_FLAG = "1"
MONTH_TOKEN_KEYS = ("monthId", "id", "monthCode")


@dataclass(frozen=True)
class PartitionEvent:
    kind: PartitionEventKind
    term_id: str | None = None
    month_id: str | None = None
    state: PaginationState | None = None
    pages_fetched: int = 0
    record_count: int = 0
    message: str | None = None


PartitionEventSink = Callable[[PartitionEvent], None]


def log_partition_event(event: PartitionEvent) -> None:
    if event.kind is PartitionEventKind.PARTITION_FAILED:
        logger.warning(
            "[history] record fetch failed term=%s month=%s: %s",
            event.term_id,
            event.month_id,
            event.message,
        )
    elif event.kind is PartitionEventKind.TERM_SKIPPED:
        logger.debug("[history] term without identifier skipped")
    else:
        logger.debug(
            "[history] fetched term=%s month=%s records=%d pages=%d state=%s",
            event.term_id,
            event.month_id,
            event.record_count,
            event.pages_fetched,
            event.state.value if event.state else None,
        )


def _is_current(term: dict[str, Any]) -> bool:
    return str(term.get("isCurrent")) == CURRENT_TERM_FLAG


def select_target_terms(terms: list[dict[str, Any]]) -> list[dict[str, Any]]:
    current = [term for term in terms if _is_current(term)]
    if len(current) == 1:
        return current
    return list(terms)


def term_identifier(term: dict[str, Any]) -> str | None:
    return field_text(term.get("termId")) or field_text(term.get("id"))


def month_tokens(months: list[dict[str, Any]]) -> list[str]:
    tokens: list[str] = []
    for month in months:
        for key in MONTH_TOKEN_KEYS:
            token = field_text(month.get(key))
            if token:
                tokens.append(token)
                break
    return tokens


def enumerate_and_fetch(
    api: RunApi,
    credentials: RunCredentials,
    *,
    on_event: PartitionEventSink | None = None,
    page_size: int = HISTORY_PAGE_SIZE,
    max_pages: int = HISTORY_MAX_PAGES,
) -> list[RawRecord]:
    emit = on_event or log_partition_event
    terms = [term for term in api.list_terms(credentials) if isinstance(term, dict)]
    target_terms = select_target_terms(terms)

    if not target_terms:
        fallback = fetch_partition_records(api, credentials, None, page_size=page_size, max_pages=max_pages)
        emit(
            PartitionEvent(
                kind=PartitionEventKind.PARTITION_FETCHED,
                state=fallback.state,
                pages_fetched=fallback.pages_fetched,
                record_count=len(fallback.records),
            )
        )
        return fallback.records

    records: list[RawRecord] = []
    for term in target_terms:
        term_id = term_identifier(term)
        if not term_id:
            emit(PartitionEvent(kind=PartitionEventKind.TERM_SKIPPED))
            continue

        months = [month for month in api.list_months(term_id, credentials) if isinstance(month, dict)]
        # No month partitions: one sweep of the term without a month token.
        targets: list[str | None] = list(month_tokens(months)) or [None]

        for month_id in targets:
            try:
                fetched = fetch_partition_records(
                    api,
                    credentials,
                    month_id,
                    page_size=page_size,
                    max_pages=max_pages,
                )
            except Exception as exc:
                emit(
                    PartitionEvent(
                        kind=PartitionEventKind.PARTITION_FAILED,
                        term_id=term_id,
                        month_id=month_id,
                        message=str(exc),
                    )
                )
                continue
            emit(
                PartitionEvent(
                    kind=PartitionEventKind.PARTITION_FETCHED,
                    term_id=term_id,
                    month_id=month_id,
                    state=fetched.state,
                    pages_fetched=fetched.pages_fetched,
                    record_count=len(fetched.records),
                )
            )
            records.extend(fetched.records)

    return records
