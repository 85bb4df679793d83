from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any

from pydantic import ValidationError

from runhistory.core.config import Settings, get_settings
from runhistory.schemas import MessageResponse, RunHistoryRequest, RunHistoryResponse
from runhistory.services.aggregator import AggregationResult, DateRange, aggregate
from runhistory.services.partitions import PartitionEventSink, enumerate_and_fetch
from runhistory.services.sunrun_client import RunApi, RunCredentials

logger = logging.getLogger(__name__)

MISSING_SESSION_MESSAGE = "Missing session information"
MISSING_DATES_MESSAGE = "Missing startDate / endDate"
INVALID_RANGE_MESSAGE = "Invalid date range"
INVALID_BODY_MESSAGE = "Invalid request body"


class HistoryRequestError(ValueError):
    pass


def _message_from_exception(exc: Exception) -> str:
    if exc.args and isinstance(exc.args[0], dict):
        message = exc.args[0].get("message")
        if isinstance(message, str) and message:
            return message
    return str(exc)


@dataclass(frozen=True)
class HistoryQuery:
    credentials: RunCredentials
    date_range: DateRange


def parse_history_body(body: Any) -> RunHistoryRequest:
    """Build a request model from an arbitrary JSON body.

    A body that is not an object carries no session, so it is treated as an
    empty request and fails the session check.
    """
    if not isinstance(body, dict):
        return RunHistoryRequest()
    try:
        return RunHistoryRequest.model_validate(body)
    except ValidationError as exc:
        raise HistoryRequestError(INVALID_BODY_MESSAGE) from exc


def validate_history_request(req: RunHistoryRequest) -> HistoryQuery:
    session = req.session
    if session is None or not session.stu_number or not session.token or not session.school_id:
        raise HistoryRequestError(MISSING_SESSION_MESSAGE)
    if not req.start_date or not req.end_date:
        raise HistoryRequestError(MISSING_DATES_MESSAGE)
    try:
        date_range = DateRange.from_days(req.start_date, req.end_date)
    except ValueError as exc:
        raise HistoryRequestError(INVALID_RANGE_MESSAGE) from exc

    return HistoryQuery(
        credentials=RunCredentials(
            stu_number=session.stu_number,
            token=session.token,
            school_id=session.school_id,
            campus_id=session.campus_id or "",
        ),
        date_range=date_range,
    )


def collect_run_history(
    api: RunApi,
    query: HistoryQuery,
    *,
    settings: Settings | None = None,
    on_event: PartitionEventSink | None = None,
) -> AggregationResult:
    settings = settings or get_settings()
    records = enumerate_and_fetch(
        api,
        query.credentials,
        on_event=on_event,
        page_size=settings.history_page_size,
        max_pages=settings.history_max_pages,
    )
    return aggregate(records, query.date_range)


def run_history(
    req: RunHistoryRequest,
    api: RunApi,
    *,
    settings: Settings | None = None,
    on_event: PartitionEventSink | None = None,
) -> RunHistoryResponse | MessageResponse:
    """Validate the request, sweep every partition and aggregate.

    Every failure is reported as ``{"message": ...}``; a failure after
    validation discards whatever was already fetched.
    """
    try:
        query = validate_history_request(req)
    except HistoryRequestError as exc:
        return MessageResponse(message=str(exc))

    try:
        result = collect_run_history(api, query, settings=settings, on_event=on_event)
    except Exception as exc:
        logger.exception("[history] aggregation failed for %s", query.credentials.stu_number)
        return MessageResponse(message=_message_from_exception(exc))

    return RunHistoryResponse(distinct_days=result.distinct_days, records=result.records)
