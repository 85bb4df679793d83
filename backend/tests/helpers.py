from __future__ import annotations

from typing import Any

from runhistory.services.sunrun_client import RunCredentials


def credentials() -> RunCredentials:
    return RunCredentials(stu_number="2021001", token="tok-abc", school_id="S01", campus_id="C01")


def history_body(start_date: str = "2024-03-01", end_date: str = "2024-03-31") -> dict[str, Any]:
    return {
        "session": {"stuNumber": "2021001", "token": "tok-abc", "schoolId": "S01", "campusId": "C01"},
        "startDate": start_date,
        "endDate": end_date,
    }


def run_record(
    score_id: str | None,
    run_time: str | None,
    *,
    mileage: Any = "2.10",
    day: str | None = None,
) -> dict[str, Any]:
    record: dict[str, Any] = {"mileage": mileage}
    if score_id is not None:
        record["scoreId"] = score_id
    if run_time is not None:
        record["runTime"] = run_time
    if day is not None:
        record["day"] = day
    return record


def full_page(prefix: str, day: str = "2024-03-10", size: int = 10) -> list[dict[str, Any]]:
    return [run_record(f"{prefix}-{idx}", f"{day} 07:{idx:02d}:00") for idx in range(size)]


class FakeRunApi:
    """In-memory run API.

    ``pages`` maps a month token (``""`` for unpartitioned sweeps) to either an
    exception, raised on the first page, or a list of pages where each page is
    a list of records or an exception. Pages past the end come back empty.
    """

    def __init__(
        self,
        *,
        terms: list[dict[str, Any]] | Exception | None = None,
        months: dict[str, list[dict[str, Any]] | Exception] | None = None,
        pages: dict[str, Any] | None = None,
    ):
        self.terms = terms if terms is not None else []
        self.months = months or {}
        self.pages = pages or {}
        self.term_calls: list[RunCredentials] = []
        self.month_calls: list[str] = []
        self.page_calls: list[tuple[str | None, int, int, str]] = []

    def list_terms(self, credentials: RunCredentials) -> list[dict[str, Any]]:
        self.term_calls.append(credentials)
        if isinstance(self.terms, Exception):
            raise self.terms
        return list(self.terms)

    def list_months(self, term_id: str, credentials: RunCredentials) -> list[dict[str, Any]]:
        _ = credentials
        self.month_calls.append(term_id)
        months = self.months.get(term_id, [])
        if isinstance(months, Exception):
            raise months
        return list(months)

    def fetch_record_page(
        self,
        credentials: RunCredentials,
        *,
        month_id: str | None,
        page_number: int,
        page_size: int,
        run_type: str = "0",
    ) -> dict[str, Any]:
        _ = credentials
        self.page_calls.append((month_id, page_number, page_size, run_type))
        pages = self.pages.get(month_id or "", [])
        if isinstance(pages, Exception):
            raise pages
        if page_number > len(pages):
            return {"runList": []}
        page = pages[page_number - 1]
        if isinstance(page, Exception):
            raise page
        return {"runList": list(page)}
