from __future__ import annotations

import logging

import pytest

from runhistory.enums import PaginationState, PartitionEventKind
from runhistory.services.partitions import (
    PartitionEvent,
    enumerate_and_fetch,
    month_tokens,
    select_target_terms,
)
from tests.helpers import FakeRunApi, credentials, run_record


def test_select_target_terms_prefers_single_current_term():
    terms = [{"termId": "T1", "isCurrent": "0"}, {"termId": "T2", "isCurrent": "1"}]
    assert select_target_terms(terms) == [{"termId": "T2", "isCurrent": "1"}]


def test_select_target_terms_uses_all_terms_without_single_current():
    none_current = [{"termId": "T1", "isCurrent": "0"}, {"termId": "T2", "isCurrent": "0"}]
    two_current = [{"termId": "T1", "isCurrent": "1"}, {"termId": "T2", "isCurrent": "1"}]
    assert select_target_terms(none_current) == none_current
    assert select_target_terms(two_current) == two_current
    assert select_target_terms([]) == []


def test_month_tokens_reads_first_present_key_and_drops_blanks():
    months = [
        {"monthId": "202403"},
        {"id": "202404"},
        {"monthCode": "202405"},
        {"monthId": "", "id": "202406"},
        {"name": "March"},
    ]
    assert month_tokens(months) == ["202403", "202404", "202405", "202406"]


def test_no_terms_falls_back_to_single_unpartitioned_fetch():
    record = run_record("SC-1", "2024-03-02 06:00:00")
    api = FakeRunApi(terms=[], pages={"": [[record]]})
    events: list[PartitionEvent] = []
    records = enumerate_and_fetch(api, credentials(), on_event=events.append)
    assert records == [record]
    assert api.month_calls == []
    assert api.page_calls == [(None, 1, 10, "0")]
    assert [e.kind for e in events] == [PartitionEventKind.PARTITION_FETCHED]
    assert events[0].state is PaginationState.DONE_SHORT_PAGE


def test_unpartitioned_fallback_failure_propagates():
    api = FakeRunApi(terms=[], pages={"": RuntimeError("upstream down")})
    with pytest.raises(RuntimeError, match="upstream down"):
        enumerate_and_fetch(api, credentials(), on_event=lambda _event: None)


def test_term_without_identifier_is_skipped_entirely():
    api = FakeRunApi(terms=[{"isCurrent": "0", "name": "orphan"}, {"id": "T2", "isCurrent": "0"}], months={"T2": []})
    events: list[PartitionEvent] = []
    enumerate_and_fetch(api, credentials(), on_event=events.append)
    assert api.month_calls == ["T2"]
    assert events[0].kind is PartitionEventKind.TERM_SKIPPED
    assert len(api.page_calls) == 1


def test_term_without_months_gets_one_unscoped_fetch():
    record = run_record("SC-1", "2024-03-02 06:00:00")
    api = FakeRunApi(terms=[{"termId": "T1", "isCurrent": "1"}], months={"T1": []}, pages={"": [[record]]})
    records = enumerate_and_fetch(api, credentials(), on_event=lambda _event: None)
    assert records == [record]
    assert api.page_calls == [(None, 1, 10, "0")]


def test_only_current_term_is_swept():
    api = FakeRunApi(
        terms=[{"termId": "T1", "isCurrent": "0"}, {"termId": "T2", "isCurrent": "1"}],
        months={"T1": [{"monthId": "202309"}], "T2": [{"monthId": "202403"}]},
    )
    enumerate_and_fetch(api, credentials(), on_event=lambda _event: None)
    assert api.month_calls == ["T2"]
    assert [call[0] for call in api.page_calls] == ["202403"]


def test_partition_failure_is_reported_and_skipped():
    month_a = run_record("A-1", "2024-03-05 06:00:00")
    month_c = run_record("C-1", "2024-05-05 06:00:00")
    api = FakeRunApi(
        terms=[{"termId": "T1", "isCurrent": "1"}],
        months={"T1": [{"monthId": "A"}, {"monthId": "B"}, {"monthId": "C"}]},
        pages={"A": [[month_a]], "B": RuntimeError("month B exploded"), "C": [[month_c]]},
    )
    events: list[PartitionEvent] = []
    records = enumerate_and_fetch(api, credentials(), on_event=events.append)
    assert records == [month_a, month_c]
    assert [(e.kind, e.month_id) for e in events] == [
        (PartitionEventKind.PARTITION_FETCHED, "A"),
        (PartitionEventKind.PARTITION_FAILED, "B"),
        (PartitionEventKind.PARTITION_FETCHED, "C"),
    ]
    assert events[1].term_id == "T1"
    assert events[1].message == "month B exploded"


def test_records_follow_term_then_month_order():
    api = FakeRunApi(
        terms=[{"termId": "T1", "isCurrent": "0"}, {"termId": "T2", "isCurrent": "0"}],
        months={"T1": [{"monthId": "m2"}, {"monthId": "m1"}], "T2": [{"monthId": "m3"}]},
        pages={
            "m1": [[run_record("m1", "2024-03-01 06:00:00")]],
            "m2": [[run_record("m2", "2024-03-02 06:00:00")]],
            "m3": [[run_record("m3", "2024-03-03 06:00:00")]],
        },
    )
    records = enumerate_and_fetch(api, credentials(), on_event=lambda _event: None)
    assert [r["scoreId"] for r in records] == ["m2", "m1", "m3"]


def test_month_enumeration_failure_propagates():
    api = FakeRunApi(terms=[{"termId": "T1", "isCurrent": "1"}], months={"T1": RuntimeError("months unavailable")})
    with pytest.raises(RuntimeError, match="months unavailable"):
        enumerate_and_fetch(api, credentials(), on_event=lambda _event: None)


def test_default_event_sink_logs_partition_failure_as_warning(caplog: pytest.LogCaptureFixture):
    api = FakeRunApi(
        terms=[{"termId": "T1", "isCurrent": "1"}],
        months={"T1": [{"monthId": "B"}]},
        pages={"B": RuntimeError("boom")},
    )
    with caplog.at_level(logging.WARNING, logger="runhistory.services.partitions"):
        records = enumerate_and_fetch(api, credentials())
    assert records == []
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "record fetch failed" in warnings[0].getMessage()
    assert "boom" in warnings[0].getMessage()
