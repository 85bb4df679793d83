#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
from pathlib import Path
import sys
from typing import Any

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from runhistory.core.config import get_settings
from runhistory.core.log_setup import configure_logging
from runhistory.schemas import MessageResponse, RunHistoryRequest, SessionInfo
from runhistory.services.history import run_history
from runhistory.services.sunrun_client import TotoroRunApi


def _emit_record(record: dict[str, Any], output_path: Path | None) -> None:
    line = json.dumps(record, sort_keys=True, ensure_ascii=False)
    print(line)
    if output_path:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with output_path.open("a", encoding="utf-8") as f:
            f.write(line)
            f.write("\n")


def _build_request(args: argparse.Namespace) -> RunHistoryRequest:
    return RunHistoryRequest(
        session=SessionInfo(
            stu_number=args.stu_number,
            token=args.token,
            school_id=args.school_id,
            campus_id=args.campus_id,
        ),
        start_date=args.start_date,
        end_date=args.end_date,
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Fetch sun run history for one student and date range.")
    parser.add_argument("--stu-number", default=None)
    parser.add_argument("--token", default=None)
    parser.add_argument("--school-id", default=None)
    parser.add_argument("--campus-id", default=None)
    parser.add_argument("--start-date", default=None, help="YYYY-MM-DD, inclusive")
    parser.add_argument("--end-date", default=None, help="YYYY-MM-DD, inclusive")
    parser.add_argument("--output", default=None, help="Optional JSONL file to append the result to")
    parser.add_argument("--log-level", default=None)
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(args.log_level or settings.log_level)

    response = run_history(_build_request(args), TotoroRunApi.from_settings(settings), settings=settings)
    output_path = Path(args.output) if args.output else None
    _emit_record(response.model_dump(by_alias=True), output_path)
    return 1 if isinstance(response, MessageResponse) else 0


if __name__ == "__main__":
    raise SystemExit(main())
