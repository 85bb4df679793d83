from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends

from runhistory.core.config import get_settings
from runhistory.schemas import MessageResponse, RunHistoryResponse
from runhistory.services.history import HistoryRequestError, parse_history_body, run_history
from runhistory.services.sunrun_client import RunApi, TotoroRunApi

router = APIRouter(prefix="/api/run", tags=["run"])


def get_run_api() -> RunApi:
    return TotoroRunApi.from_settings(get_settings())


@router.post("/history", response_model=RunHistoryResponse | MessageResponse)
def post_history(
    body: Any = Body(default=None),
    api: RunApi = Depends(get_run_api),
) -> RunHistoryResponse | MessageResponse:
    # malformed bodies still answer 200 {message}
    try:
        req = parse_history_body(body)
    except HistoryRequestError as exc:
        return MessageResponse(message=str(exc))
    return run_history(req, api, settings=get_settings())
