from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Protocol

import httpx

from runhistory.core.config import Settings, get_settings

SUN_RUN_TYPE = "0"
RUN_API_CONNECT_TIMEOUT_S = 5.0


@dataclass(frozen=True)
class RunCredentials:
    stu_number: str
    token: str
    school_id: str = ""
    campus_id: str = ""

    def basic_body(self) -> dict[str, str]:
        return {
            "stuNumber": self.stu_number,
            "token": self.token,
            "schoolId": self.school_id,
            "campusId": self.campus_id,
        }


class RunApi(Protocol):
    def list_terms(self, credentials: RunCredentials) -> list[dict[str, Any]]: ...

    def list_months(self, term_id: str, credentials: RunCredentials) -> list[dict[str, Any]]: ...

    def fetch_record_page(
        self,
        credentials: RunCredentials,
        *,
        month_id: str | None,
        page_number: int,
        page_size: int,
        run_type: str = SUN_RUN_TYPE,
    ) -> dict[str, Any]: ...


class RunApiError(ValueError):
    pass


def _run_api_error(message: str, **extra: Any) -> RunApiError:
    detail: dict[str, Any] = {"error_code": "RUN_API_FAILED", "message": message}
    if extra:
        detail.update(extra)
    return RunApiError(detail)


PostJsonFn = Callable[[str, dict[str, str], dict[str, str], float], Any]


def default_json_poster(
    url: str,
    body: dict[str, str],
    headers: dict[str, str],
    timeout_s: float,
) -> Any:
    timeout = httpx.Timeout(
        timeout=timeout_s,
        connect=min(RUN_API_CONNECT_TIMEOUT_S, timeout_s),
    )
    response = httpx.post(url, json=body, headers=headers, timeout=timeout)
    response.raise_for_status()
    return response.json()


def _rows(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [row for row in value if isinstance(row, dict)]


class TotoroRunApi:
    def __init__(
        self,
        *,
        base_url: str,
        terms_path: str = "/school/terms",
        months_path: str = "/school/months",
        records_path: str = "/sunrun/records",
        post_json: PostJsonFn | None = None,
        timeout_s: float = 20.0,
        user_agent: str = "RunHistory/1.0",
    ):
        self.base_url = base_url
        self.terms_path = terms_path
        self.months_path = months_path
        self.records_path = records_path
        self.post_json = post_json or default_json_poster
        self.timeout_s = timeout_s
        self.user_agent = user_agent

    @classmethod
    def from_settings(cls, settings: Settings | None = None, *, post_json: PostJsonFn | None = None) -> TotoroRunApi:
        settings = settings or get_settings()
        return cls(
            base_url=settings.run_api_base_url,
            terms_path=settings.run_api_terms_path,
            months_path=settings.run_api_months_path,
            records_path=settings.run_api_records_path,
            post_json=post_json,
            timeout_s=settings.run_api_timeout_s,
            user_agent=settings.run_api_user_agent,
        )

    def _url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"

    def _post(self, path: str, body: dict[str, str]) -> dict[str, Any]:
        url = self._url(path)
        payload = self.post_json(url, body, {"User-Agent": self.user_agent}, self.timeout_s)
        if not isinstance(payload, dict):
            raise _run_api_error("Upstream JSON payload must be an object", url=url)
        return payload

    def list_terms(self, credentials: RunCredentials) -> list[dict[str, Any]]:
        payload = self._post(self.terms_path, credentials.basic_body())
        return _rows(payload.get("data"))

    def list_months(self, term_id: str, credentials: RunCredentials) -> list[dict[str, Any]]:
        payload = self._post(self.months_path, {**credentials.basic_body(), "termId": term_id})
        if isinstance(payload.get("monthList"), list):
            return _rows(payload["monthList"])
        return _rows(payload.get("data"))

    def fetch_record_page(
        self,
        credentials: RunCredentials,
        *,
        month_id: str | None,
        page_number: int,
        page_size: int,
        run_type: str = SUN_RUN_TYPE,
    ) -> dict[str, Any]:
        body = {
            "stuNumber": credentials.stu_number,
            "token": credentials.token,
            "runType": run_type,
            "pageNumber": str(page_number),
            "rowNumber": str(page_size),
        }
        if month_id:
            body["monthId"] = month_id
        return self._post(self.records_path, body)
