from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class SessionInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    stu_number: str | None = Field(default=None, validation_alias=AliasChoices("stuNumber", "studentNumber"))
    token: str | None = None
    school_id: str | None = Field(default=None, validation_alias="schoolId")
    campus_id: str | None = Field(default=None, validation_alias="campusId")


class RunHistoryRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    session: SessionInfo | None = None
    start_date: str | None = Field(default=None, validation_alias="startDate")
    end_date: str | None = Field(default=None, validation_alias="endDate")

    @field_validator("session", mode="before")
    @classmethod
    def _drop_non_object_session(cls, value: Any) -> Any:
        if value is None or isinstance(value, (dict, SessionInfo)):
            return value
        return None


class RunHistoryResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    distinct_days: list[str] = Field(alias="distinctDays")
    records: list[dict[str, Any]]


class MessageResponse(BaseModel):
    message: str
