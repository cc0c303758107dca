"""Validated request bodies for creating and updating subscriptions."""

from __future__ import annotations

import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, StrictInt, StrictStr, field_validator

from .models import parse_month

_UUID_RE = re.compile(r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}")


def _month_or_empty(value: Optional[str], name: str) -> Optional[str]:
    if value:
        try:
            parse_month(value)
        except ValueError as exc:
            raise ValueError(f"{name} does not match the YYYY-MM format") from exc
    return value


class CreateSubscriptionRequest(BaseModel):
    """Body of a request that creates a subscription."""

    model_config = ConfigDict(frozen=True)

    service_name: StrictStr
    price: StrictInt
    user_id: StrictStr
    start_date: StrictStr
    end_date: Optional[StrictStr] = None

    @field_validator("service_name", "user_id", "start_date")
    @classmethod
    def _required(cls, value: str, info) -> str:
        if not value:
            raise ValueError(f"{info.field_name} is required")
        if info.field_name == "user_id" and not _UUID_RE.fullmatch(value):
            raise ValueError("user_id must be a valid UUID")
        return _month_or_empty(value, info.field_name) if info.field_name == "start_date" else value

    @field_validator("price")
    @classmethod
    def _price_valid(cls, value: int) -> int:
        if value == 0:
            raise ValueError("price is required")
        if value < 0:
            raise ValueError("price must be at least 0")
        return value

    @field_validator("end_date")
    @classmethod
    def _end_date_valid(cls, value: Optional[str]) -> Optional[str]:
        return _month_or_empty(value, "end_date")


class UpdateSubscriptionRequest(BaseModel):
    """Body of a request that changes a subscription; absent fields stay as they are."""

    model_config = ConfigDict(frozen=True)

    service_name: Optional[StrictStr] = None
    price: Optional[StrictInt] = None
    end_date: Optional[StrictStr] = None

    @field_validator("price")
    @classmethod
    def _price_valid(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value < 0:
            raise ValueError("price must be at least 0")
        return value

    @field_validator("end_date")
    @classmethod
    def _end_date_valid(cls, value: Optional[str]) -> Optional[str]:
        return _month_or_empty(value, "end_date")