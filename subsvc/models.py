"""Subscription records and the shapes they are returned in."""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from datetime import date, datetime
from typing import Optional

_MONTH_RE = re.compile(r"([0-9]{4})-([0-9]{2})")


def parse_month(value: str) -> date:
    """Parse ``YYYY-MM`` into the first day of that month."""
    match = _MONTH_RE.fullmatch(value) if isinstance(value, str) else None
    try:
        if match is None:
            raise ValueError("expected YYYY-MM")
        return date(int(match.group(1)), int(match.group(2)), 1)
    except ValueError as exc:
        raise ValueError(f"invalid month {value!r}: {exc}") from exc


def format_month(value: date) -> str:
    """Format a date as ``YYYY-MM``."""
    return f"{value.year:04d}-{value.month:02d}"


def _format_timestamp(value: Optional[datetime]) -> str:
    if value is None:
        return "0001-01-01T00:00:00Z"
    text = value.strftime("%Y-%m-%dT%H:%M:%S")
    offset = value.utcoffset()
    if not offset:
        return text + "Z"
    minutes = int(offset.total_seconds()) // 60
    hours, minutes = divmod(abs(minutes), 60)
    return f"{text}{'-' if offset.total_seconds() < 0 else '+'}{hours:02d}:{minutes:02d}"


@dataclass
class SubscriptionResponse:
    """A subscription as returned to clients."""

    id: str
    service_name: str
    price: int
    user_id: str
    start_date: str
    end_date: Optional[str]
    created_at: str
    updated_at: str

    def to_dict(self) -> dict:
        data = asdict(self)
        if data["end_date"] is None:
            del data["end_date"]
        return data


@dataclass
class Subscription:
    """A user's subscription to a service."""

    service_name: str
    price: int
    user_id: str
    start_date: date
    end_date: Optional[date] = None
    id: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_response(self) -> SubscriptionResponse:
        return SubscriptionResponse(
            id=self.id,
            service_name=self.service_name,
            price=self.price,
            user_id=self.user_id,
            start_date=format_month(self.start_date),
            end_date=format_month(self.end_date) if self.end_date is not None else None,
            created_at=_format_timestamp(self.created_at),
            updated_at=_format_timestamp(self.updated_at),
        )


@dataclass
class ErrorResponse:
    """An error message returned to clients."""

    error: str

    def to_dict(self) -> dict:
        return {"error": self.error}