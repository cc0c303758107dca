from datetime import date, datetime, timedelta, timezone

import pytest

from subsvc.models import ErrorResponse, Subscription, format_month, parse_month


def _subscription(**overrides):
    values = dict(
        service_name="Yandex Plus",
        price=400,
        user_id="60601fee-2bf1-4721-ae6f-7636e79a0cba",
        start_date=date(2025, 7, 1),
    )
    values.update(overrides)
    return Subscription(**values)


def test_parse_month_gives_first_day():
    assert parse_month("2025-07") == date(2025, 7, 1)


@pytest.mark.parametrize("text", ["2025-07", "1999-12", "2000-01"])
def test_month_round_trip(text):
    assert format_month(parse_month(text)) == text


@pytest.mark.parametrize("text", ["2025-7", "2025-13", "2025-00", "25-07", "2025-07-01", "", "July"])
def test_parse_month_rejects(text):
    with pytest.raises(ValueError):
        parse_month(text)


def test_format_month_ignores_day():
    assert format_month(date(2025, 7, 28)) == format_month(date(2025, 7, 1))


def test_response_without_end_date_omits_it():
    data = _subscription().to_response().to_dict()
    assert "end_date" not in data
    assert data["start_date"] == "2025-07"
    assert data["price"] == 400


def test_response_with_end_date():
    sub = _subscription(end_date=date(2025, 12, 1))
    assert sub.to_response().end_date == "2025-12"
    assert sub.to_response().to_dict()["end_date"] == "2025-12"


def test_response_keeps_identity_fields():
    sub = _subscription(id="8c1b3f1e-7777-4c4c-9999-000000000001")
    resp = sub.to_response()
    assert (resp.id, resp.service_name, resp.user_id) == (sub.id, sub.service_name, sub.user_id)


def test_naive_timestamp_is_utc_without_fraction():
    moment = datetime(2025, 7, 1, 12, 30, 45, 123456)
    resp = _subscription(created_at=moment, updated_at=moment).to_response()
    assert resp.created_at == "2025-07-01T12:30:45Z"
    assert resp.updated_at == resp.created_at


def test_offset_timestamp_keeps_offset():
    moment = datetime(2025, 7, 1, 12, 30, 45, tzinfo=timezone(timedelta(hours=3)))
    assert _subscription(created_at=moment).to_response().created_at.endswith("+03:00")


def test_utc_timestamp_uses_z():
    moment = datetime(2025, 7, 1, 12, 30, 45, tzinfo=timezone.utc)
    naive = moment.replace(tzinfo=None)
    aware_text = _subscription(created_at=moment).to_response().created_at
    naive_text = _subscription(created_at=naive).to_response().created_at
    assert aware_text == naive_text


def test_unset_timestamp_is_zero_time():
    assert _subscription().to_response().created_at == "0001-01-01T00:00:00Z"


def test_error_response_dict():
    assert ErrorResponse("subscription not found").to_dict() == {"error": "subscription not found"}