from datetime import date, datetime, timedelta, timezone

import pytest

from app.jobs.sync.auth import AuthGate
from app.jobs.sync.errors import PayloadInvalid
from app.jobs.sync.utils.time import (
    lookback_window,
    parse_iso_date,
    prior_utc_day,
    utc_day_bounds,
    utc_today,
)

NOW = datetime(2026, 10, 19, 23, 30, tzinfo=timezone.utc)


class TestWindows:
    def test_default_lookback(self):
        assert lookback_window(days=90, now=NOW) == (date(2026, 7, 21), date(2026, 10, 19))

    def test_explicit_start_wins(self):
        start, end = lookback_window(days=90, start=date(2026, 1, 1), now=NOW)
        assert (start, end) == (date(2026, 1, 1), date(2026, 10, 19))

    def test_start_after_end_rejected(self):
        with pytest.raises(PayloadInvalid):
            lookback_window(days=1, start=date(2026, 10, 2), end=date(2026, 10, 1))

    def test_non_positive_days_rejected(self):
        with pytest.raises(PayloadInvalid):
            lookback_window(days=0, now=NOW)

    def test_utc_today_converts_offsets(self):
        ist = timezone(timedelta(hours=5, minutes=30))
        assert utc_today(datetime(2026, 10, 20, 2, 0, tzinfo=ist)) == date(2026, 10, 19)

    def test_prior_day_and_bounds(self):
        day = prior_utc_day(NOW)
        assert day == date(2026, 10, 18)
        start, end = utc_day_bounds(day)
        assert start == datetime(2026, 10, 18, tzinfo=timezone.utc)
        assert end == datetime(2026, 10, 19, tzinfo=timezone.utc)


class TestParseIsoDate:
    def test_valid(self):
        assert parse_iso_date("2026-03-01", name="start") == date(2026, 3, 1)

    @pytest.mark.parametrize("value", [None, ""])
    def test_absent(self, value):
        assert parse_iso_date(value, name="start") is None

    def test_invalid_names_the_field(self):
        with pytest.raises(PayloadInvalid) as exc:
            parse_iso_date("03/01/2026", name="end")
        assert exc.value.status_code == 400
        assert "end" in exc.value.message


class TestAuthGate:
    def test_exact_bearer_accepted(self):
        assert AuthGate("s3cret").check("Bearer s3cret") is True

    @pytest.mark.parametrize("header", [None, "", "s3cret", "Bearer s3cre", "Bearer s3cret ", "bearer s3cret"])
    def test_anything_else_rejected(self, header):
        assert AuthGate("s3cret").check(header) is False

    def test_unset_secret_rejects_all(self):
        assert AuthGate("").check("Bearer ") is False
        assert AuthGate(None).check("Bearer None") is False
