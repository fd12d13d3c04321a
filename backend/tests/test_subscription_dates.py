"""Tests for billing period resolution and proration."""

from datetime import UTC, date, datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from invoicer.core.errors import BillingConfigurationError, UnsupportedIntervalError
from invoicer.services.subscription_dates import (
    BillingPeriod,
    SubscriptionDatesService,
    _add_months,
    _subtract_interval,
    as_utc_datetime,
)


@pytest.fixture
def service() -> SubscriptionDatesService:
    return SubscriptionDatesService()


def _plan(interval: str = "monthly", pay_in_advance: bool = False) -> SimpleNamespace:
    return SimpleNamespace(interval=interval, pay_in_advance=pay_in_advance)


def _subscription(started_at: datetime | None) -> SimpleNamespace:
    return SimpleNamespace(id="sub-1", started_at=started_at)


class TestAddMonths:
    def test_basic(self):
        assert _add_months(date(2024, 1, 15), 1) == date(2024, 2, 15)

    def test_clamp_end_of_month(self):
        assert _add_months(date(2023, 3, 31), -1) == date(2023, 2, 28)

    def test_leap_year(self):
        assert _add_months(date(2024, 3, 31), -1) == date(2024, 2, 29)

    def test_subtract_across_year(self):
        assert _add_months(date(2024, 1, 15), -1) == date(2023, 12, 15)

    def test_datetime_keeps_time(self):
        result = _add_months(datetime(2024, 5, 31, 10, 30, tzinfo=UTC), -1)
        assert result == datetime(2024, 4, 30, 10, 30, tzinfo=UTC)


class TestSubtractInterval:
    def test_monthly(self):
        assert _subtract_interval(date(2024, 3, 1), "monthly") == date(2024, 2, 1)

    def test_yearly(self):
        assert _subtract_interval(date(2024, 2, 29), "yearly") == date(2023, 2, 28)

    def test_unknown_interval(self):
        with pytest.raises(UnsupportedIntervalError, match="Unsupported plan interval: weekly"):
            _subtract_interval(date(2024, 3, 1), "weekly")


class TestAsUtcDatetime:
    def test_epoch_seconds(self):
        assert as_utc_datetime(1706745600) == datetime(2024, 2, 1, tzinfo=UTC)

    def test_epoch_float(self):
        assert as_utc_datetime(1706745600.5) == datetime(2024, 2, 1, 0, 0, 0, 500000, tzinfo=UTC)

    def test_naive_datetime_read_as_utc(self):
        assert as_utc_datetime(datetime(2024, 2, 1, 8)) == datetime(2024, 2, 1, 8, tzinfo=UTC)

    def test_aware_datetime_converted(self):
        value = datetime(2024, 2, 1, 1, tzinfo=timezone(timedelta(hours=2)))
        assert as_utc_datetime(value) == datetime(2024, 1, 31, 23, tzinfo=UTC)
        assert as_utc_datetime(value).tzinfo is UTC

    def test_rejects_other_types(self):
        with pytest.raises(TypeError):
            as_utc_datetime("2024-02-01")  # type: ignore[arg-type]

    def test_rejects_bool(self):
        with pytest.raises(TypeError):
            as_utc_datetime(True)  # type: ignore[arg-type]


class TestResolveInvoicePeriod:
    def test_full_monthly_period_in_arrear(self, service: SubscriptionDatesService):
        period = service.resolve_invoice_period(
            _plan(), _subscription(datetime(2023, 6, 10, tzinfo=UTC)),
            datetime(2024, 3, 1, tzinfo=UTC),
        )
        assert period == BillingPeriod(
            from_date=date(2024, 2, 1),
            to_date=date(2024, 2, 29),
            issuing_date=date(2024, 2, 29),
        )

    def test_pay_in_advance_issued_on_timestamp_day(self, service: SubscriptionDatesService):
        period = service.resolve_invoice_period(
            _plan(pay_in_advance=True),
            _subscription(datetime(2023, 6, 10, tzinfo=UTC)),
            datetime(2024, 3, 1, 12, tzinfo=UTC),
        )
        assert period.from_date == date(2024, 2, 1)
        assert period.to_date == date(2024, 2, 29)
        assert period.issuing_date == date(2024, 3, 1)

    def test_from_date_clamped_to_start(self, service: SubscriptionDatesService):
        """A subscription started mid-period is billed from its start date."""
        period = service.resolve_invoice_period(
            _plan(), _subscription(datetime(2024, 1, 15, 9, tzinfo=UTC)),
            datetime(2024, 2, 1, tzinfo=UTC),
        )
        assert period.from_date == date(2024, 1, 15)
        assert period.to_date == date(2024, 1, 31)
        assert period.issuing_date == date(2024, 1, 31)

    def test_activation_day_single_day_period(self, service: SubscriptionDatesService):
        """Billing on the start day clamps both ends to that day."""
        started_at = datetime(2024, 1, 15, 9, tzinfo=UTC)
        period = service.resolve_invoice_period(
            _plan(pay_in_advance=True), _subscription(started_at), started_at
        )
        assert period.from_date == date(2024, 1, 15)
        assert period.to_date == date(2024, 1, 15)
        assert period.issuing_date == date(2024, 1, 15)

    def test_activation_day_in_arrear_issued_on_start(self, service: SubscriptionDatesService):
        started_at = datetime(2024, 1, 15, 9, tzinfo=UTC)
        period = service.resolve_invoice_period(_plan(), _subscription(started_at), started_at)
        assert period.issuing_date == date(2024, 1, 15)

    def test_month_end_clamp(self, service: SubscriptionDatesService):
        period = service.resolve_invoice_period(
            _plan(), _subscription(datetime(2020, 1, 1, tzinfo=UTC)),
            datetime(2023, 3, 31, tzinfo=UTC),
        )
        assert period.from_date == date(2023, 2, 28)
        assert period.to_date == date(2023, 3, 30)

    def test_yearly(self, service: SubscriptionDatesService):
        period = service.resolve_invoice_period(
            _plan("yearly"), _subscription(datetime(2020, 5, 5, tzinfo=UTC)),
            datetime(2024, 1, 1, tzinfo=UTC),
        )
        assert period.from_date == date(2023, 1, 1)
        assert period.to_date == date(2023, 12, 31)
        assert period.issuing_date == date(2023, 12, 31)

    def test_yearly_first_period_clamped(self, service: SubscriptionDatesService):
        period = service.resolve_invoice_period(
            _plan("yearly"), _subscription(datetime(2023, 7, 1, tzinfo=UTC)),
            datetime(2024, 1, 1, tzinfo=UTC),
        )
        assert period.from_date == date(2023, 7, 1)
        assert period.to_date == date(2023, 12, 31)

    def test_epoch_timestamp(self, service: SubscriptionDatesService):
        period = service.resolve_invoice_period(
            _plan(), _subscription(datetime(2023, 1, 1, tzinfo=UTC)), 1706745600
        )
        assert period.from_date == date(2024, 1, 1)
        assert period.to_date == date(2024, 1, 31)

    def test_naive_started_at(self, service: SubscriptionDatesService):
        """Start dates read back from SQLite are naive UTC."""
        period = service.resolve_invoice_period(
            _plan(), _subscription(datetime(2024, 1, 20)), datetime(2024, 2, 1, tzinfo=UTC)
        )
        assert period.from_date == date(2024, 1, 20)

    def test_timestamp_in_other_timezone(self, service: SubscriptionDatesService):
        """00:30 on March 1st at UTC+2 is still February 29th in UTC."""
        timestamp = datetime(2024, 3, 1, 0, 30, tzinfo=timezone(timedelta(hours=2)))
        period = service.resolve_invoice_period(
            _plan(), _subscription(datetime(2023, 1, 1, tzinfo=UTC)), timestamp
        )
        assert period.to_date == date(2024, 2, 28)
        assert period.from_date == date(2024, 1, 29)

    def test_unsupported_interval(self, service: SubscriptionDatesService):
        with pytest.raises(UnsupportedIntervalError):
            service.resolve_invoice_period(
                _plan("weekly"), _subscription(datetime(2023, 1, 1, tzinfo=UTC)),
                datetime(2024, 2, 1, tzinfo=UTC),
            )

    def test_missing_start_date(self, service: SubscriptionDatesService):
        with pytest.raises(BillingConfigurationError, match="has not started"):
            service.resolve_invoice_period(
                _plan(), _subscription(None), datetime(2024, 2, 1, tzinfo=UTC)
            )


class TestNominalPeriodStart:
    def test_monthly(self, service: SubscriptionDatesService):
        assert service.nominal_period_start(date(2024, 1, 31), "monthly") == date(2024, 1, 1)

    def test_yearly(self, service: SubscriptionDatesService):
        assert service.nominal_period_start(date(2023, 12, 31), "yearly") == date(2023, 1, 1)


class TestProrateAmount:
    def test_full_period(self, service: SubscriptionDatesService):
        result = service.prorate_amount(
            3100, date(2024, 1, 1), date(2024, 2, 1), date(2024, 1, 1), date(2024, 2, 1)
        )
        assert result == 3100

    def test_partial_period(self, service: SubscriptionDatesService):
        result = service.prorate_amount(
            3100, date(2024, 1, 1), date(2024, 2, 1), date(2024, 1, 15), date(2024, 2, 1)
        )
        assert result == 1700

    def test_rounds_half_up(self, service: SubscriptionDatesService):
        # 1 / 4 of 10 cents
        result = service.prorate_amount(
            10, date(2024, 1, 1), date(2024, 1, 5), date(2024, 1, 4), date(2024, 1, 5)
        )
        assert result == 3

    def test_empty_period(self, service: SubscriptionDatesService):
        result = service.prorate_amount(
            1000, date(2024, 1, 1), date(2024, 1, 1), date(2024, 1, 1), date(2024, 1, 1)
        )
        assert result == 0

    def test_empty_prorated_portion(self, service: SubscriptionDatesService):
        result = service.prorate_amount(
            1000, date(2024, 1, 1), date(2024, 2, 1), date(2024, 2, 1), date(2024, 2, 1)
        )
        assert result == 0
