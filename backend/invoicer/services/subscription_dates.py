"""Service for billing period calculation and subscription date logic."""

import calendar as cal
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

from invoicer.core.errors import BillingConfigurationError, UnsupportedIntervalError
from invoicer.models.plan import Plan, PlanInterval
from invoicer.models.subscription import Subscription


@dataclass(frozen=True)
class BillingPeriod:
    """Dates of one invoice: the covered period and the day it is issued."""

    from_date: date
    to_date: date
    issuing_date: date


def _subtract_interval(dt: date, interval: str) -> date:
    """Subtract one billing interval from a date or datetime."""
    if interval == PlanInterval.MONTHLY.value:
        return _add_months(dt, -1)
    elif interval == PlanInterval.YEARLY.value:
        return _add_months(dt, -12)
    raise UnsupportedIntervalError(interval)


def _add_months(dt: date, months: int) -> date:
    """Add months to a date, clamping to last day of month."""
    month = dt.month - 1 + months
    year = dt.year + month // 12
    month = month % 12 + 1
    max_day = cal.monthrange(year, month)[1]
    day = min(dt.day, max_day)
    return dt.replace(year=year, month=month, day=day)


def as_utc_datetime(value: datetime | int | float) -> datetime:
    """Normalize a billing timestamp to an aware UTC datetime.

    Epoch seconds are accepted; naive datetimes are read as UTC (SQLite drops
    tz info on the way back).
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value, UTC)
    if not isinstance(value, datetime):
        raise TypeError(f"Unsupported billing timestamp: {value!r}")
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class SubscriptionDatesService:
    """Service for calculating invoice periods and proration."""

    def resolve_invoice_period(
        self,
        plan: Plan,
        subscription: Subscription,
        timestamp: datetime | int | float,
    ) -> BillingPeriod:
        """Resolve the period an invoice generated at ``timestamp`` covers.

        The period ends the day before ``timestamp`` and starts one plan
        interval before it. Both ends are clamped to the subscription start
        date, so the first invoice of a subscription created mid-period only
        covers the days since it started. Pay-in-advance plans issue the
        invoice on the day of ``timestamp``, other plans on the last day of
        the period.

        Args:
            plan: The subscription's plan (interval and billing timing).
            subscription: The subscription being invoiced.
            timestamp: Billing time, as a datetime or epoch seconds.

        Returns:
            The invoice's from, to and issuing dates.

        Raises:
            UnsupportedIntervalError: The plan interval is not monthly or yearly.
            BillingConfigurationError: The subscription has no start date.
        """
        if subscription.started_at is None:
            raise BillingConfigurationError(f"Subscription {subscription.id} has not started")

        reference = as_utc_datetime(timestamp)
        started_on = as_utc_datetime(subscription.started_at).date()  # type: ignore[arg-type]

        to_date = (reference - timedelta(days=1)).date()
        if to_date < started_on:
            to_date = started_on

        from_date = _subtract_interval(reference.date(), str(plan.interval))
        if from_date < started_on:
            from_date = started_on

        issuing_date = reference.date() if plan.pay_in_advance else to_date

        return BillingPeriod(from_date=from_date, to_date=to_date, issuing_date=issuing_date)

    def nominal_period_start(self, period_end: date, interval: str) -> date:
        """First day of a full, unclamped period whose last day is ``period_end``."""
        return _subtract_interval(period_end + timedelta(days=1), interval)

    def prorate_amount(
        self,
        amount_cents: int,
        period_start: date,
        period_end: date,
        prorate_start: date,
        prorate_end: date,
    ) -> int:
        """Calculate a prorated amount based on days in period.

        Args:
            amount_cents: The full-period amount in cents.
            period_start: Start of the full billing period.
            period_end: End of the full billing period (exclusive).
            prorate_start: Start of the prorated portion.
            prorate_end: End of the prorated portion (exclusive).

        Returns:
            The prorated amount in cents (rounded half-up).
        """
        total_days = (period_end - period_start).days
        if total_days <= 0:
            return 0

        prorate_days = (prorate_end - prorate_start).days
        if prorate_days <= 0:
            return 0

        ratio = Decimal(prorate_days) / Decimal(total_days)
        prorated = Decimal(amount_cents) * ratio
        return int(prorated.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
