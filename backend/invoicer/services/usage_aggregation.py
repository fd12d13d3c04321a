from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from decimal import Decimal, InvalidOperation
from uuid import UUID

from sqlalchemy.orm import Session

from invoicer.core.errors import InvalidEventPropertyError
from invoicer.models.billable_metric import AggregationType, BillableMetric
from invoicer.models.charge import Charge
from invoicer.models.event import Event
from invoicer.models.subscription import Subscription
from invoicer.repositories.billable_metric_repository import BillableMetricRepository


@dataclass(frozen=True)
class AggregationResult:
    """Usage of one charge over a period: aggregated units and event count."""

    units: Decimal
    count: int


class UsageAggregationService:
    """Service for aggregating events into usage data by billing period."""

    def __init__(self, db: Session):
        self.db = db
        self.metric_repo = BillableMetricRepository(db)

    def aggregate(
        self,
        charge: Charge,
        subscription: Subscription,
        from_date: date,
        to_date: date,
    ) -> AggregationResult:
        """Aggregate a charge's usage for a subscription over whole days.

        Args:
            charge: Charge whose billable metric is aggregated.
            subscription: Subscription the events were sent for.
            from_date: First day of the period (inclusive).
            to_date: Last day of the period (inclusive).

        Returns:
            AggregationResult with aggregated units and events count.
        """
        metric = self.metric_repo.get_by_id(UUID(str(charge.billable_metric_id)))
        if not metric:
            raise ValueError(f"Billable metric {charge.billable_metric_id} not found")

        from_timestamp = datetime.combine(from_date, time.min, tzinfo=UTC)
        to_timestamp = datetime.combine(to_date + timedelta(days=1), time.min, tzinfo=UTC)

        events = (
            self.db.query(Event)
            .filter(
                Event.external_subscription_id == subscription.external_id,
                Event.code == metric.code,
                Event.timestamp >= from_timestamp,
                Event.timestamp < to_timestamp,
            )
            .all()
        )

        return self._compute_aggregation(metric, events)

    def _compute_aggregation(self, metric: BillableMetric, events: list[Event]) -> AggregationResult:
        """Compute the aggregation value based on the metric's aggregation type."""
        aggregation_type = AggregationType(metric.aggregation_type)
        events_count = len(events)

        if aggregation_type == AggregationType.COUNT:
            return AggregationResult(units=Decimal(events_count), count=events_count)

        if not metric.field_name:
            raise ValueError(
                f"Metric '{metric.code}' requires field_name for "
                f"{aggregation_type.value.upper()} aggregation"
            )
        field_name = str(metric.field_name)

        if aggregation_type == AggregationType.SUM:
            total = Decimal(0)
            for event in events:
                total += _event_value(metric, event, field_name)
            return AggregationResult(units=total, count=events_count)

        elif aggregation_type == AggregationType.MAX:
            max_val = Decimal(0)
            for event in events:
                max_val = max(max_val, _event_value(metric, event, field_name))
            return AggregationResult(units=max_val, count=events_count)

        elif aggregation_type == AggregationType.UNIQUE_COUNT:
            unique_values = set()
            for event in events:
                value = event.properties.get(field_name)
                if value is not None:
                    unique_values.add(value)
            return AggregationResult(units=Decimal(len(unique_values)), count=events_count)

        raise ValueError(f"Unknown aggregation type: {aggregation_type}")


def _event_value(metric: BillableMetric, event: Event, field_name: str) -> Decimal:
    """Numeric value of an event property; missing properties count as 0."""
    raw = event.properties.get(field_name, 0)
    if isinstance(raw, bool):
        raise InvalidEventPropertyError(metric.code, event.transaction_id, field_name, raw)
    try:
        value = Decimal(str(raw))
    except InvalidOperation:
        value = Decimal("NaN")
    if not value.is_finite():
        raise InvalidEventPropertyError(metric.code, event.transaction_id, field_name, raw)
    return value
