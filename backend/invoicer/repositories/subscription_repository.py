from datetime import datetime
from uuid import UUID

from sqlalchemy.orm import Session

from invoicer.models.plan import Plan
from invoicer.models.subscription import Subscription, SubscriptionStatus
from invoicer.schemas.subscription import SubscriptionCreate


class SubscriptionRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, subscription_id: UUID) -> Subscription | None:
        return self.db.query(Subscription).filter(Subscription.id == subscription_id).first()

    def get_by_external_id(self, external_id: str) -> Subscription | None:
        return self.db.query(Subscription).filter(Subscription.external_id == external_id).first()

    def get_active_by_interval(self, interval: str) -> list[Subscription]:
        """Active subscriptions whose plan bills on the given interval."""
        return (
            self.db.query(Subscription)
            .join(Plan, Plan.id == Subscription.plan_id)
            .filter(
                Subscription.status == SubscriptionStatus.ACTIVE.value,
                Plan.interval == interval,
            )
            .order_by(Subscription.created_at.asc())
            .all()
        )

    def create(self, data: SubscriptionCreate) -> Subscription:
        subscription = Subscription(
            external_id=data.external_id,
            customer_id=data.customer_id,
            plan_id=data.plan_id,
            status=SubscriptionStatus.PENDING.value,
        )
        self.db.add(subscription)
        self.db.commit()
        self.db.refresh(subscription)
        return subscription

    def mark_active(self, subscription: Subscription, started_at: datetime) -> Subscription:
        subscription.status = SubscriptionStatus.ACTIVE.value  # type: ignore[assignment]
        subscription.started_at = started_at  # type: ignore[assignment]
        self.db.flush()
        return subscription

    def mark_terminated(self, subscription: Subscription, terminated_at: datetime) -> Subscription:
        subscription.status = SubscriptionStatus.TERMINATED.value  # type: ignore[assignment]
        subscription.terminated_at = terminated_at  # type: ignore[assignment]
        self.db.flush()
        return subscription
