"""Service for subscription lifecycle management: activation and termination."""

import logging
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy.orm import Session

from invoicer.models.subscription import Subscription, SubscriptionStatus
from invoicer.repositories.plan_repository import PlanRepository
from invoicer.repositories.subscription_repository import SubscriptionRepository
from invoicer.services.invoice_generation import InvoiceGenerationService
from invoicer.services.subscription_dates import as_utc_datetime

logger = logging.getLogger(__name__)


class SubscriptionLifecycleService:
    """Service for managing subscription lifecycle events."""

    def __init__(self, db: Session):
        self.db = db
        self.subscription_repo = SubscriptionRepository(db)
        self.plan_repo = PlanRepository(db)
        self.invoice_service = InvoiceGenerationService(db)

    def activate(self, subscription_id: UUID, started_at: datetime | None = None) -> Subscription:
        """Start a pending subscription.

        Pay-in-advance plans are billed right away: the activation invoice
        covers the start day only and carries the subscription fee for the
        period ahead.
        """
        subscription = self.subscription_repo.get_by_id(subscription_id)
        if not subscription:
            raise ValueError(f"Subscription {subscription_id} not found")

        if subscription.status != SubscriptionStatus.PENDING.value:
            raise ValueError("Can only activate pending subscriptions")

        plan = self.plan_repo.get_by_id(UUID(str(subscription.plan_id)))
        if not plan:
            raise ValueError(f"Plan {subscription.plan_id} not found")

        started_at = as_utc_datetime(started_at or datetime.now(UTC))
        self.subscription_repo.mark_active(subscription, started_at)

        if plan.pay_in_advance:
            self.invoice_service.create_invoice(subscription_id, started_at, commit=False)

        self.db.commit()
        self.db.refresh(subscription)
        logger.info("Subscription %s activated at %s", subscription_id, started_at)
        return subscription

    def terminate(
        self, subscription_id: UUID, terminated_at: datetime | None = None
    ) -> Subscription:
        """Terminate an active subscription and bill its last period."""
        subscription = self.subscription_repo.get_by_id(subscription_id)
        if not subscription:
            raise ValueError(f"Subscription {subscription_id} not found")

        if subscription.status != SubscriptionStatus.ACTIVE.value:
            raise ValueError("Can only terminate active subscriptions")

        terminated_at = as_utc_datetime(terminated_at or datetime.now(UTC))
        self.subscription_repo.mark_terminated(subscription, terminated_at)
        self.invoice_service.create_invoice(subscription_id, terminated_at, commit=False)

        self.db.commit()
        self.db.refresh(subscription)
        logger.info("Subscription %s terminated at %s", subscription_id, terminated_at)
        return subscription
