"""Periodic billing: find the subscriptions due on a day and invoice them."""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy.orm import Session

from invoicer.models.invoice import Invoice
from invoicer.models.plan import PlanInterval
from invoicer.models.subscription import Subscription
from invoicer.repositories.subscription_repository import SubscriptionRepository
from invoicer.services.invoice_generation import InvoiceGenerationService
from invoicer.services.subscription_dates import as_utc_datetime

logger = logging.getLogger(__name__)


class BillingService:
    """Bills active subscriptions on calendar boundaries.

    Monthly plans are billed on the first day of every month, yearly plans on
    January 1st.
    """

    def __init__(self, db: Session):
        self.db = db
        self.subscription_repo = SubscriptionRepository(db)
        self.invoice_service = InvoiceGenerationService(db)

    def billable_subscriptions(self, timestamp: datetime | int | float) -> list[Subscription]:
        reference = as_utc_datetime(timestamp)
        if reference.day != 1:
            return []

        subscriptions = self.subscription_repo.get_active_by_interval(PlanInterval.MONTHLY.value)
        if reference.month == 1:
            subscriptions += self.subscription_repo.get_active_by_interval(
                PlanInterval.YEARLY.value
            )
        return subscriptions

    def bill_subscriptions(self, timestamp: datetime | int | float) -> list[Invoice]:
        """Invoice every subscription due at ``timestamp``.

        Each subscription is billed in its own transaction. Any error billing one
        is logged and the run moves on to the next.
        """
        invoices: list[Invoice] = []
        subscription_ids = [UUID(str(s.id)) for s in self.billable_subscriptions(timestamp)]
        for subscription_id in subscription_ids:
            try:
                invoices.append(self.invoice_service.create_invoice(subscription_id, timestamp))
            except Exception:
                logger.exception("Failed to bill subscription %s", subscription_id)

        if invoices:
            logger.info("Billed %d subscriptions", len(invoices))
        return invoices
