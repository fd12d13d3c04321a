import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from invoicer.core.config import settings
from invoicer.core.errors import InvoiceCreationError
from invoicer.models.invoice import Invoice
from invoicer.models.plan import Plan
from invoicer.models.subscription import Subscription
from invoicer.repositories.fee_repository import FeeRepository
from invoicer.repositories.invoice_repository import InvoiceRepository
from invoicer.repositories.plan_repository import PlanRepository
from invoicer.repositories.subscription_repository import SubscriptionRepository
from invoicer.services.fee_service import FeeService
from invoicer.services.subscription_dates import SubscriptionDatesService
from invoicer.services.usage_aggregation import UsageAggregationService

logger = logging.getLogger(__name__)


class InvoiceGenerationService:
    """Service for generating a subscription's invoice for one billing period."""

    def __init__(self, db: Session):
        self.db = db
        self.subscription_repo = SubscriptionRepository(db)
        self.plan_repo = PlanRepository(db)
        self.invoice_repo = InvoiceRepository(db)
        self.fee_repo = FeeRepository(db)
        self.dates_service = SubscriptionDatesService()
        self.usage_service = UsageAggregationService(db)
        self.fee_service = FeeService(db)

    def create_invoice(
        self,
        subscription_id: UUID,
        timestamp: datetime | int | float,
        commit: bool = True,
    ) -> Invoice:
        """Generate (or fetch) the invoice of a subscription at ``timestamp``.

        The invoice is keyed by subscription and resolved period, so calling
        this again for the same subscription and timestamp returns the same
        invoice with the same fees and totals.

        Everything happens in one transaction: on any failure the session is
        rolled back and no invoice or fee is left behind. With
        ``commit=False`` the caller owns the transaction and must commit.

        Args:
            subscription_id: The subscription to bill
            timestamp: Billing time, as a datetime or epoch seconds

        Returns:
            The invoice, with fees and totals persisted
        """
        subscription = self.subscription_repo.get_by_id(subscription_id)
        if not subscription:
            raise ValueError(f"Subscription {subscription_id} not found")

        plan = self.plan_repo.get_by_id(UUID(str(subscription.plan_id)))
        if not plan:
            raise ValueError(f"Plan {subscription.plan_id} not found")

        try:
            invoice = self._build_invoice(subscription, plan, timestamp)
            if commit:
                self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise InvoiceCreationError(
                f"Could not create invoice for subscription {subscription_id}: {exc}",
                subscription,
            ) from exc
        except Exception:
            self.db.rollback()
            raise

        if commit:
            self.db.refresh(invoice)
        logger.info(
            "Invoice %s for subscription %s (%s..%s, issued %s): %d %s",
            invoice.id,
            subscription_id,
            invoice.from_date,
            invoice.to_date,
            invoice.issuing_date,
            invoice.total_amount_cents,
            invoice.amount_currency,
        )
        return invoice

    def should_create_subscription_fee(self, subscription: Subscription, plan: Plan) -> bool:
        """Whether the plan's recurring fee belongs on this invoice.

        A terminated pay-in-arrear subscription still owes the fee of its last
        period, which is only ever billed at the end of that period.
        """
        if subscription.active:
            return True
        return bool(subscription.terminated and plan.pay_in_arrear)

    def _build_invoice(
        self,
        subscription: Subscription,
        plan: Plan,
        timestamp: datetime | int | float,
    ) -> Invoice:
        period = self.dates_service.resolve_invoice_period(plan, subscription, timestamp)
        currency = str(plan.amount_currency or settings.DEFAULT_CURRENCY)

        invoice = self.invoice_repo.find_or_create(
            subscription_id=UUID(str(subscription.id)),
            from_date=period.from_date,
            to_date=period.to_date,
            issuing_date=period.issuing_date,
            currency=currency,
        )

        if self.should_create_subscription_fee(subscription, plan):
            self.fee_service.create_subscription_fee(invoice, subscription)

        for charge in self.plan_repo.get_charges(UUID(str(plan.id))):
            aggregation = self.usage_service.aggregate(
                charge, subscription, period.from_date, period.to_date
            )
            self.fee_service.create_charge_fee(invoice, charge, subscription, aggregation)

        amount_cents, vat_amount_cents = self.fee_repo.sum_amounts(UUID(str(invoice.id)))
        return self.invoice_repo.update_totals(invoice, amount_cents, vat_amount_cents, currency)
