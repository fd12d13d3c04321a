"""Fee creation for invoices: the subscription fee and one fee per charge."""

import logging
from datetime import timedelta
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from invoicer.core.config import settings
from invoicer.core.errors import InvoiceCreationError
from invoicer.models.charge import Charge
from invoicer.models.fee import Fee, FeeType
from invoicer.models.invoice import Invoice
from invoicer.models.subscription import Subscription
from invoicer.repositories.customer_repository import CustomerRepository
from invoicer.repositories.fee_repository import FeeRepository
from invoicer.repositories.plan_repository import PlanRepository
from invoicer.schemas.fee import FeeCreate
from invoicer.services.charge_models.factory import get_charge_calculator
from invoicer.services.subscription_dates import SubscriptionDatesService
from invoicer.services.usage_aggregation import AggregationResult

logger = logging.getLogger(__name__)

_CENTS = Decimal(100)


def to_cents(amount: Decimal) -> int:
    """Convert an amount in currency units to whole cents, rounding half up."""
    return int((amount * _CENTS).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class FeeService:
    """Creates the fees of an invoice inside the caller's transaction.

    Fees are flushed, never committed: the invoice generation service owns the
    transaction. An invoice already holding a fee for the same charge (or its
    subscription fee) gets that fee back instead of a duplicate.
    """

    def __init__(self, db: Session):
        self.db = db
        self.fee_repo = FeeRepository(db)
        self.plan_repo = PlanRepository(db)
        self.customer_repo = CustomerRepository(db)
        self.dates_service = SubscriptionDatesService()

    def create_subscription_fee(self, invoice: Invoice, subscription: Subscription) -> Fee:
        """Create the plan's recurring fee on an invoice.

        Pay-in-arrear plans are prorated by days on a first, partial period;
        pay-in-advance plans bill the full amount.
        """
        invoice_id = UUID(str(invoice.id))
        existing = self.fee_repo.get_subscription_fee(invoice_id)
        if existing is not None:
            return existing

        plan = self.plan_repo.get_by_id(UUID(str(subscription.plan_id)))
        if not plan:
            raise InvoiceCreationError(f"Plan {subscription.plan_id} not found", subscription)

        amount_cents = int(plan.amount_cents)
        if not plan.pay_in_advance:
            period_end = invoice.to_date
            nominal_start = self.dates_service.nominal_period_start(
                period_end, str(plan.interval)  # type: ignore[arg-type]
            )
            if invoice.from_date > nominal_start:
                exclusive_end = period_end + timedelta(days=1)  # type: ignore[operator]
                amount_cents = self.dates_service.prorate_amount(
                    amount_cents,
                    nominal_start,
                    exclusive_end,
                    invoice.from_date,  # type: ignore[arg-type]
                    exclusive_end,
                )

        return self._create_fee(
            invoice=invoice,
            subscription=subscription,
            charge=None,
            fee_type=FeeType.SUBSCRIPTION,
            amount_cents=amount_cents,
            currency=str(plan.amount_currency),
            units=Decimal(1),
            events_count=0,
        )

    def create_charge_fee(
        self,
        invoice: Invoice,
        charge: Charge,
        subscription: Subscription,
        aggregation: AggregationResult,
    ) -> Fee:
        """Price a charge's usage through its charge model and record the fee."""
        invoice_id = UUID(str(invoice.id))
        existing = self.fee_repo.get_charge_fee(invoice_id, UUID(str(charge.id)))
        if existing is not None:
            return existing

        calculator = get_charge_calculator(str(charge.charge_model))
        properties = dict(charge.properties) if charge.properties else {}
        amount = calculator(aggregation.units, properties, aggregation.count)

        plan = self.plan_repo.get_by_id(UUID(str(charge.plan_id)))
        currency = str(plan.amount_currency) if plan else settings.DEFAULT_CURRENCY

        return self._create_fee(
            invoice=invoice,
            subscription=subscription,
            charge=charge,
            fee_type=FeeType.CHARGE,
            amount_cents=to_cents(amount),
            currency=currency,
            units=aggregation.units,
            events_count=aggregation.count,
        )

    def _create_fee(
        self,
        invoice: Invoice,
        subscription: Subscription,
        charge: Charge | None,
        fee_type: FeeType,
        amount_cents: int,
        currency: str,
        units: Decimal,
        events_count: int,
    ) -> Fee:
        customer = self.customer_repo.get_by_id(UUID(str(subscription.customer_id)))
        vat_rate = Decimal(str(customer.vat_rate)) if customer else Decimal(0)
        vat_amount_cents = int(
            (Decimal(amount_cents) * vat_rate / _CENTS).quantize(
                Decimal("1"), rounding=ROUND_HALF_UP
            )
        )

        record = charge if charge is not None else subscription
        try:
            fee = self.fee_repo.create(
                FeeCreate(
                    invoice_id=UUID(str(invoice.id)),
                    subscription_id=UUID(str(subscription.id)),
                    charge_id=UUID(str(charge.id)) if charge is not None else None,
                    fee_type=fee_type,
                    amount_cents=amount_cents,
                    amount_currency=currency,
                    vat_rate=vat_rate,
                    vat_amount_cents=vat_amount_cents,
                    units=units,
                    events_count=events_count,
                )
            )
        except (ValueError, SQLAlchemyError) as exc:
            raise InvoiceCreationError(
                f"Could not create {fee_type.value} fee on invoice {invoice.id}: {exc}", record
            ) from exc

        logger.debug(
            "Created %s fee of %d %s on invoice %s",
            fee_type.value,
            amount_cents,
            currency,
            invoice.id,
        )
        return fee
