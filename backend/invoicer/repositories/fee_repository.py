"""Fee repository for data access."""

from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from invoicer.core.database import dialect_insert
from invoicer.models.fee import Fee, FeeType
from invoicer.models.shared import generate_uuid
from invoicer.schemas.fee import FeeCreate


class FeeRepository:
    """Repository for Fee model."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_invoice_id(self, invoice_id: UUID) -> list[Fee]:
        """Get all fees for an invoice, in creation order."""
        return (
            self.db.query(Fee)
            .filter(Fee.invoice_id == invoice_id)
            .order_by(Fee.position.asc())
            .all()
        )

    def get_subscription_fee(self, invoice_id: UUID) -> Fee | None:
        return (
            self.db.query(Fee)
            .filter(Fee.invoice_id == invoice_id, Fee.fee_type == FeeType.SUBSCRIPTION.value)
            .first()
        )

    def get_charge_fee(self, invoice_id: UUID, charge_id: UUID) -> Fee | None:
        return (
            self.db.query(Fee)
            .filter(Fee.invoice_id == invoice_id, Fee.charge_id == charge_id)
            .first()
        )

    def sum_amounts(self, invoice_id: UUID) -> tuple[int, int]:
        """Return (amount_cents, vat_amount_cents) summed over an invoice's fees."""
        amount, vat = (
            self.db.query(
                func.coalesce(func.sum(Fee.amount_cents), 0),
                func.coalesce(func.sum(Fee.vat_amount_cents), 0),
            )
            .filter(Fee.invoice_id == invoice_id)
            .one()
        )
        return int(amount), int(vat)

    def create(self, data: FeeCreate) -> Fee:
        """Insert a fee in the current transaction without committing it.

        The insert is ``ON CONFLICT DO NOTHING`` on the per-invoice unique
        indexes: when a concurrent run already billed this charge (or the
        subscription fee) on the invoice, its fee is returned instead.
        """
        position = (
            self.db.query(func.count(Fee.id)).filter(Fee.invoice_id == data.invoice_id).scalar()
            or 0
        )
        stmt = (
            dialect_insert(self.db, Fee)
            .values(
                id=generate_uuid(),
                invoice_id=data.invoice_id,
                subscription_id=data.subscription_id,
                charge_id=data.charge_id,
                fee_type=data.fee_type.value,
                position=position,
                amount_cents=data.amount_cents,
                amount_currency=data.amount_currency,
                vat_rate=data.vat_rate,
                vat_amount_cents=data.vat_amount_cents,
                units=data.units,
                events_count=data.events_count,
            )
            .on_conflict_do_nothing()
        )
        self.db.execute(stmt)

        if data.charge_id is None:
            fee = self.get_subscription_fee(data.invoice_id)
        else:
            fee = self.get_charge_fee(data.invoice_id, data.charge_id)
        if fee is None:
            raise RuntimeError(f"Fee on invoice {data.invoice_id} vanished after insert")
        return fee
