from datetime import date
from uuid import UUID

from sqlalchemy.orm import Session

from invoicer.core.database import dialect_insert
from invoicer.models.invoice import Invoice
from invoicer.models.shared import generate_uuid

_PERIOD_KEY = ("subscription_id", "from_date", "to_date", "issuing_date")


class InvoiceRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, invoice_id: UUID) -> Invoice | None:
        return self.db.query(Invoice).filter(Invoice.id == invoice_id).first()

    def get_by_subscription_id(self, subscription_id: UUID) -> list[Invoice]:
        return (
            self.db.query(Invoice)
            .filter(Invoice.subscription_id == subscription_id)
            .order_by(Invoice.issuing_date.asc())
            .all()
        )

    def get_by_period(
        self,
        subscription_id: UUID,
        from_date: date,
        to_date: date,
        issuing_date: date,
    ) -> Invoice | None:
        return (
            self.db.query(Invoice)
            .filter(
                Invoice.subscription_id == subscription_id,
                Invoice.from_date == from_date,
                Invoice.to_date == to_date,
                Invoice.issuing_date == issuing_date,
            )
            .first()
        )

    def find_or_create(
        self,
        subscription_id: UUID,
        from_date: date,
        to_date: date,
        issuing_date: date,
        currency: str | None = None,
    ) -> Invoice:
        """Return the invoice of a subscription period, inserting it when missing.

        The insert is ``ON CONFLICT DO NOTHING`` on the period unique constraint,
        so concurrent callers for the same period all end up reading the one
        committed row. Does not commit.
        """
        stmt = (
            dialect_insert(self.db, Invoice)
            .values(
                id=generate_uuid(),
                subscription_id=subscription_id,
                from_date=from_date,
                to_date=to_date,
                issuing_date=issuing_date,
                amount_currency=currency,
            )
            .on_conflict_do_nothing(index_elements=list(_PERIOD_KEY))
        )
        self.db.execute(stmt)

        invoice = self.get_by_period(subscription_id, from_date, to_date, issuing_date)
        if invoice is None:
            raise RuntimeError(
                f"Invoice for subscription {subscription_id} "
                f"({from_date}..{to_date}) vanished after insert"
            )
        return invoice

    def update_totals(
        self, invoice: Invoice, amount_cents: int, vat_amount_cents: int, currency: str
    ) -> Invoice:
        invoice.amount_cents = amount_cents  # type: ignore[assignment]
        invoice.vat_amount_cents = vat_amount_cents  # type: ignore[assignment]
        invoice.total_amount_cents = amount_cents + vat_amount_cents  # type: ignore[assignment]
        invoice.amount_currency = currency  # type: ignore[assignment]
        self.db.flush()
        return invoice
