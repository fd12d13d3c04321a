from sqlalchemy import BigInteger, Column, Date, DateTime, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.orm import relationship

from invoicer.core.database import Base
from invoicer.models.shared import UUIDType, generate_uuid


class Invoice(Base):
    __tablename__ = "invoices"
    # One invoice per subscription and billing period; also the idempotency key
    __table_args__ = (
        UniqueConstraint(
            "subscription_id",
            "from_date",
            "to_date",
            "issuing_date",
            name="uq_invoices_subscription_period",
        ),
    )

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    subscription_id = Column(
        UUIDType, ForeignKey("subscriptions.id", ondelete="RESTRICT"), nullable=False, index=True
    )

    # Billing period
    from_date = Column(Date, nullable=False)
    to_date = Column(Date, nullable=False)
    issuing_date = Column(Date, nullable=False)

    # Amounts in currency subunits
    amount_cents = Column(BigInteger, nullable=False, default=0)
    vat_amount_cents = Column(BigInteger, nullable=False, default=0)
    total_amount_cents = Column(BigInteger, nullable=False, default=0)
    amount_currency = Column(String(3), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    subscription = relationship("Subscription")
    fees = relationship("Fee", back_populates="invoice", order_by="Fee.position")
