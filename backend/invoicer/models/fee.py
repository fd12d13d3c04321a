"""Fee model: one priced line of an invoice."""

from enum import Enum

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.orm import relationship

from invoicer.core.database import Base
from invoicer.models.shared import UUIDType, generate_uuid


class FeeType(str, Enum):
    """Fee type enum."""

    CHARGE = "charge"
    SUBSCRIPTION = "subscription"


class Fee(Base):
    """Fee model - created with its invoice and never updated afterwards."""

    __tablename__ = "fees"
    # At most one fee per charge and one subscription fee per invoice
    __table_args__ = (
        UniqueConstraint("invoice_id", "charge_id", name="uq_fees_invoice_charge"),
        Index(
            "uq_fees_invoice_subscription_fee",
            "invoice_id",
            unique=True,
            sqlite_where=text("fee_type = 'subscription'"),
            postgresql_where=text("fee_type = 'subscription'"),
        ),
    )

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    invoice_id = Column(
        UUIDType, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True
    )
    subscription_id = Column(
        UUIDType, ForeignKey("subscriptions.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    charge_id = Column(
        UUIDType, ForeignKey("charges.id", ondelete="RESTRICT"), nullable=True, index=True
    )

    fee_type = Column(String(20), nullable=False, default=FeeType.CHARGE.value, index=True)
    # Creation order inside the invoice
    position = Column(Integer, nullable=False, default=0)

    # Amounts in currency subunits
    amount_cents = Column(BigInteger, nullable=False, default=0)
    amount_currency = Column(String(3), nullable=False)
    vat_rate = Column(Numeric(5, 2), nullable=False, default=0)
    vat_amount_cents = Column(BigInteger, nullable=False, default=0)

    # Usage details
    units = Column(Numeric(20, 6), nullable=False, default=0)
    events_count = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    invoice = relationship("Invoice", back_populates="fees")
    charge = relationship("Charge")
