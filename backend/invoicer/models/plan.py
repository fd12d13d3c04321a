from enum import Enum

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text, func
from sqlalchemy.orm import relationship

from invoicer.core.database import Base
from invoicer.models.shared import UUIDType, generate_uuid


class PlanInterval(str, Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"


class Plan(Base):
    __tablename__ = "plans"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    code = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    interval = Column(String(20), nullable=False)
    pay_in_advance = Column(Boolean, nullable=False, default=False)
    amount_cents = Column(Integer, nullable=False, default=0)
    amount_currency = Column(String(3), nullable=False, default="USD")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    charges = relationship(
        "Charge",
        back_populates="plan",
        order_by="Charge.position",
        cascade="all, delete-orphan",
    )

    @property
    def pay_in_arrear(self) -> bool:
        return not self.pay_in_advance
