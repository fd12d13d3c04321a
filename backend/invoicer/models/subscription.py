from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, String, func
from sqlalchemy.orm import relationship

from invoicer.core.database import Base
from invoicer.models.shared import UUIDType, generate_uuid


class SubscriptionStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    TERMINATED = "terminated"


class Subscription(Base):
    __tablename__ = "subscriptions"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    external_id = Column(String(255), unique=True, index=True, nullable=False)
    customer_id = Column(
        UUIDType,
        ForeignKey("customers.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    plan_id = Column(
        UUIDType,
        ForeignKey("plans.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    status = Column(
        String(20), nullable=False, default=SubscriptionStatus.PENDING.value, index=True
    )
    started_at = Column(DateTime(timezone=True), nullable=True)
    terminated_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    customer = relationship("Customer")
    plan = relationship("Plan")

    @property
    def active(self) -> bool:
        return self.status == SubscriptionStatus.ACTIVE.value

    @property
    def terminated(self) -> bool:
        return self.status == SubscriptionStatus.TERMINATED.value
