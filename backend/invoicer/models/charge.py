from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import relationship
from sqlalchemy.types import JSON

from invoicer.core.database import Base
from invoicer.models.shared import UUIDType, generate_uuid


class ChargeModel(str, Enum):
    GRADUATED_PERCENTAGE = "graduated_percentage"  # Tiered % of usage


class Charge(Base):
    __tablename__ = "charges"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    plan_id = Column(
        UUIDType, ForeignKey("plans.id", ondelete="CASCADE"), nullable=False, index=True
    )
    billable_metric_id = Column(
        UUIDType,
        ForeignKey("billable_metrics.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    # Order of the charge inside its plan; fees are created in this order
    position = Column(Integer, nullable=False, default=0)
    charge_model = Column(String(30), nullable=False)
    properties = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    plan = relationship("Plan", back_populates="charges")
    billable_metric = relationship("BillableMetric")
