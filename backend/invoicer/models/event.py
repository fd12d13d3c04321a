from sqlalchemy import Column, DateTime, Index, String, func
from sqlalchemy.types import JSON

from invoicer.core.database import Base
from invoicer.models.shared import UUIDType, generate_uuid


class Event(Base):
    """A metered usage event, read by the usage aggregation service."""

    __tablename__ = "events"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    transaction_id = Column(String(255), unique=True, index=True, nullable=False)
    external_subscription_id = Column(String(255), nullable=False)
    code = Column(String(255), nullable=False)  # billable metric code
    timestamp = Column(DateTime(timezone=True), nullable=False)
    properties = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index(
            "ix_events_subscription_code_timestamp",
            "external_subscription_id",
            "code",
            "timestamp",
        ),
    )
