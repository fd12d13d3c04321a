from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from invoicer.models.subscription import SubscriptionStatus


class SubscriptionCreate(BaseModel):
    external_id: str = Field(..., min_length=1, max_length=255)
    customer_id: UUID
    plan_id: UUID


class SubscriptionResponse(BaseModel):
    id: UUID
    external_id: str
    customer_id: UUID
    plan_id: UUID
    status: SubscriptionStatus
    started_at: datetime | None
    terminated_at: datetime | None

    model_config = {"from_attributes": True}
