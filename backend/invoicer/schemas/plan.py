from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from invoicer.models.plan import PlanInterval
from invoicer.schemas.charge import ChargeInput, ChargeOutput


class PlanCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=255)
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    interval: PlanInterval
    pay_in_advance: bool = False
    amount_cents: int = Field(default=0, ge=0)
    amount_currency: str = Field(default="USD", min_length=3, max_length=3)
    charges: list[ChargeInput] = Field(default_factory=list)


class PlanResponse(BaseModel):
    id: UUID
    code: str
    name: str
    description: str | None
    interval: PlanInterval
    pay_in_advance: bool
    amount_cents: int
    amount_currency: str
    charges: list[ChargeOutput] = Field(default_factory=list)
    created_at: datetime

    model_config = {"from_attributes": True}
