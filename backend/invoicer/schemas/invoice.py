from datetime import date
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from invoicer.schemas.fee import FeeResponse


class InvoiceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    subscription_id: UUID
    from_date: date
    to_date: date
    issuing_date: date
    amount_cents: int
    vat_amount_cents: int
    total_amount_cents: int
    amount_currency: str | None
    fees: list[FeeResponse] = Field(default_factory=list)
