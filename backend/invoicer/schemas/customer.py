from decimal import Decimal

from pydantic import BaseModel, Field


class CustomerCreate(BaseModel):
    external_id: str = Field(..., min_length=1, max_length=255)
    name: str = Field(..., min_length=1, max_length=255)
    email: str | None = Field(default=None, max_length=255)
    vat_rate: Decimal = Field(default=Decimal("0"), ge=0, le=100)
