"""Fee schemas."""

from decimal import Decimal
from typing import Self
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from invoicer.models.fee import FeeType


class FeeCreate(BaseModel):
    """Schema for creating a fee."""

    invoice_id: UUID
    subscription_id: UUID
    charge_id: UUID | None = None
    fee_type: FeeType = FeeType.CHARGE
    amount_cents: int = Field(default=0, ge=0)
    amount_currency: str = Field(..., min_length=3, max_length=3)
    vat_rate: Decimal = Decimal("0")
    vat_amount_cents: int = Field(default=0, ge=0)
    units: Decimal = Decimal("0")
    events_count: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def validate_charge_id(self) -> Self:
        """Charge fees name their charge; the subscription fee has none."""
        if self.fee_type == FeeType.CHARGE and self.charge_id is None:
            raise ValueError("charge_id is required for charge fees")
        if self.fee_type == FeeType.SUBSCRIPTION and self.charge_id is not None:
            raise ValueError("Subscription fees cannot reference a charge")
        return self


class FeeResponse(BaseModel):
    """Schema for fee response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    charge_id: UUID | None = None
    fee_type: FeeType
    amount_cents: int
    amount_currency: str
    vat_rate: Decimal
    vat_amount_cents: int
    units: Decimal
    events_count: int
