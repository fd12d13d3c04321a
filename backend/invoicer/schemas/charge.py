from datetime import datetime
from decimal import Decimal
from typing import Any, Self
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from invoicer.models.charge import ChargeModel
from invoicer.services.charge_models import graduated_percentage


class GraduatedPercentageRange(BaseModel):
    """One tier of a graduated percentage charge."""

    from_value: int = Field(..., ge=0)
    to_value: int | None = Field(default=None, ge=0)
    flat_amount: Decimal = Decimal("0")
    fixed_amount: Decimal = Decimal("0")
    rate: Decimal = Field(..., ge=0)


class ChargeInput(BaseModel):
    """Charge input when creating a plan."""

    billable_metric_id: UUID
    charge_model: ChargeModel
    properties: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def validate_properties(self) -> Self:
        """Validate pricing ranges and store them in their canonical JSON form."""
        if self.charge_model == ChargeModel.GRADUATED_PERCENTAGE:
            raw = self.properties.get(graduated_percentage.RANGES_KEY)
            if not isinstance(raw, list):
                msg = f"'{graduated_percentage.RANGES_KEY}' is required"
                raise ValueError(msg)
            ranges = [GraduatedPercentageRange.model_validate(r) for r in raw]
            dumped = [r.model_dump(mode="json") for r in ranges]
            graduated_percentage.validate_ranges(dumped)
            self.properties = {**self.properties, graduated_percentage.RANGES_KEY: dumped}
        return self


class ChargeOutput(BaseModel):
    """Charge output in plan responses."""

    id: UUID
    plan_id: UUID
    billable_metric_id: UUID
    charge_model: ChargeModel
    properties: dict[str, Any]
    created_at: datetime

    model_config = {"from_attributes": True}
