from typing import Self

from pydantic import BaseModel, Field, model_validator

from invoicer.models.billable_metric import AggregationType


class BillableMetricCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=255)
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    aggregation_type: AggregationType
    field_name: str | None = Field(default=None, max_length=255)

    @model_validator(mode="after")
    def validate_field_name_required(self) -> Self:
        """Validate field_name is provided for aggregation types that need it."""
        if self.aggregation_type != AggregationType.COUNT and not self.field_name:
            msg = f"field_name is required for aggregation_type '{self.aggregation_type.value}'"
            raise ValueError(msg)
        return self
