from uuid import UUID

from sqlalchemy.orm import Session

from invoicer.models.billable_metric import BillableMetric
from invoicer.schemas.billable_metric import BillableMetricCreate


class BillableMetricRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, metric_id: UUID) -> BillableMetric | None:
        return self.db.query(BillableMetric).filter(BillableMetric.id == metric_id).first()

    def get_by_code(self, code: str) -> BillableMetric | None:
        return self.db.query(BillableMetric).filter(BillableMetric.code == code).first()

    def create(self, data: BillableMetricCreate) -> BillableMetric:
        metric = BillableMetric(
            code=data.code,
            name=data.name,
            description=data.description,
            aggregation_type=data.aggregation_type.value,
            field_name=data.field_name,
        )
        self.db.add(metric)
        self.db.commit()
        self.db.refresh(metric)
        return metric
