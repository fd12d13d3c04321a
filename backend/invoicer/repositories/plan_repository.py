from uuid import UUID

from sqlalchemy.orm import Session

from invoicer.models.charge import Charge
from invoicer.models.plan import Plan
from invoicer.schemas.plan import PlanCreate


class PlanRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, plan_id: UUID) -> Plan | None:
        return self.db.query(Plan).filter(Plan.id == plan_id).first()

    def get_by_code(self, code: str) -> Plan | None:
        return self.db.query(Plan).filter(Plan.code == code).first()

    def get_charges(self, plan_id: UUID) -> list[Charge]:
        return (
            self.db.query(Charge)
            .filter(Charge.plan_id == plan_id)
            .order_by(Charge.position.asc())
            .all()
        )

    def create(self, data: PlanCreate) -> Plan:
        plan = Plan(
            code=data.code,
            name=data.name,
            description=data.description,
            interval=data.interval.value,
            pay_in_advance=data.pay_in_advance,
            amount_cents=data.amount_cents,
            amount_currency=data.amount_currency,
        )
        self.db.add(plan)
        self.db.flush()

        for position, charge_data in enumerate(data.charges):
            self.db.add(
                Charge(
                    plan_id=plan.id,
                    billable_metric_id=charge_data.billable_metric_id,
                    position=position,
                    charge_model=charge_data.charge_model.value,
                    properties=charge_data.properties,
                )
            )

        self.db.commit()
        self.db.refresh(plan)
        return plan
