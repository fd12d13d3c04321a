from uuid import UUID

from sqlalchemy.orm import Session

from invoicer.models.customer import Customer
from invoicer.schemas.customer import CustomerCreate


class CustomerRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, customer_id: UUID) -> Customer | None:
        return self.db.query(Customer).filter(Customer.id == customer_id).first()

    def get_by_external_id(self, external_id: str) -> Customer | None:
        return self.db.query(Customer).filter(Customer.external_id == external_id).first()

    def create(self, data: CustomerCreate) -> Customer:
        customer = Customer(**data.model_dump())
        self.db.add(customer)
        self.db.commit()
        self.db.refresh(customer)
        return customer
