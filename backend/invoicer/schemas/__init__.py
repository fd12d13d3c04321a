from invoicer.schemas.billable_metric import BillableMetricCreate
from invoicer.schemas.charge import ChargeInput, ChargeOutput, GraduatedPercentageRange
from invoicer.schemas.customer import CustomerCreate
from invoicer.schemas.fee import FeeCreate, FeeResponse
from invoicer.schemas.invoice import InvoiceResponse
from invoicer.schemas.plan import PlanCreate, PlanResponse
from invoicer.schemas.subscription import SubscriptionCreate, SubscriptionResponse

__all__ = [
    "BillableMetricCreate",
    "ChargeInput",
    "ChargeOutput",
    "CustomerCreate",
    "FeeCreate",
    "FeeResponse",
    "GraduatedPercentageRange",
    "InvoiceResponse",
    "PlanCreate",
    "PlanResponse",
    "SubscriptionCreate",
    "SubscriptionResponse",
]
