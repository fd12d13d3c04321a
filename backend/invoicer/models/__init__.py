from invoicer.models.billable_metric import AggregationType, BillableMetric
from invoicer.models.charge import Charge, ChargeModel
from invoicer.models.customer import Customer
from invoicer.models.event import Event
from invoicer.models.fee import Fee, FeeType
from invoicer.models.invoice import Invoice
from invoicer.models.plan import Plan, PlanInterval
from invoicer.models.subscription import Subscription, SubscriptionStatus

__all__ = [
    "AggregationType",
    "BillableMetric",
    "Charge",
    "ChargeModel",
    "Customer",
    "Event",
    "Fee",
    "FeeType",
    "Invoice",
    "Plan",
    "PlanInterval",
    "Subscription",
    "SubscriptionStatus",
]
