from invoicer.repositories.billable_metric_repository import BillableMetricRepository
from invoicer.repositories.customer_repository import CustomerRepository
from invoicer.repositories.fee_repository import FeeRepository
from invoicer.repositories.invoice_repository import InvoiceRepository
from invoicer.repositories.plan_repository import PlanRepository
from invoicer.repositories.subscription_repository import SubscriptionRepository

__all__ = [
    "BillableMetricRepository",
    "CustomerRepository",
    "FeeRepository",
    "InvoiceRepository",
    "PlanRepository",
    "SubscriptionRepository",
]
