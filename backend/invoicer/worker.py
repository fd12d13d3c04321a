import logging
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from arq import cron

from invoicer.core.config import settings
from invoicer.core.database import SessionLocal
from invoicer.schemas.invoice import InvoiceResponse
from invoicer.services.billing_service import BillingService
from invoicer.services.invoice_generation import InvoiceGenerationService
from invoicer.tasks import redis_settings

logger = logging.getLogger(__name__)


async def bill_subscriptions_task(ctx: dict[str, Any]) -> int:
    """Background task: invoice every subscription whose billing day is today.

    Runs daily.
    """
    db = SessionLocal()
    try:
        now = datetime.now(UTC)
        service = BillingService(db)
        invoices = service.bill_subscriptions(now)
        if invoices:
            logger.info("Generated %d periodic invoices", len(invoices))
        return len(invoices)
    finally:
        db.close()


async def bill_subscription_task(
    ctx: dict[str, Any], subscription_id: str, timestamp: float | None = None
) -> dict[str, Any]:
    """Background task: invoice one subscription at ``timestamp`` (epoch seconds).

    Args:
        ctx: arq worker context.
        subscription_id: The subscription UUID as a string.
        timestamp: Billing time; defaults to now.

    Returns:
        The invoice, serialized.
    """
    db = SessionLocal()
    try:
        billed_at = timestamp if timestamp is not None else datetime.now(UTC)
        service = InvoiceGenerationService(db)
        invoice = service.create_invoice(UUID(subscription_id), billed_at)
        return InvoiceResponse.model_validate(invoice).model_dump(mode="json")
    finally:
        db.close()


class WorkerSettings:
    functions = [
        bill_subscriptions_task,
        bill_subscription_task,
    ]
    cron_jobs = [
        cron(bill_subscriptions_task, hour=settings.BILLING_CRON_HOUR, minute=0),
    ]
    redis_settings = redis_settings
