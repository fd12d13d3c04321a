"""Error types raised by the billing services.

Every error derives from ``ValueError`` so callers that already guard service
calls with ``except ValueError`` keep working.
"""

from typing import Any


class BillingConfigurationError(ValueError):
    """A plan, charge or subscription is configured in a way billing cannot handle.

    Not retryable: the same input fails the same way until the configuration
    is fixed.
    """


class UnsupportedIntervalError(BillingConfigurationError):
    def __init__(self, interval: str):
        self.interval = interval
        super().__init__(f"Unsupported plan interval: {interval}")


class UnsupportedChargeModelError(BillingConfigurationError):
    def __init__(self, charge_model: str):
        self.charge_model = charge_model
        super().__init__(f"Unsupported charge model: {charge_model}")


class InvalidChargeRangesError(BillingConfigurationError):
    """Pricing ranges are missing, malformed, overlapping or not terminated."""


class InvoiceCreationError(ValueError):
    """Invoice generation was aborted; nothing was committed.

    ``record`` is the model instance (fee, charge, invoice) that failed, when
    one is known.
    """

    def __init__(self, message: str, record: Any | None = None):
        self.record = record
        super().__init__(message)


class InvalidEventPropertyError(ValueError):
    """A usage event carries a non-numeric value for a summed or maxed metric field."""

    def __init__(self, metric_code: str, transaction_id: Any, field_name: str, value: Any):
        self.metric_code = metric_code
        self.transaction_id = transaction_id
        super().__init__(
            f"Event {transaction_id} has non-numeric '{field_name}' ({value!r}) "
            f"for metric '{metric_code}'"
        )
