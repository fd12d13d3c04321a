"""Invoice and fee repository tests."""

from datetime import UTC, date, datetime
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError

from invoicer.models.billable_metric import BillableMetric
from invoicer.models.charge import Charge, ChargeModel
from invoicer.models.customer import Customer
from invoicer.models.fee import Fee, FeeType
from invoicer.models.invoice import Invoice
from invoicer.models.plan import Plan, PlanInterval
from invoicer.models.subscription import Subscription, SubscriptionStatus
from invoicer.repositories.fee_repository import FeeRepository
from invoicer.repositories.invoice_repository import InvoiceRepository
from invoicer.schemas.fee import FeeCreate
from invoicer.schemas.invoice import InvoiceResponse


@pytest.fixture
def subscription(db_session):
    customer = Customer(external_id="repo_cust", name="Repo Customer")
    plan = Plan(code="repo_plan", name="Repo Plan", interval=PlanInterval.MONTHLY.value)
    db_session.add_all([customer, plan])
    db_session.flush()
    sub = Subscription(
        external_id="repo_sub",
        customer_id=customer.id,
        plan_id=plan.id,
        status=SubscriptionStatus.ACTIVE.value,
        started_at=datetime(2024, 1, 1, tzinfo=UTC),
    )
    db_session.add(sub)
    db_session.commit()
    db_session.refresh(sub)
    return sub


def _find_or_create(db_session, subscription, issuing_date=date(2024, 1, 31)):
    return InvoiceRepository(db_session).find_or_create(
        subscription_id=subscription.id,
        from_date=date(2024, 1, 1),
        to_date=date(2024, 1, 31),
        issuing_date=issuing_date,
        currency="USD",
    )


class TestInvoiceRepository:
    def test_find_or_create_inserts(self, db_session, subscription):
        invoice = _find_or_create(db_session, subscription)
        db_session.commit()

        assert invoice.subscription_id == subscription.id
        assert invoice.amount_cents == 0
        assert invoice.total_amount_cents == 0
        assert invoice.amount_currency == "USD"

    def test_find_or_create_same_period_returns_same_row(self, db_session, subscription):
        first = _find_or_create(db_session, subscription)
        db_session.commit()
        first_id = first.id

        second = _find_or_create(db_session, subscription)

        assert second.id == first_id
        assert db_session.query(Invoice).count() == 1

    def test_issuing_date_is_part_of_the_key(self, db_session, subscription):
        first = _find_or_create(db_session, subscription)
        second = _find_or_create(db_session, subscription, issuing_date=date(2024, 2, 1))

        assert first.id != second.id
        assert len(InvoiceRepository(db_session).get_by_subscription_id(subscription.id)) == 2

    def test_not_committed(self, db_session, subscription):
        _find_or_create(db_session, subscription)
        db_session.rollback()
        assert db_session.query(Invoice).count() == 0

    def test_update_totals(self, db_session, subscription):
        repo = InvoiceRepository(db_session)
        invoice = repo.update_totals(_find_or_create(db_session, subscription), 1000, 200, "USD")
        assert invoice.total_amount_cents == 1200

    def test_get_missing(self, db_session):
        assert InvoiceRepository(db_session).get_by_id(uuid4()) is None


@pytest.fixture
def charge(db_session, subscription):
    metric = BillableMetric(code="repo_calls", name="Calls", aggregation_type="count")
    db_session.add(metric)
    db_session.flush()
    c = Charge(
        plan_id=subscription.plan_id,
        billable_metric_id=metric.id,
        charge_model=ChargeModel.GRADUATED_PERCENTAGE.value,
        properties={},
    )
    db_session.add(c)
    db_session.commit()
    db_session.refresh(c)
    return c


def _fee(invoice, subscription, amount_cents, vat_amount_cents, charge=None):
    return FeeCreate(
        invoice_id=invoice.id,
        subscription_id=subscription.id,
        charge_id=charge.id if charge is not None else None,
        fee_type=FeeType.CHARGE if charge is not None else FeeType.SUBSCRIPTION,
        amount_cents=amount_cents,
        amount_currency="USD",
        vat_rate=Decimal("20"),
        vat_amount_cents=vat_amount_cents,
    )


class TestFeeRepository:
    def test_sum_amounts(self, db_session, subscription, charge):
        invoice = _find_or_create(db_session, subscription)
        repo = FeeRepository(db_session)
        repo.create(_fee(invoice, subscription, 1000, 200))
        repo.create(_fee(invoice, subscription, 68, 14, charge))

        assert repo.sum_amounts(invoice.id) == (1068, 214)
        assert repo.get_subscription_fee(invoice.id).amount_cents == 1000
        assert repo.get_charge_fee(invoice.id, charge.id).amount_cents == 68

    def test_sum_amounts_without_fees(self, db_session, subscription):
        invoice = _find_or_create(db_session, subscription)
        assert FeeRepository(db_session).sum_amounts(invoice.id) == (0, 0)

    def test_second_charge_fee_returns_first(self, db_session, subscription, charge):
        """A charge already billed on the invoice keeps its fee and amount."""
        invoice = _find_or_create(db_session, subscription)
        repo = FeeRepository(db_session)
        first = repo.create(_fee(invoice, subscription, 68, 14, charge))
        second = repo.create(_fee(invoice, subscription, 999, 0, charge))

        assert second.id == first.id
        assert second.amount_cents == 68
        assert db_session.query(Fee).count() == 1

    def test_second_subscription_fee_returns_first(self, db_session, subscription):
        invoice = _find_or_create(db_session, subscription)
        repo = FeeRepository(db_session)
        first = repo.create(_fee(invoice, subscription, 1000, 0))
        second = repo.create(_fee(invoice, subscription, 500, 0))

        assert second.id == first.id
        assert repo.sum_amounts(invoice.id) == (1000, 0)

    def test_unique_charge_fee_per_invoice(self, db_session, subscription, charge):
        """The database itself rejects a second fee for the same charge."""
        invoice = _find_or_create(db_session, subscription)
        FeeRepository(db_session).create(_fee(invoice, subscription, 68, 0, charge))
        db_session.add(
            Fee(
                invoice_id=invoice.id,
                subscription_id=subscription.id,
                charge_id=charge.id,
                fee_type=FeeType.CHARGE.value,
                amount_cents=1,
                amount_currency="USD",
            )
        )
        with pytest.raises(IntegrityError):
            db_session.flush()
        db_session.rollback()

    def test_unique_subscription_fee_per_invoice(self, db_session, subscription):
        invoice = _find_or_create(db_session, subscription)
        FeeRepository(db_session).create(_fee(invoice, subscription, 1000, 0))
        db_session.add(
            Fee(
                invoice_id=invoice.id,
                subscription_id=subscription.id,
                fee_type=FeeType.SUBSCRIPTION.value,
                amount_cents=1,
                amount_currency="USD",
            )
        )
        with pytest.raises(IntegrityError):
            db_session.flush()
        db_session.rollback()

    def test_invoice_response_serializes_fees(self, db_session, subscription, charge):
        invoice = _find_or_create(db_session, subscription)
        FeeRepository(db_session).create(_fee(invoice, subscription, 1000, 200, charge))
        InvoiceRepository(db_session).update_totals(invoice, 1000, 200, "USD")
        db_session.commit()
        db_session.refresh(invoice)

        data = InvoiceResponse.model_validate(invoice).model_dump(mode="json")

        assert data["total_amount_cents"] == 1200
        assert data["from_date"] == "2024-01-01"
        assert len(data["fees"]) == 1
        assert data["fees"][0]["fee_type"] == "charge"
        assert data["fees"][0]["charge_id"] == str(charge.id)


class TestFeeCreate:
    def test_currency_required(self):
        with pytest.raises(ValueError):
            FeeCreate(invoice_id=uuid4(), subscription_id=uuid4(), charge_id=uuid4())

    def test_negative_amount_rejected(self):
        with pytest.raises(ValueError):
            FeeCreate(
                invoice_id=uuid4(),
                subscription_id=uuid4(),
                charge_id=uuid4(),
                amount_cents=-1,
                amount_currency="USD",
            )

    def test_charge_fee_requires_charge(self):
        with pytest.raises(ValueError, match="charge_id is required"):
            FeeCreate(invoice_id=uuid4(), subscription_id=uuid4(), amount_currency="USD")

    def test_subscription_fee_without_charge(self):
        with pytest.raises(ValueError, match="cannot reference a charge"):
            FeeCreate(
                invoice_id=uuid4(),
                subscription_id=uuid4(),
                charge_id=uuid4(),
                fee_type=FeeType.SUBSCRIPTION,
                amount_currency="USD",
            )
