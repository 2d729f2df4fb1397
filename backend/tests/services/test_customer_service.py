from datetime import timedelta
from uuid import uuid4

import pytest

from app.core.exceptions import ConflictError, NotFoundError
from app.models.customer import CustomerCreate, CustomerUpdate
from app.models.domain import Customer, Invoice
from app.services.customer_service import CustomerService


@pytest.fixture
def service(db) -> CustomerService:
    return CustomerService(db)


def add_invoice(db, customer: Customer, number: str = "INV-1700000000000-AAAAAAAAA") -> Invoice:
    invoice = Invoice(invoice_number=number, customer_id=customer.id, total_amount=10.0)
    db.add(invoice)
    db.commit()
    db.refresh(invoice)
    return invoice


class TestCustomerService:
    """Test cases for CustomerService."""

    def test_create_customer(self, service):
        customer = service.create_customer(
            CustomerCreate(name="Ravi Kumar", email="ravi@example.com", whatsapp_number="9876543210")
        )

        assert customer.id is not None
        assert customer.name == "Ravi Kumar"
        assert customer.phone is None
        assert customer.created_at is not None

    def test_get_customer(self, service, customer):
        assert service.get_customer(customer.id).name == "Asha Verma"
        assert service.get_customer(uuid4()) is None

    def test_list_customers_newest_first_with_counts(self, service, db, customer):
        newer = Customer(
            name="Newer",
            whatsapp_number="9000000000",
            created_at=customer.created_at + timedelta(seconds=5),
        )
        db.add(newer)
        db.commit()
        add_invoice(db, customer)
        add_invoice(db, customer, "INV-1700000000000-BBBBBBBBB")

        rows = service.list_customers()

        assert [(c.name, count) for c, count in rows] == [("Newer", 0), ("Asha Verma", 2)]

    def test_list_customers_empty(self, service):
        assert service.list_customers() == []

    def test_update_customer_partial(self, service, customer):
        before = customer.updated_at

        updated = service.update_customer(customer.id, CustomerUpdate(name="Asha V."))

        assert updated.name == "Asha V."
        assert updated.whatsapp_number == "9876543210"
        assert updated.email == "asha@example.com"
        assert updated.updated_at >= before

    def test_update_customer_clears_email_when_explicit(self, service, customer):
        updated = service.update_customer(customer.id, CustomerUpdate(email=None))

        assert updated.email is None

    def test_update_missing_customer(self, service):
        with pytest.raises(NotFoundError):
            service.update_customer(uuid4(), CustomerUpdate(name="Nobody"))

    def test_delete_customer(self, service, customer):
        service.delete_customer(customer.id)

        assert service.get_customer(customer.id) is None

    def test_delete_missing_customer(self, service):
        with pytest.raises(NotFoundError):
            service.delete_customer(uuid4())

    def test_delete_customer_with_invoices_conflicts(self, service, db, customer):
        add_invoice(db, customer)

        with pytest.raises(ConflictError) as exc_info:
            service.delete_customer(customer.id)

        assert exc_info.value.details["invoice_count"] == 1
        assert service.get_customer(customer.id) is not None
