"""Customer management service."""

import logging
from typing import List, Optional, Tuple
from uuid import UUID

from sqlmodel import Session, func, select

from app.core.exceptions import ConflictError, NotFoundError
from app.models.customer import CustomerCreate, CustomerUpdate
from app.models.domain import Customer, Invoice, utc_now

logger = logging.getLogger(__name__)


class CustomerService:
    """Service for creating, reading, updating and deleting customers."""

    def __init__(self, session: Session):
        self.session = session

    def create_customer(self, data: CustomerCreate) -> Customer:
        customer = Customer.model_validate(data)
        self.session.add(customer)
        self.session.commit()
        self.session.refresh(customer)
        logger.info("Created customer %s", customer.id)
        return customer

    def get_customer(self, customer_id: UUID) -> Optional[Customer]:
        return self.session.get(Customer, customer_id)

    def list_customers(self) -> List[Tuple[Customer, int]]:
        """Return customers, newest first, each with its invoice count."""
        statement = (
            select(Customer, func.count(Invoice.id))
            .outerjoin(Invoice, Invoice.customer_id == Customer.id)
            .group_by(Customer.id)
            .order_by(Customer.created_at.desc())
        )
        return [(customer, count) for customer, count in self.session.exec(statement).all()]

    def update_customer(self, customer_id: UUID, data: CustomerUpdate) -> Customer:
        customer = self.get_customer(customer_id)
        if not customer:
            raise NotFoundError("Customer", customer_id)

        changes = data.model_dump(exclude_unset=True)
        customer.sqlmodel_update(changes)
        customer.updated_at = utc_now()

        self.session.add(customer)
        self.session.commit()
        self.session.refresh(customer)
        return customer

    def delete_customer(self, customer_id: UUID) -> None:
        """Delete a customer that has no invoices.

        Customers referenced by invoices are kept; there is no cascade.
        """
        customer = self.get_customer(customer_id)
        if not customer:
            raise NotFoundError("Customer", customer_id)

        invoice_count = self.session.exec(
            select(func.count(Invoice.id)).where(Invoice.customer_id == customer_id)
        ).one()
        if invoice_count:
            raise ConflictError(
                "Customer has invoices and cannot be deleted",
                details={"customer_id": str(customer_id), "invoice_count": invoice_count},
            )

        self.session.delete(customer)
        self.session.commit()
        logger.info("Deleted customer %s", customer_id)
