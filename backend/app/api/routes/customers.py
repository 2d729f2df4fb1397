"""Customer API endpoints."""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlmodel import Session

from app.api.deps import get_db
from app.core.exceptions import ConflictError, NotFoundError
from app.models.customer import (
    CustomerCreate,
    CustomerDetail,
    CustomerInvoiceSummary,
    CustomerListItem,
    CustomerPublic,
    CustomerUpdate,
)
from app.services import CustomerService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/customers", tags=["customers"])


@router.get("/", response_model=List[CustomerListItem])
def list_customers(session: Session = Depends(get_db)) -> List[CustomerListItem]:
    """
    List customers, newest first, with their invoice counts.
    """
    try:
        customer_service = CustomerService(session)
        return [
            CustomerListItem(**CustomerPublic.model_validate(customer).model_dump(), invoice_count=count)
            for customer, count in customer_service.list_customers()
        ]
    except Exception as e:
        logger.exception("Failed to list customers")
        raise HTTPException(status_code=500, detail=f"Failed to list customers: {str(e)}")


@router.post("/", response_model=CustomerPublic, status_code=201)
def create_customer(
    request: CustomerCreate,
    session: Session = Depends(get_db)
) -> CustomerPublic:
    """Create a customer."""
    try:
        customer = CustomerService(session).create_customer(request)
        return CustomerPublic.model_validate(customer)
    except Exception as e:
        logger.exception("Failed to create customer")
        raise HTTPException(status_code=500, detail=f"Failed to create customer: {str(e)}")


@router.get("/{customer_id}", response_model=CustomerDetail)
def get_customer(
    customer_id: UUID,
    session: Session = Depends(get_db)
) -> CustomerDetail:
    """Get a customer with its invoices."""
    customer = CustomerService(session).get_customer(customer_id)
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")

    return CustomerDetail(
        **CustomerPublic.model_validate(customer).model_dump(),
        invoices=[CustomerInvoiceSummary.model_validate(invoice) for invoice in customer.invoices],
    )


@router.put("/{customer_id}", response_model=CustomerPublic)
def update_customer(
    customer_id: UUID,
    request: CustomerUpdate,
    session: Session = Depends(get_db)
) -> CustomerPublic:
    """Update the supplied customer fields."""
    try:
        customer = CustomerService(session).update_customer(customer_id, request)
        return CustomerPublic.model_validate(customer)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except Exception as e:
        logger.exception("Failed to update customer %s", customer_id)
        raise HTTPException(status_code=500, detail=f"Failed to update customer: {str(e)}")


@router.delete("/{customer_id}", status_code=204)
def delete_customer(
    customer_id: UUID,
    session: Session = Depends(get_db)
) -> Response:
    """Delete a customer. Customers with invoices cannot be deleted."""
    try:
        CustomerService(session).delete_customer(customer_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=e.message)
    except Exception as e:
        logger.exception("Failed to delete customer %s", customer_id)
        raise HTTPException(status_code=500, detail=f"Failed to delete customer: {str(e)}")
    return Response(status_code=204)
