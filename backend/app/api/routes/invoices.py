"""Invoice API endpoints."""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse

from app.api.deps import get_invoice_service
from app.core.exceptions import ConflictError, InvalidInvoiceError, NotFoundError
from app.models.invoice import InvoiceCreate, InvoiceCreateResponse, InvoicePublic
from app.services.invoice_service import InvoiceCreationResult, InvoiceService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/invoices", tags=["invoices"])


@router.get("/", response_model=List[InvoicePublic])
def list_invoices(
    invoice_service: InvoiceService = Depends(get_invoice_service)
) -> List[InvoicePublic]:
    """List invoices, newest first."""
    try:
        return [invoice_service.to_public(invoice) for invoice in invoice_service.list_invoices()]
    except Exception as e:
        logger.exception("Failed to list invoices")
        raise HTTPException(status_code=500, detail=f"Failed to list invoices: {str(e)}")


@router.post("/", response_model=InvoiceCreateResponse, status_code=201)
def create_invoice(
    request: InvoiceCreate,
    invoice_service: InvoiceService = Depends(get_invoice_service)
) -> InvoiceCreateResponse:
    """
    Create an invoice, render its PDF and notify the customer.

    The response always carries the created invoice; PDF and notification
    failures are reported in `pdf_error` and `message_status`.
    """
    try:
        result = invoice_service.create_invoice(request.customer_id, request.items)
        return invoice_service.to_create_response(result)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except InvalidInvoiceError as e:
        raise HTTPException(status_code=422, detail=e.message)
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=e.message)
    except Exception as e:
        logger.exception("Invoice creation failed")
        raise HTTPException(status_code=500, detail=f"Failed to create invoice: {str(e)}")


@router.get("/{invoice_id}", response_model=InvoicePublic)
def get_invoice(
    invoice_id: UUID,
    invoice_service: InvoiceService = Depends(get_invoice_service)
) -> InvoicePublic:
    """Get an invoice with customer, items and latest delivery."""
    invoice = invoice_service.get_invoice(invoice_id)
    if not invoice:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return invoice_service.to_public(invoice)


@router.get("/{invoice_id}/pdf", response_class=FileResponse)
def get_invoice_pdf(
    invoice_id: UUID,
    invoice_service: InvoiceService = Depends(get_invoice_service)
) -> FileResponse:
    """Stream the invoice PDF inline."""
    try:
        path, filename = invoice_service.get_invoice_pdf(invoice_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)

    return FileResponse(
        path,
        media_type="application/pdf",
        filename=filename,
        content_disposition_type="inline",
    )


@router.post("/{invoice_id}/notify", response_model=InvoiceCreateResponse)
def resend_notification(
    invoice_id: UUID,
    invoice_service: InvoiceService = Depends(get_invoice_service)
) -> InvoiceCreateResponse:
    """Notify the customer again. Each call records a new delivery attempt."""
    try:
        invoice, message_status = invoice_service.notify(invoice_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)

    return invoice_service.to_create_response(
        InvoiceCreationResult(invoice=invoice, message_status=message_status)
    )
