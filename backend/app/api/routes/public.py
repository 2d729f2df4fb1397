"""Public invoice links (no authentication)."""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import RedirectResponse

from app.api.deps import get_invoice_service
from app.services.invoice_service import InvoiceService

router = APIRouter(prefix="/public", tags=["public"])


@router.get("/invoices/{token}")
def open_public_invoice(
    token: str,
    invoice_service: InvoiceService = Depends(get_invoice_service)
) -> RedirectResponse:
    """Redirect a public invoice link to the invoice PDF."""
    invoice = invoice_service.get_invoice_by_public_token(token)
    if not invoice:
        raise HTTPException(status_code=404, detail="Invoice not found")

    return RedirectResponse(invoice_service.pdf_url(invoice), status_code=302)
