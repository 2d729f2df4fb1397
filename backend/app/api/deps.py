from collections.abc import Generator

from fastapi import Depends, Request
from sqlmodel import Session

from app.core.config import Settings, get_settings
from app.services.invoice_service import InvoiceService
from app.services.pdf_service import PDFService
from app.services.wati_service import WATIService


def get_db(request: Request) -> Generator[Session, None, None]:
    """Yield a session bound to the engine opened in the app lifespan."""
    with Session(request.app.state.engine) as session:
        yield session


def get_pdf_service(request: Request) -> PDFService:
    return request.app.state.pdf_service


def get_wati_service(request: Request) -> WATIService:
    return request.app.state.wati_service


def get_invoice_service(
    session: Session = Depends(get_db),
    pdf_service: PDFService = Depends(get_pdf_service),
    wati_service: WATIService = Depends(get_wati_service),
    config: Settings = Depends(get_settings),
) -> InvoiceService:
    return InvoiceService(session, pdf_service, wati_service, config)
