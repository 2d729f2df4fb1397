"""Invoice creation and notification workflow."""

import logging
import os
import secrets
import string
import time
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload
from sqlmodel import Session, select

from app.core.config import Settings
from app.core.exceptions import ConflictError, InvalidInvoiceError, NotFoundError, PDFRenderError
from app.models.customer import CustomerPublic
from app.models.domain import Customer, Invoice, InvoiceItem
from app.models.invoice import (
    DeliveryMessagePublic,
    InvoiceCreateResponse,
    InvoiceItemCreate,
    InvoiceItemPublic,
    InvoicePublic,
    MessageStatus,
)
from app.models.notification import InvoiceNotificationData, NotificationSent
from app.services.delivery_service import DeliveryService
from app.services.pdf_service import PDFService
from app.services.wati_service import WATIService

logger = logging.getLogger(__name__)

INVOICE_NUMBER_PREFIX = "INV"
INVOICE_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits
INVOICE_SUFFIX_LENGTH = 9
PUBLIC_TOKEN_BYTES = 32


def compute_total(items: Sequence[InvoiceItemCreate]) -> float:
    """Sum of quantity * price. Stored unrounded."""
    return sum(item.quantity * item.price for item in items)


def generate_invoice_number(now_ms: Optional[int] = None) -> str:
    """INV-<epoch millis>-<9 random uppercase alphanumerics>."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    suffix = "".join(
        secrets.choice(INVOICE_SUFFIX_ALPHABET) for _ in range(INVOICE_SUFFIX_LENGTH)
    )
    return f"{INVOICE_NUMBER_PREFIX}-{now_ms}-{suffix}"


def generate_public_token() -> str:
    """64 hex characters."""
    return secrets.token_hex(PUBLIC_TOKEN_BYTES)


@dataclass
class InvoiceCreationResult:
    invoice: Invoice
    message_status: MessageStatus
    pdf_error: Optional[str] = None


class InvoiceService:
    """
    Orchestrates invoice creation.

    Persisting the invoice with its items is all-or-nothing. PDF rendering and
    the customer notification that follow are best-effort: their failures are
    reported alongside the created invoice and never undo it.
    """

    def __init__(
        self,
        session: Session,
        pdf_service: PDFService,
        notifier: WATIService,
        config: Settings,
    ):
        self.session = session
        self.pdf_service = pdf_service
        self.notifier = notifier
        self.config = config
        self.delivery_service = DeliveryService(session)

    def create_invoice(
        self, customer_id: UUID, items: Sequence[InvoiceItemCreate]
    ) -> InvoiceCreationResult:
        if not items:
            raise InvalidInvoiceError("An invoice needs at least one item")

        customer = self.session.get(Customer, customer_id)
        if not customer:
            raise NotFoundError("Customer", customer_id)

        invoice = Invoice(
            invoice_number=generate_invoice_number(),
            customer_id=customer.id,
            total_amount=compute_total(items),
            public_token=generate_public_token() if self.config.PUBLIC_LINKS_ENABLED else None,
            items=[
                InvoiceItem(
                    position=position,
                    description=item.description,
                    quantity=item.quantity,
                    price=item.price,
                )
                for position, item in enumerate(items)
            ],
        )

        # Invoice and items go in as one commit
        self.session.add(invoice)
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            logger.warning("Invoice insert rejected for %s: %s", invoice.invoice_number, e.orig)
            raise ConflictError(
                "Invoice number or public token already exists",
                details={"invoice_number": invoice.invoice_number},
            ) from e
        self.session.refresh(invoice)
        logger.info("Created invoice %s for customer %s", invoice.invoice_number, customer.id)

        pdf_error = None
        try:
            invoice.pdf_path = self.pdf_service.render(invoice)
        except PDFRenderError as e:
            pdf_error = e.message
        else:
            self.session.add(invoice)
            self.session.commit()
            self.session.refresh(invoice)

        message_status = self._notify(invoice)
        return InvoiceCreationResult(
            invoice=self.get_invoice(invoice.id) or invoice,
            message_status=message_status,
            pdf_error=pdf_error,
        )

    def notify(self, invoice_id: UUID) -> Tuple[Invoice, MessageStatus]:
        """Send the invoice notification again, recording a new delivery attempt."""
        invoice = self.get_invoice(invoice_id)
        if not invoice:
            raise NotFoundError("Invoice", invoice_id)

        message_status = self._notify(invoice)
        return self.get_invoice(invoice_id) or invoice, message_status

    def _notify(self, invoice: Invoice) -> MessageStatus:
        if not self.config.NOTIFICATIONS_ENABLED:
            return MessageStatus(sent=False, status="skipped")

        data = InvoiceNotificationData(
            invoice_number=invoice.invoice_number,
            customer_name=invoice.customer.name,
            total_amount=invoice.total_amount,
            pdf_url=self.notification_pdf_url(invoice),
            invoice_url=self.public_url(invoice),
        )
        result = self.notifier.send_invoice_notification(invoice.customer.whatsapp_number, data)
        self.delivery_service.record_attempt(invoice.id, result)

        if isinstance(result, NotificationSent):
            logger.info("Notification sent for %s: %s", invoice.invoice_number, result.message_id)
            return MessageStatus(sent=True, status="sent", message_id=result.message_id)

        logger.warning(
            "Notification failed for %s (%s): %s",
            invoice.invoice_number,
            result.kind.value,
            result.error,
        )
        return MessageStatus(
            sent=False,
            status="failed",
            error=result.error,
            failure_kind=result.kind.value,
        )

    def _with_relations(self):
        return select(Invoice).options(
            selectinload(Invoice.customer),
            selectinload(Invoice.items),
            selectinload(Invoice.delivery_messages),
        )

    def get_invoice(self, invoice_id: UUID) -> Optional[Invoice]:
        return self.session.exec(
            self._with_relations().where(Invoice.id == invoice_id)
        ).first()

    def get_invoice_by_public_token(self, public_token: str) -> Optional[Invoice]:
        return self.session.exec(
            self._with_relations().where(Invoice.public_token == public_token)
        ).first()

    def list_invoices(self) -> List[Invoice]:
        return list(
            self.session.exec(
                self._with_relations().order_by(Invoice.created_at.desc())
            ).all()
        )

    def get_invoice_pdf(self, invoice_id: UUID) -> Tuple[str, str]:
        """Return (path, download filename) of an invoice's PDF."""
        invoice = self.session.get(Invoice, invoice_id)
        if not invoice:
            raise NotFoundError("Invoice", invoice_id)
        if not invoice.pdf_path or not os.path.isfile(invoice.pdf_path):
            raise NotFoundError("PDF", invoice_id)
        return invoice.pdf_path, f"{invoice.invoice_number}.pdf"

    # Links

    def pdf_url(self, invoice: Invoice) -> str:
        return f"{self.config.SERVER_BASE_URL}{self.config.API_V1_STR}/invoices/{invoice.id}/pdf"

    def public_url(self, invoice: Invoice) -> Optional[str]:
        if not invoice.public_token:
            return None
        if self.config.FRONTEND_URL:
            return f"{self.config.FRONTEND_URL}/public/invoices/{invoice.public_token}"
        return (
            f"{self.config.SERVER_BASE_URL}{self.config.API_V1_STR}"
            f"/public/invoices/{invoice.public_token}"
        )

    def notification_pdf_url(self, invoice: Invoice) -> Optional[str]:
        # The provider must be able to fetch the link; an override helps local setups
        if self.config.WATI_TEST_PDF_URL:
            return self.config.WATI_TEST_PDF_URL
        return self.pdf_url(invoice) if invoice.pdf_path else None

    # Serialization

    def to_public(self, invoice: Invoice) -> InvoicePublic:
        latest = invoice.latest_delivery
        return InvoicePublic(
            id=invoice.id,
            invoice_number=invoice.invoice_number,
            customer_id=invoice.customer_id,
            total_amount=invoice.total_amount,
            public_token=invoice.public_token,
            pdf_path=invoice.pdf_path,
            created_at=invoice.created_at,
            customer=CustomerPublic.model_validate(invoice.customer) if invoice.customer else None,
            items=[InvoiceItemPublic.model_validate(item) for item in invoice.items],
            latest_delivery=DeliveryMessagePublic.model_validate(latest) if latest else None,
            pdf_url=self.pdf_url(invoice),
            public_url=self.public_url(invoice),
        )

    def to_create_response(self, result: InvoiceCreationResult) -> InvoiceCreateResponse:
        public = self.to_public(result.invoice)
        return InvoiceCreateResponse(
            **public.model_dump(),
            message_status=result.message_status,
            pdf_error=result.pdf_error,
        )
