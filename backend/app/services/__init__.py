"""Initialize services package."""

from .customer_service import CustomerService
from .delivery_service import DeliveryService
from .invoice_service import InvoiceService
from .pdf_service import PDFService
from .wati_service import WATIService
