"""Notification payloads and results exchanged with the WATI client."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class FailureKind(str, Enum):
    """Categories of provider failures."""
    SESSION_EXPIRED = "session_expired"
    UNAUTHORIZED = "unauthorized"
    TEMPLATE_NOT_FOUND = "template_not_found"
    GENERIC = "generic"


@dataclass(frozen=True)
class TemplateParameter:
    """Named template slot, sent to the provider as {name, value}."""
    name: str
    value: str

    def to_payload(self) -> dict:
        return {"name": self.name, "value": self.value}


@dataclass(frozen=True)
class InvoiceNotificationData:
    """Invoice fields available to message templates."""
    invoice_number: str
    customer_name: str
    total_amount: float
    pdf_url: Optional[str] = None
    invoice_url: Optional[str] = None

    @property
    def amount_formatted(self) -> str:
        return f"{self.total_amount:.2f}"


@dataclass(frozen=True)
class NotificationSent:
    """Provider accepted the message."""
    message_id: Optional[str] = None
    sent: bool = True


@dataclass(frozen=True)
class NotificationFailed:
    """Provider rejected the message or could not be reached."""
    error: str
    kind: FailureKind = FailureKind.GENERIC
    sent: bool = False


NotificationResult = Union[NotificationSent, NotificationFailed]
