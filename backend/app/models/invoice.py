"""Invoice API request and response models."""

from datetime import datetime
from typing import List, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic import Field as PydanticField
from sqlmodel import Field, SQLModel

from app.models.customer import CustomerPublic


class InvoiceItemCreate(SQLModel):
    """Line item as submitted by the operator."""
    description: str = Field(min_length=1)
    quantity: int = Field(gt=0)
    price: float = Field(gt=0)


class InvoiceCreate(SQLModel):
    """Request model for creating an invoice."""
    customer_id: UUID
    items: List[InvoiceItemCreate] = Field(min_length=1)


class InvoiceItemPublic(SQLModel):
    id: UUID
    description: str
    quantity: int
    price: float


class DeliveryMessagePublic(SQLModel):
    id: UUID
    message_id: Optional[str] = None
    status: str
    error: Optional[str] = None
    sent_at: datetime
    delivered_at: Optional[datetime] = None


class InvoicePublic(SQLModel):
    """Invoice with customer, items, latest delivery and links."""
    id: UUID
    invoice_number: str
    customer_id: UUID
    total_amount: float
    public_token: Optional[str] = None
    pdf_path: Optional[str] = None
    created_at: datetime
    customer: Optional[CustomerPublic] = None
    items: List[InvoiceItemPublic] = Field(default_factory=list)
    latest_delivery: Optional[DeliveryMessagePublic] = None
    pdf_url: str
    public_url: Optional[str] = None


class MessageStatus(SQLModel):
    """Outcome of a notification attempt, reported next to the invoice."""
    sent: bool
    status: str  # 'sent', 'failed' or 'skipped'
    message_id: Optional[str] = None
    error: Optional[str] = None
    failure_kind: Optional[str] = None


class InvoiceCreateResponse(InvoicePublic):
    """Response model for invoice creation."""
    message_status: MessageStatus
    pdf_error: Optional[str] = None


class WebhookPayload(BaseModel):
    """Delivery status callback sent by the provider."""
    model_config = ConfigDict(populate_by_name=True)

    message_id: Optional[str] = PydanticField(default=None, alias="messageId")
    status: Optional[str] = None
    timestamp: Optional[datetime] = None
    error: Optional[str] = PydanticField(default=None, alias="failedDetail")


class WebhookResponse(SQLModel):
    success: bool
    updated: bool = False


class NamedParameter(BaseModel):
    name: str
    value: str


class TemplateSendRequest(BaseModel):
    """Operator request to send a template message by hand."""
    model_config = ConfigDict(populate_by_name=True)

    phone_number: Optional[str] = PydanticField(default=None, alias="phoneNumber")
    template_name: Optional[str] = PydanticField(default=None, alias="templateName")
    parameters: List[Union[str, NamedParameter]] = PydanticField(default_factory=list)
