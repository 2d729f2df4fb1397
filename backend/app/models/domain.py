"""Domain models for customers, invoices and delivery tracking."""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Field, Relationship, SQLModel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Customer(SQLModel, table=True):
    """Customer receiving invoices over WhatsApp."""

    __tablename__ = "customers"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    whatsapp_number: str
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    # Relationships
    invoices: list["Invoice"] = Relationship(
        back_populates="customer",
        sa_relationship_kwargs={"order_by": "Invoice.created_at.desc()"},
    )


class Invoice(SQLModel, table=True):
    """Invoice header. Items and total are fixed at creation."""

    __tablename__ = "invoices"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    invoice_number: str = Field(unique=True, index=True)
    customer_id: UUID = Field(foreign_key="customers.id", index=True)
    total_amount: float
    public_token: Optional[str] = Field(default=None, unique=True, index=True)
    pdf_path: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)

    # Relationships
    customer: Optional[Customer] = Relationship(back_populates="invoices")
    items: list["InvoiceItem"] = Relationship(
        back_populates="invoice",
        sa_relationship_kwargs={
            "order_by": "InvoiceItem.position",
            "cascade": "all, delete-orphan",
        },
    )
    delivery_messages: list["DeliveryMessage"] = Relationship(
        back_populates="invoice",
        sa_relationship_kwargs={
            "order_by": "DeliveryMessage.sent_at.desc()",
            "cascade": "all, delete-orphan",
        },
    )

    @property
    def latest_delivery(self) -> Optional["DeliveryMessage"]:
        return self.delivery_messages[0] if self.delivery_messages else None


class InvoiceItem(SQLModel, table=True):
    """Invoice line item."""

    __tablename__ = "invoice_items"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    invoice_id: UUID = Field(foreign_key="invoices.id", index=True)
    position: int = 0
    description: str
    quantity: int
    price: float

    # Relationships
    invoice: Optional[Invoice] = Relationship(back_populates="items")

    @property
    def line_total(self) -> float:
        return self.quantity * self.price


class DeliveryMessage(SQLModel, table=True):
    """One attempt to notify a customer about an invoice."""

    __tablename__ = "delivery_messages"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    invoice_id: UUID = Field(foreign_key="invoices.id", index=True)
    message_id: Optional[str] = Field(default=None, index=True)
    status: str = Field(regex="^(sent|failed|delivered)$")
    error: Optional[str] = None
    sent_at: datetime = Field(default_factory=utc_now)
    delivered_at: Optional[datetime] = None
    updated_at: datetime = Field(default_factory=utc_now)

    # Relationships
    invoice: Optional[Invoice] = Relationship(back_populates="delivery_messages")
