"""Customer API request and response models."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import EmailStr, field_validator
from sqlmodel import Field, SQLModel


class CustomerCreate(SQLModel):
    """Request model for creating a customer."""
    name: str = Field(min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    whatsapp_number: str = Field(min_length=10)


class CustomerUpdate(SQLModel):
    """Request model for updating a customer. Omitted fields are kept."""
    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    whatsapp_number: Optional[str] = Field(default=None, min_length=10)

    @field_validator("name", "whatsapp_number")
    @classmethod
    def _not_null(cls, value: Optional[str]) -> str:
        # Omit the field to keep it; these columns cannot be cleared
        if value is None:
            raise ValueError("May be omitted but not null")
        return value


class CustomerPublic(SQLModel):
    id: UUID
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    whatsapp_number: str
    created_at: datetime
    updated_at: datetime


class CustomerInvoiceSummary(SQLModel):
    id: UUID
    invoice_number: str
    total_amount: float
    created_at: datetime


class CustomerDetail(CustomerPublic):
    """Customer with its invoices, newest first."""
    invoices: List[CustomerInvoiceSummary] = Field(default_factory=list)


class CustomerListItem(CustomerPublic):
    invoice_count: int = 0
