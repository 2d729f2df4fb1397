"""Domain exceptions raised by the service layer."""

from typing import Any, Dict, Optional


class InvoiceAppError(Exception):
    """
    Base exception for application errors.

    Attributes:
        message: Human-readable error message
        details: Additional error context
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(InvoiceAppError):
    """Raised when a referenced entity does not exist."""

    def __init__(self, entity: str, identifier: Any):
        super().__init__(
            f"{entity} not found",
            details={"entity": entity, "id": str(identifier)},
        )


class ConflictError(InvoiceAppError):
    """Raised on uniqueness violations or blocked destructive operations."""


class PDFRenderError(InvoiceAppError):
    """Raised when an invoice PDF cannot be produced or written."""


class InvalidInvoiceError(InvoiceAppError):
    """Raised when invoice input fails a business rule."""
