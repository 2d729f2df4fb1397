"""Delivery message tracking."""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlmodel import Session, select

from app.models.domain import DeliveryMessage, utc_now
from app.models.notification import NotificationResult, NotificationSent

logger = logging.getLogger(__name__)

DELIVERY_STATUSES = ("sent", "delivered", "failed")
FAILED_WITHOUT_REASON = "Delivery failed (reported by provider)"


class DeliveryService:
    """Records notification attempts and applies provider status callbacks."""

    def __init__(self, session: Session):
        self.session = session

    def record_attempt(self, invoice_id: UUID, result: NotificationResult) -> DeliveryMessage:
        if isinstance(result, NotificationSent):
            message = DeliveryMessage(
                invoice_id=invoice_id,
                message_id=result.message_id,
                status="sent",
            )
        else:
            message = DeliveryMessage(
                invoice_id=invoice_id,
                status="failed",
                error=result.error,
            )

        self.session.add(message)
        self.session.commit()
        self.session.refresh(message)
        return message

    def get_by_message_id(self, message_id: str) -> Optional[DeliveryMessage]:
        return self.session.exec(
            select(DeliveryMessage).where(DeliveryMessage.message_id == message_id)
        ).first()

    def apply_status_update(
        self,
        message_id: str,
        status: Optional[str] = None,
        timestamp: Optional[datetime] = None,
        error: Optional[str] = None,
    ) -> bool:
        """Apply a webhook status update. Returns True when a record changed."""
        status = status or "delivered"
        if status not in DELIVERY_STATUSES:
            logger.info("Ignoring unsupported delivery status %r for %s", status, message_id)
            return False

        message = self.get_by_message_id(message_id)
        if not message:
            logger.warning("Webhook for unknown message id %s", message_id)
            return False

        message.status = status
        if status == "delivered":
            message.delivered_at = timestamp or utc_now()
        elif status == "failed":
            message.error = error or FAILED_WITHOUT_REASON
        message.updated_at = utc_now()

        self.session.add(message)
        self.session.commit()
        return True
