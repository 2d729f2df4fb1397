"""WATI webhook and operator endpoints."""

import logging
import re
from typing import Any, Dict

import httpx
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from app.api.deps import get_db, get_wati_service
from app.models.invoice import TemplateSendRequest, WebhookPayload, WebhookResponse
from app.models.notification import NotificationSent, TemplateParameter
from app.services import DeliveryService, WATIService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/wati", tags=["wati"])

TEMPLATE_VARIABLE = re.compile(r"\{\{(\d+|[^}]+)\}\}")


@router.post("/webhook", response_model=WebhookResponse)
def delivery_webhook(
    payload: WebhookPayload,
    session: Session = Depends(get_db)
) -> WebhookResponse:
    """
    Receive a delivery status update from WATI.
    """
    if not payload.message_id:
        raise HTTPException(status_code=400, detail="messageId is required")

    try:
        updated = DeliveryService(session).apply_status_update(
            payload.message_id, payload.status, payload.timestamp, payload.error
        )
    except Exception as e:
        logger.exception("Webhook processing failed for %s", payload.message_id)
        raise HTTPException(status_code=500, detail=f"Failed to process webhook: {str(e)}")

    return WebhookResponse(success=True, updated=updated)


@router.get("/templates")
def list_templates(
    wati_service: WATIService = Depends(get_wati_service)
) -> Dict[str, Any]:
    """List approved templates and the variables each one expects."""
    try:
        templates = wati_service.get_message_templates()
    except httpx.HTTPError as e:
        logger.error("Failed to fetch WATI templates: %s", e)
        raise HTTPException(status_code=502, detail=f"Failed to fetch templates: {str(e)}")

    configured = wati_service.template_name
    approved = [
        {
            "name": template.get("elementName"),
            "status": template.get("status"),
            "body": template.get("body"),
            "variables": TEMPLATE_VARIABLE.findall(template.get("body") or ""),
        }
        for template in templates.get("messageTemplates") or []
        if template.get("status") == "APPROVED"
    ]
    return {
        "configured_template": configured,
        "configured_template_found": any(t["name"] == configured for t in approved),
        "templates": approved,
    }


@router.post("/test-template")
def send_test_template(
    request: TemplateSendRequest,
    wati_service: WATIService = Depends(get_wati_service)
) -> Dict[str, Any]:
    """Send a template message by hand to check template setup."""
    if not request.phone_number or not request.template_name:
        raise HTTPException(status_code=400, detail="phoneNumber and templateName are required")

    parameters = [
        p if isinstance(p, str) else TemplateParameter(p.name, p.value)
        for p in request.parameters
    ]
    result = wati_service.send_template_message(
        request.phone_number, request.template_name, parameters
    )
    if isinstance(result, NotificationSent):
        return {"result": True, "message_id": result.message_id}
    return {"result": False, "error": result.error, "failure_kind": result.kind.value}


@router.get("/messages/{message_id}")
def get_message_status(
    message_id: str,
    wati_service: WATIService = Depends(get_wati_service)
) -> Dict[str, Any]:
    """Look up a message's status at the provider."""
    try:
        return wati_service.get_message_status(message_id)
    except httpx.HTTPError as e:
        logger.error("Failed to fetch WATI message %s: %s", message_id, e)
        raise HTTPException(status_code=502, detail=f"Failed to get message status: {str(e)}")
