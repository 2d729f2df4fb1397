"""WATI (WhatsApp) messaging client."""

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import httpx

from app.core.config import Settings, get_settings
from app.models.notification import (
    FailureKind,
    InvoiceNotificationData,
    NotificationFailed,
    NotificationResult,
    NotificationSent,
    TemplateParameter,
)
from app.services.wati_templates import build_template_parameters

logger = logging.getLogger(__name__)

SESSION_EXPIRED_MESSAGE = (
    "No active session found. Customer must have messaged within 24 hours, "
    "or use template messages for automated notifications."
)
TEMPLATE_NOT_SYNCED_MESSAGE = (
    "Bad Request (400): Template may not be synced to API yet. "
    "After approval, templates take 15-30 minutes to sync."
)

ParameterInput = Union[str, TemplateParameter, Dict[str, str]]


def format_destination(number: str, country_code: str = "91") -> str:
    """Normalize a phone number to +<digits>, adding the country code to bare 10-digit numbers."""
    digits = re.sub(r"\D", "", number)
    if len(digits) == 10 and not digits.startswith(country_code):
        digits = country_code + digits
    return "+" + digits


def _response_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def _message_id(response: httpx.Response) -> Optional[str]:
    body = _response_body(response)
    if isinstance(body, dict):
        message_id = body.get("messageId") or body.get("id")
        return str(message_id) if message_id is not None else None
    return None


def _error_message(response: httpx.Response) -> str:
    body = _response_body(response)
    if isinstance(body, str) and body:
        return body
    if isinstance(body, dict) and body:
        return body.get("message") or body.get("error") or json.dumps(body)
    if isinstance(body, list) and body:
        return json.dumps(body)
    return f"HTTP {response.status_code}: {response.reason_phrase}"


def _failure_kind(status_code: int, not_found: FailureKind) -> FailureKind:
    if status_code in (401, 403):
        return FailureKind.UNAUTHORIZED
    if status_code == 404:
        return not_found
    return FailureKind.GENERIC


def _to_parameter(param: ParameterInput) -> TemplateParameter:
    if isinstance(param, TemplateParameter):
        return param
    if isinstance(param, dict) and param.get("name") and param.get("value"):
        return TemplateParameter(str(param["name"]), str(param["value"]))
    return TemplateParameter(str(param), str(param))


class WATIService:
    """
    Client for the WATI WhatsApp API.

    Send operations never raise: every outcome, including network errors and
    timeouts, comes back as a NotificationSent or NotificationFailed value.
    Read operations (templates, message status) raise httpx errors.
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.config = config or get_settings()
        self.template_name = self.config.WATI_INVOICE_TEMPLATE_NAME
        self.channel_number = (
            self.config.WATI_CHANNEL_PHONE_NUMBER or self.config.WATI_SENDER_NUMBER
        )
        self.country_code = self.config.DEFAULT_COUNTRY_CODE
        self.client = httpx.Client(
            base_url=self.config.WATI_API_ENDPOINT,
            headers={"Authorization": f"Bearer {self.config.WATI_API_TOKEN}"},
            timeout=httpx.Timeout(self.config.WATI_TIMEOUT_SECONDS),
            transport=transport,
        )

    def close(self) -> None:
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def format_destination(self, number: str) -> str:
        return format_destination(number, self.country_code)

    def send_session_message(self, destination: str, text: str) -> NotificationResult:
        """Send free-form text. Only works inside the customer's 24h session window."""
        phone = self.format_destination(destination)
        try:
            response = self.client.post(
                f"/sendSessionMessage/{phone}", json={"messageText": text}
            )
        except Exception as e:
            logger.warning("WATI sendSessionMessage failed for %s: %s", phone, e)
            return NotificationFailed(error=str(e) or "Failed to send message")

        if response.is_success:
            return NotificationSent(message_id=_message_id(response))

        logger.warning(
            "WATI sendSessionMessage rejected: status=%s body=%s",
            response.status_code,
            response.text[:500],
        )
        if response.status_code == 404:
            return NotificationFailed(
                error=SESSION_EXPIRED_MESSAGE, kind=FailureKind.SESSION_EXPIRED
            )
        return NotificationFailed(
            error=_error_message(response),
            kind=_failure_kind(response.status_code, FailureKind.GENERIC),
        )

    def send_template_message(
        self,
        destination: str,
        template_name: str,
        parameters: Optional[Sequence[ParameterInput]] = None,
        media_url: Optional[str] = None,
        broadcast_name: Optional[str] = None,
        channel_number: Optional[str] = None,
    ) -> NotificationResult:
        """Send a pre-approved template message."""
        phone = self.format_destination(destination)
        payload: Dict[str, Any] = {
            "template_name": template_name,
            "broadcast_name": broadcast_name or template_name,
        }

        channel = channel_number or self.channel_number
        if channel:
            payload["channel_number"] = channel

        if parameters:
            payload["parameters"] = [_to_parameter(p).to_payload() for p in parameters]

        if media_url:
            payload["media_url"] = media_url

        try:
            response = self.client.post(
                "/sendTemplateMessage",
                params={"whatsappNumber": phone},
                json=payload,
            )
        except Exception as e:
            logger.warning("WATI sendTemplateMessage failed for %s: %s", phone, e)
            return NotificationFailed(error=str(e) or "Failed to send template message")

        if response.is_success:
            return NotificationSent(message_id=_message_id(response))

        logger.warning(
            "WATI sendTemplateMessage rejected: template=%s status=%s body=%s",
            template_name,
            response.status_code,
            response.text[:500],
        )
        if response.status_code == 400 and not _response_body(response):
            error = TEMPLATE_NOT_SYNCED_MESSAGE
        else:
            error = _error_message(response)
        return NotificationFailed(
            error=error,
            kind=_failure_kind(response.status_code, FailureKind.TEMPLATE_NOT_FOUND),
        )

    def send_session_file(
        self, destination: str, file_path: str, caption: Optional[str] = None
    ) -> NotificationResult:
        """Upload a file into the customer's open session."""
        path = Path(file_path)
        if not path.is_file():
            return NotificationFailed(error=f"File not found: {file_path}")

        phone = self.format_destination(destination)
        data = {"caption": caption} if caption else None
        try:
            with path.open("rb") as fh:
                response = self.client.post(
                    f"/sendSessionFile/{phone}",
                    files={"file": (path.name, fh, "application/pdf")},
                    data=data,
                )
        except Exception as e:
            logger.warning("WATI sendSessionFile failed for %s: %s", phone, e)
            return NotificationFailed(error=str(e) or "Failed to send file")

        if response.is_success:
            return NotificationSent(message_id=_message_id(response))
        if response.status_code == 404:
            return NotificationFailed(
                error=SESSION_EXPIRED_MESSAGE, kind=FailureKind.SESSION_EXPIRED
            )
        return NotificationFailed(
            error=_error_message(response),
            kind=_failure_kind(response.status_code, FailureKind.GENERIC),
        )

    def get_message_templates(self, page_size: int = 100) -> Dict[str, Any]:
        response = self.client.get("/getMessageTemplates", params={"pageSize": page_size})
        response.raise_for_status()
        return response.json()

    def get_message_status(self, message_id: str) -> Dict[str, Any]:
        response = self.client.get(f"/getMessages/{message_id}")
        response.raise_for_status()
        return response.json()

    def build_session_text(self, data: InvoiceNotificationData) -> str:
        symbol = self.config.CURRENCY_SYMBOL
        lines: List[str] = [
            f"Hello {data.customer_name}!",
            "",
            "Your invoice has been generated:",
            f"Invoice Number: {data.invoice_number}",
            f"Total Amount: {symbol}{data.amount_formatted}",
            "",
        ]
        if data.pdf_url:
            lines.extend([f"Download invoice: {data.pdf_url}", ""])
        lines.append("Thank you for your business!")
        return "\n".join(lines)

    def send_invoice_notification(
        self, destination: str, data: InvoiceNotificationData
    ) -> NotificationResult:
        """Notify a customer about an invoice.

        Uses the configured template when WATI_INVOICE_TEMPLATE_NAME is set,
        otherwise a session message.
        """
        if self.template_name:
            parameters, attach_media = build_template_parameters(self.template_name, data)
            media_url = data.pdf_url if attach_media and data.pdf_url else None
            return self.send_template_message(
                destination,
                self.template_name,
                parameters,
                media_url=media_url,
                broadcast_name=self.template_name,
            )

        return self.send_session_message(destination, self.build_session_text(data))
