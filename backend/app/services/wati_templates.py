"""Per-template parameter shaping for WATI invoice notifications.

Each approved WhatsApp template has its own slot names. A shaping function
maps invoice data to the ordered parameter list the template expects, and is
registered under the template name. Templates that are not registered get
the generic numbered layout.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Tuple

from app.models.notification import InvoiceNotificationData, TemplateParameter

TemplateShaper = Callable[[InvoiceNotificationData], List[TemplateParameter]]


@dataclass(frozen=True)
class TemplateSpec:
    shape: TemplateShaper
    attach_media: bool = False


TEMPLATE_REGISTRY: Dict[str, TemplateSpec] = {}


def register_template(name: str, attach_media: bool = False) -> Callable[[TemplateShaper], TemplateShaper]:
    """Register a shaping function for a template name."""

    def decorator(shape: TemplateShaper) -> TemplateShaper:
        TEMPLATE_REGISTRY[name] = TemplateSpec(shape=shape, attach_media=attach_media)
        return shape

    return decorator


def generic_parameters(data: InvoiceNotificationData) -> List[TemplateParameter]:
    """Numbered slots 1-3, plus slot 4 when a PDF link exists."""
    parameters = [
        TemplateParameter("1", data.customer_name),
        TemplateParameter("2", data.invoice_number),
        TemplateParameter("3", data.amount_formatted),
    ]
    if data.pdf_url:
        parameters.append(TemplateParameter("4", data.pdf_url))
    return parameters


@register_template("invoice_ready", attach_media=True)
def invoice_ready_parameters(data: InvoiceNotificationData) -> List[TemplateParameter]:
    return generic_parameters(data)


@register_template("invoice_notification", attach_media=True)
def invoice_notification_parameters(data: InvoiceNotificationData) -> List[TemplateParameter]:
    return [
        TemplateParameter("url", data.pdf_url or ""),
        TemplateParameter("name", data.customer_name),
        TemplateParameter("invoice", data.invoice_number),
        TemplateParameter("amount", data.amount_formatted),
    ]


@register_template("hv_payment_success_02")
def payment_success_parameters(data: InvoiceNotificationData) -> List[TemplateParameter]:
    # Reuses a payment receipt template: the installment slot carries the invoice number
    return [
        TemplateParameter("name", data.customer_name),
        TemplateParameter("installment", data.invoice_number),
        TemplateParameter("plan_name", "Invoice"),
        TemplateParameter("amount", data.amount_formatted),
    ]


def build_template_parameters(
    template_name: str, data: InvoiceNotificationData
) -> Tuple[List[TemplateParameter], bool]:
    """Return the parameters for a template and whether to attach the PDF as media."""
    spec = TEMPLATE_REGISTRY.get(template_name)
    if spec is None:
        return generic_parameters(data), False
    return spec.shape(data), spec.attach_media
