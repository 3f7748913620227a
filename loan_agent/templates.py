"""
Loan Agent - Follow-up Message Templates
Pre-approved SMS / WhatsApp bodies sent after a call, with {placeholder} filling.
Nothing here delivers a message - callers hand the filled text to a provider.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .config import settings
from .products import get_product

PLACEHOLDER_PATTERN = re.compile(r"\{(\w+)\}")

DEFAULT_CUSTOMER_NAME = "ग्राहक"


class Channel(Enum):
    SMS = "sms"
    WHATSAPP = "whatsapp"


class TemplateError(Exception):
    """Unknown template id or a template used on the wrong channel"""


@dataclass(frozen=True)
class MessageTemplate:
    id: str
    channel: Channel
    title: str
    body: str
    variables: Tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "channel": self.channel.value,
            "title": self.title,
            "body": self.body,
            "variables": list(self.variables),
        }


MESSAGE_TEMPLATES: Tuple[MessageTemplate, ...] = (
    MessageTemplate(
        id="sms_application_link",
        channel=Channel.SMS,
        title="आवेदन लिंक",
        body=(
            "प्रिय {name}, विशफिन पर आपका {loan} आवेदन ड्राफ्ट तैयार है। "
            "दस्तावेज़ अपलोड करने के लिए यहाँ क्लिक करें: {link}"
        ),
        variables=("name", "loan", "link"),
    ),
    MessageTemplate(
        id="sms_callback_reminder",
        channel=Channel.SMS,
        title="कॉल-बैक रिमाइंडर",
        body=(
            "नमस्ते {name}, आपसे बात करके अच्छा लगा। जब सुविधा हो, {link} पर "
            "अपना लोन ऑफ़र देखें या इसी नंबर पर जवाब दें।"
        ),
        variables=("name", "link"),
    ),
    MessageTemplate(
        id="whatsapp_offer_summary",
        channel=Channel.WHATSAPP,
        title="ऑफ़र सारांश",
        body=(
            "नमस्ते {name} 👋\n"
            "आपके {amount} {loan} के लिए दरें {rate}।\n"
            "ईएमआई कैलकुलेशन और आवेदन: {link}"
        ),
        variables=("name", "amount", "loan", "rate", "link"),
    ),
    MessageTemplate(
        id="whatsapp_document_checklist",
        channel=Channel.WHATSAPP,
        title="दस्तावेज़ सूची",
        body=(
            "{name} जी, आवेदन के लिए ये दस्तावेज़ तैयार रखें:\n"
            "1. आधार कार्ड\n2. पैन कार्ड\n3. पिछले 3 महीने की सैलरी स्लिप / बैंक स्टेटमेंट\n"
            "अपलोड लिंक: {link}"
        ),
        variables=("name", "link"),
    ),
)


def get_template(template_id: str) -> Optional[MessageTemplate]:
    for template in MESSAGE_TEMPLATES:
        if template.id == template_id:
            return template
    return None


def require_template(template_id: str, channel: Optional[Channel] = None) -> MessageTemplate:
    """Like get_template but raises TemplateError, optionally checking the channel"""
    template = get_template(template_id)
    if template is None:
        raise TemplateError(f"टेम्पलेट नहीं मिला: {template_id}")
    if channel is not None and template.channel != channel:
        raise TemplateError(f"{template_id} {channel.value} टेम्पलेट नहीं है।")
    return template


def templates_by_channel(channel: Channel) -> List[MessageTemplate]:
    return [t for t in MESSAGE_TEMPLATES if t.channel == channel]


def fill_template(template: MessageTemplate, variables: Dict[str, str]) -> str:
    """
    Replace every {placeholder} in the body.

    Missing variables become empty strings. Braces that don't wrap a
    word ("{ }") are left alone.
    """
    def _sub(match):
        value = variables.get(match.group(1))
        return value if isinstance(value, str) else ""

    return PLACEHOLDER_PATTERN.sub(_sub, template.body)


def follow_up_variables(context, link: Optional[str] = None) -> Dict[str, str]:
    """
    Build the placeholder map for a finished conversation.

    `context` is a ConversationContext; unknown loan type reads as personal,
    same as the spoken pitch.
    """
    product = get_product(context.loan_type)
    return {
        "name": context.customer_name or DEFAULT_CUSTOMER_NAME,
        "loan": product.title,
        "amount": context.amount or "",
        "rate": product.apr,
        "link": link or settings.follow_up_link,
    }
