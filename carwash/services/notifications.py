"""
Outbound "your car is ready" notification.

Delivery is out of the app's hands: the hook builds a WhatsApp click-to-chat
link for the customer's phone and logs it. The dashboard opens the link.
"""

import logging
import re
from typing import Callable, Optional
from urllib.parse import quote

from carwash.config import settings

logger = logging.getLogger(__name__)

READY_MESSAGE = "Your car is ready. Thank you for choosing us!"

NotificationHook = Callable[[str], Optional[str]]


def format_phone(phone_number: str, country_code: Optional[str] = None) -> str:
    """Local Egyptian number (01xxxxxxxxx) to international digits (201xxxxxxxxx)."""
    country_code = country_code or settings.notification_country_code
    digits = re.sub(r"\D", "", phone_number)
    if not digits:
        return ""
    if digits.startswith("0"):
        digits = country_code + digits[1:]
    if not digits.startswith(country_code):
        digits = country_code + digits
    return digits


def whatsapp_link(phone_number: str, message: str = READY_MESSAGE) -> Optional[str]:
    digits = format_phone(phone_number)
    if not digits:
        return None
    return f"https://wa.me/{digits}?text={quote(message)}"


def notify_car_ready(phone_number: str) -> Optional[str]:
    link = whatsapp_link(phone_number)
    logger.info("Car ready notification for %s: %s", phone_number, link)
    return link


def get_notifier() -> NotificationHook:
    """Dependency so tests can swap the hook."""
    return notify_car_ready
