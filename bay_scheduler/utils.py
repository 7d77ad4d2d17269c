"""Shared utilities for customer contact details."""

import re

from bay_scheduler.schemas.booking_schema import ContactInfo

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def normalize_phone(value: str) -> str:
    """Normalize a phone number by stripping everything except digits and a leading +.

    Examples:
        >>> normalize_phone("(215) 822-1056")
        '2158221056'
        >>> normalize_phone("+1 215 822 1056")
        '+12158221056'
    """
    value = value.strip()
    if value.startswith("+"):
        return "+" + re.sub(r"[^\d]", "", value[1:])
    return re.sub(r"[^\d]", "", value)


def is_email(value: str) -> bool:
    return bool(_EMAIL_RE.match(value.strip()))


def build_contact(contact: str = "", phone: str = "", email: str = "") -> ContactInfo:
    """Combine explicit phone/email with a single free-form contact string.

    The voice assistant usually collects one "contact" answer; anything
    that looks like an email address is filed as email, everything else
    as a phone number.
    """
    phone = normalize_phone(phone) if phone else ""
    email = email.strip().lower() if email else ""
    contact = (contact or "").strip()
    if contact:
        if is_email(contact):
            email = email or contact.lower()
        else:
            phone = phone or normalize_phone(contact)
    return ContactInfo(phone=phone, email=email)
