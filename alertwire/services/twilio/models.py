"""Twilio SMS models."""


def mask_phone(phone: str | None) -> str:
    """Hide all but the last four digits for logging."""
    if not phone or len(phone) < 4:
        return "****"
    return f"***{phone[-4:]}"
