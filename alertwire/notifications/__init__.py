from .dispatcher import NotificationDispatcher
from .formatting import email_html, email_subject, email_text, sms_body, truncate
from .models import Article, DispatchSummary

__all__ = [
    "NotificationDispatcher",
    "Article",
    "DispatchSummary",
    "email_html",
    "email_subject",
    "email_text",
    "sms_body",
    "truncate",
]
