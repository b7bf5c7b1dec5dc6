"""Email and SMS message bodies for news alerts."""

from __future__ import annotations

import html

from .models import Article

ELLIPSIS = "..."
FOOTER = "You're receiving this because you enabled alerts for this event on Alertwire."


def truncate(text: str, max_length: int) -> str:
    """Cut to max_length characters, ending in an ellipsis when cut."""
    if len(text) <= max_length:
        return text
    return f"{text[: max(max_length - len(ELLIPSIS), 0)]}{ELLIPSIS}"


def email_subject(event_title: str) -> str:
    return f"📰 News Alert: {event_title}"


def _published_long(article: Article) -> str | None:
    if article.published_at is None:
        return None
    return article.published_at.strftime("%A, %B %d, %Y at %I:%M %p UTC")


def email_html(event_title: str, article: Article) -> str:
    esc = html.escape
    published = _published_long(article)

    lines = [
        "<!DOCTYPE html>",
        "<html>",
        "<head>",
        '  <meta charset="utf-8">',
        '  <meta name="viewport" content="width=device-width, initial-scale=1.0">',
        f"  <title>News Alert: {esc(event_title)}</title>",
        "</head>",
        '<body style="font-family: -apple-system, BlinkMacSystemFont, \'Segoe UI\', Roboto, sans-serif; '
        'line-height: 1.6; color: #1a1a1a; max-width: 600px; margin: 0 auto; padding: 20px;">',
        '  <div style="background: #000; padding: 20px; border-radius: 8px 8px 0 0;">',
        '    <h1 style="color: #CDFF00; margin: 0; font-size: 24px;">📰 News Alert</h1>',
        f'    <p style="color: #fff; margin: 8px 0 0 0; font-size: 14px;">{esc(event_title)}</p>',
        "  </div>",
        '  <div style="background: #f8f8f8; padding: 20px; border: 1px solid #e0e0e0; '
        'border-top: none; border-radius: 0 0 8px 8px;">',
        '    <h2 style="margin: 0 0 12px 0; font-size: 20px;">',
        f'      <a href="{esc(article.url)}" style="color: #1a1a1a; text-decoration: none;">'
        f"{esc(article.title)}</a>",
        "    </h2>",
    ]
    if article.source:
        lines.append(
            f'    <p style="margin: 0 0 12px 0; color: #666; font-size: 14px;">'
            f"Source: {esc(article.source)}</p>"
        )
    if published:
        lines.append(
            f'    <p style="margin: 0 0 12px 0; color: #666; font-size: 14px;">'
            f"Published: {published}</p>"
        )
    if article.summary:
        lines.append(f'    <p style="margin: 16px 0; color: #333;">{esc(article.summary)}</p>')
    lines += [
        f'    <a href="{esc(article.url)}" style="display: inline-block; background: #CDFF00; '
        'color: #000; padding: 12px 24px; text-decoration: none; border-radius: 6px; '
        'font-weight: 600; margin-top: 12px;">Read Full Article →</a>',
        "  </div>",
        '  <div style="padding: 20px; text-align: center; color: #666; font-size: 12px;">',
        f"    <p>{esc(FOOTER)}</p>",
        "  </div>",
        "</body>",
        "</html>",
    ]
    return "\n".join(lines)


def email_text(event_title: str, article: Article) -> str:
    parts = [f"📰 NEWS ALERT: {event_title}", "", article.title, ""]
    if article.source:
        parts.append(f"Source: {article.source}")
    if article.published_at:
        parts.append(f"Published: {article.published_at.strftime('%m/%d/%Y')}")
    if article.summary:
        parts += ["", article.summary]
    parts += ["", f"Read more: {article.url}", "", "---", FOOTER]
    return "\n".join(parts)


def sms_body(
    event_title: str,
    article: Article,
    max_length: int = 160,
    max_event_title_length: int = 30,
) -> str:
    """`📰 <event>\\n<title>\\n<url>`, with the titles cut to fit max_length."""
    prefix = f"📰 {truncate(event_title, max_event_title_length)}\n"
    suffix = f"\n{article.url}"
    available = max(max_length - len(prefix) - len(suffix), 0)
    return f"{prefix}{truncate(article.title, available)}{suffix}"
