"""
HTML sanitization utilities to prevent XSS attacks.

Question bodies may keep a small set of formatting tags; titles and report
reasons are plain text.
"""

import html
from typing import Optional

import bleach

# Conservative list of allowed HTML tags for question bodies
ALLOWED_TAGS = [
    "p",
    "br",
    "strong",
    "b",
    "em",
    "i",
    "code",
    "pre",
    "ul",
    "ol",
    "li",
    "blockquote",
]

# No attributes allowed (prevents event handlers)
ALLOWED_ATTRIBUTES: dict[str, list[str]] = {}


def sanitize_html(content: Optional[str]) -> Optional[str]:
    """
    Sanitize HTML content to prevent XSS attacks.

    Removes all HTML tags except those in ALLOWED_TAGS and strips every
    attribute, including event handlers.

    Examples:
        >>> sanitize_html('<p>Hello <b>world</b></p>')
        '<p>Hello <b>world</b></p>'
    """
    if content is None:
        return None

    return bleach.clean(
        content,
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        strip=True,
    )


def sanitize_plain_text(content: Optional[str]) -> Optional[str]:
    """
    Strip all HTML tags for plain text fields.

    Examples:
        >>> sanitize_plain_text('<b>Bold</b> text')
        'Bold text'
        >>> sanitize_plain_text('Q&A')
        'Q&A'
    """
    if content is None:
        return None

    # bleach escapes entities; plain text fields store the literal characters
    return html.unescape(bleach.clean(content, tags=[], strip=True))
