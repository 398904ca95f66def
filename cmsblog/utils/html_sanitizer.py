"""
HTML sanitization for rich text rendered from the content API, using bleach.
"""
from __future__ import annotations

import bleach


# Allowed HTML tags for post bodies
ALLOWED_TAGS = [
    # Text formatting
    'strong', 'b', 'em', 'i', 'u', 's', 'mark', 'small', 'sup', 'sub',
    # Links
    'a',
    # Headings inside a section body
    'h1', 'h2', 'h3', 'h4', 'h5', 'h6',
    # Lists
    'ul', 'ol', 'li',
    # Line breaks and paragraphs
    'br', 'p',
    # Code
    'code', 'pre',
    # Quotes
    'blockquote', 'cite',
    # Images and embed wrappers
    'img', 'div',
    # Labels (class only, no inline styles)
    'span',
]

# No style attributes since CSP blocks inline CSS
ALLOWED_ATTRIBUTES = {
    'a': ['href', 'title', 'target', 'rel'],
    'img': ['src', 'alt', 'width', 'height'],
    'div': ['data-oembed', 'data-oembed-type', 'data-oembed-provider'],
    'blockquote': ['cite'],
    '*': ['id', 'class'],
}

ALLOWED_PROTOCOLS = ['http', 'https', 'mailto']


def sanitize_html(html_content: str | None) -> str:
    """
    Sanitize HTML content to prevent XSS while keeping the markup the
    rich text renderer produces.

    Args:
        html_content: Raw HTML content to sanitize

    Returns:
        Sanitized HTML content safe for rendering
    """
    if not html_content:
        return ""

    return bleach.clean(
        html_content,
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        protocols=ALLOWED_PROTOCOLS,
        strip=True,  # Strip disallowed tags instead of escaping
        strip_comments=True,
    )
