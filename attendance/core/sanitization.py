"""Input sanitization utilities."""
import re
from typing import Optional

from attendance.core.constants import MAX_DEVICE_INFO_LENGTH, MAX_TOKEN_LENGTH


def sanitize_text(text: str, max_length: Optional[int] = None, strip_html: bool = True) -> str:
    """
    Sanitize free text before it is stored.

    Args:
        text: The input text to sanitize
        max_length: Optional maximum length to enforce
        strip_html: Whether to strip HTML tags (default True)

    Returns:
        Sanitized text with HTML tags and control characters removed and
        whitespace normalized

    Raises:
        ValueError: If text exceeds max_length or contains dangerous patterns
    """
    if not isinstance(text, str):
        raise ValueError("Input must be a string")

    sanitized = text.strip()

    if max_length and len(sanitized) > max_length:
        raise ValueError(f"Input exceeds maximum length of {max_length} characters")

    if strip_html:
        sanitized = re.sub(r'<[^>]*>', '', sanitized)

    # Reject inputs that still contain HTML-like patterns after stripping
    if '<' in sanitized or '>' in sanitized:
        raise ValueError("Input contains invalid HTML-like patterns")

    sanitized = re.sub(r'[\x00-\x08\x0b-\x1f\x7f]', '', sanitized)
    sanitized = re.sub(r'\s+', ' ', sanitized)

    return sanitized


def sanitize_device_info(device_info: str) -> Optional[str]:
    """
    Sanitize the free-form device description sent with a check-in.

    Returns:
        Sanitized device info, or None if nothing is left after cleaning
    """
    sanitized = sanitize_text(device_info, max_length=MAX_DEVICE_INFO_LENGTH)
    return sanitized or None


def validate_token_format(token: str) -> str:
    """
    Normalize a check-in token before decryption.

    Only whitespace and length are checked here; the token codec decides
    whether the content is a token at all.

    Args:
        token: The token to validate

    Returns:
        The validated token with surrounding whitespace removed

    Raises:
        ValueError: If the token is empty or too long
    """
    if not isinstance(token, str):
        raise ValueError("Token must be a string")

    token = token.strip()

    if not token:
        raise ValueError("Token cannot be empty")

    if len(token) > MAX_TOKEN_LENGTH:
        raise ValueError(f"Token exceeds maximum length of {MAX_TOKEN_LENGTH} characters")

    return token
