# =============================================================================
# core/validation.py - Input Validation Helpers
# =============================================================================
# Email checks strict enough to catch missing TLDs ("user@gmail") and
# URL normalization for webshop links. Used by the pydantic request models.
# =============================================================================

import re

_EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
_TLD_PATTERN = re.compile(r"^[a-zA-Z]+$")


def email_error(email: str) -> str | None:
    """
    Check an email address.

    Args:
        email: Raw email as typed by the user

    Returns:
        A user-facing error message, or None if the address is valid
    """
    trimmed = (email or "").strip()

    if not trimmed:
        return "Email is required"
    if " " in trimmed:
        return "Email cannot contain spaces"

    at_count = trimmed.count("@")
    if at_count == 0:
        return "Email must contain @ symbol"
    if at_count > 1:
        return "Email cannot contain multiple @ symbols"
    if trimmed.startswith("@") or trimmed.endswith("@"):
        return "Invalid email format"

    local_part, domain_part = trimmed.split("@")
    if not local_part:
        return "Email address is incomplete"
    if "." not in domain_part:
        return "Email must include a domain (e.g., gmail.com)"

    tld = domain_part.rsplit(".", 1)[-1]
    if len(tld) < 2:
        return "Email must have a valid domain extension (e.g., .com, .org)"
    if not _TLD_PATTERN.match(tld):
        return "Invalid domain extension"

    if not _EMAIL_PATTERN.match(trimmed):
        return "Please enter a valid email address"

    return None


def normalize_email(email: str) -> str:
    """
    Validate and normalize an email (trimmed, lowercased).

    Raises:
        ValueError: With the user-facing message if the email is invalid
    """
    error = email_error(email)
    if error:
        raise ValueError(error)
    return email.strip().lower()


def normalize_url(url: str | None) -> str | None:
    """Add https:// to bare webshop links; blank becomes None."""
    if not url or not url.strip():
        return None
    url = url.strip()
    if re.match(r"^https?://", url, re.IGNORECASE):
        return url
    return f"https://{url}"
