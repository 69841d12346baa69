"""
Utility functions for the Synergie Mail service.
Provides helpers for email addresses and log readability.
"""

import re
from email.utils import parseaddr
from typing import Any, Optional, Tuple

# Pré-compilé pour éviter de recréer la regex à chaque appel.
_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_ANGLE_ADDR_RE = re.compile(r"<([^>]+)>")


def format_email_address(email: str, name: Optional[str] = None) -> str:
    """
    Format an address for a From/To header.

    Args:
        email: Bare email address
        name: Optional display name

    Returns:
        str: '"Name" <email>' when a name is given, else the bare address.
    """
    if name:
        return f'"{name}" <{email}>'
    return email


def extract_email_address(address: Optional[str]) -> str:
    """Return the bare address from '"Name" <addr>' (or the input unchanged)."""
    if not address:
        return ""
    match = _ANGLE_ADDR_RE.search(address)
    return match.group(1).strip() if match else address.strip()


def split_address(header_value: Optional[str]) -> Tuple[str, str]:
    """
    Split a decoded address header into (name, email).

    Returns:
        Tuple[str, str]: ("", "") when the header is empty.
    """
    if not header_value:
        return "", ""
    name, addr = parseaddr(header_value)
    return name.strip().strip('"'), addr.strip()


def validate_email(email: Optional[str]) -> bool:
    return bool(email) and bool(_EMAIL_RE.match(email.strip()))


def add_signature(content: str, signature: Optional[str]) -> str:
    """Append the account signature (raw HTML/text) to the content."""
    if signature:
        return content + signature
    return content


def truncate_log(
    content: Any,
    head: int = 5,
    tail: int = 3,
    max_line_length: int = 500,
) -> str:
    """
    Truncate log content for readability.
    Keeps first N and last M lines, truncates long lines.

    Args:
        content: Log content to truncate (any type, converted to str)
        head: Number of lines to keep at start (default: 5)
        tail: Number of lines to keep at end (default: 3)
        max_line_length: Maximum length per line (default: 500)

    Returns:
        str: Truncated log content
    """
    if not isinstance(content, str):
        content = str(content)

    lines = [
        line[:max_line_length] + " ... [TRONQUÉ] ..." if len(line) > max_line_length else line
        for line in content.splitlines()
    ]

    # Rien ou peu de lignes : on renvoie tel quel
    if len(lines) <= head + tail + 1:
        return "\n".join(lines)

    hidden_count = len(lines) - (head + tail)

    return (
        "\n".join(lines[:head])
        + f"\n... [{hidden_count} LIGNES MASQUÉES] ...\n"
        + "\n".join(lines[-tail:])
    )
