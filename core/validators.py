"""
Input validation and normalization utilities.
"""
import os
import re
from pathlib import Path
from typing import Optional, Tuple

# Stored form is "<V|E>-<digits>" in a 20-character column
CEDULA_MAX_DIGITS = 18
CEDULA_PATTERN = re.compile(r"^([VE])?[-\s.]?(\d{1,%d})$" % CEDULA_MAX_DIGITS)


def normalize_cedula(value: str) -> str:
    """
    Normalize a cedula to "<prefix>-<digits>", uppercased.

    "12345678" -> "V-12345678", "e-8765432" -> "E-8765432",
    "V12345678" / "E 1234" -> "V-12345678" / "E-1234".
    A value without a "V"/"E" prefix is treated as a citizen ("V").

    Raises:
        ValueError: Blank value, or not a prefix followed by 1-18 digits
    """
    if value is None:
        raise ValueError("Cedula is required")
    cedula = value.strip().upper()
    if not cedula:
        raise ValueError("Cedula is required")
    match = CEDULA_PATTERN.match(cedula)
    if match is None:
        raise ValueError(f"Cedula must be an optional V/E prefix followed by at most {CEDULA_MAX_DIGITS} digits")
    prefix, digits = match.groups()
    return f"{prefix or 'V'}-{digits}"


def sanitize_filename(filename: str) -> str:
    """
    Sanitize filename to prevent path traversal attacks.

    Args:
        filename: Original filename

    Returns:
        Sanitized filename safe for use
    """
    if not filename:
        raise ValueError("Filename cannot be empty")

    filename = os.path.basename(filename)

    # Keep alphanumeric, dots, dashes, underscores
    sanitized = "".join(
        char if (char.isalnum() or char in "._-") else "_"
        for char in filename
    )

    if len(sanitized) > 255:
        sanitized = sanitized[:255]

    if not sanitized.strip("._"):
        raise ValueError("Filename became empty after sanitization")

    return sanitized


def validate_image_extension(filename: Optional[str], allowed_extensions: set) -> bool:
    """
    Validate file extension.

    Args:
        filename: Filename to check
        allowed_extensions: Set of allowed extensions (e.g., {".jpg", ".png"})

    Returns:
        True if extension is allowed
    """
    if not filename:
        return False

    ext = Path(filename).suffix.lower()
    return ext in allowed_extensions


def validate_file_size(file_size: int, max_size_bytes: int) -> Tuple[bool, Optional[str]]:
    """
    Validate file size.

    Args:
        file_size: File size in bytes
        max_size_bytes: Maximum allowed size in bytes

    Returns:
        Tuple of (is_valid, error_message)
    """
    if file_size <= 0:
        return False, "File is empty"

    if file_size > max_size_bytes:
        max_size_mb = max_size_bytes / (1024 * 1024)
        actual_size_mb = file_size / (1024 * 1024)
        return False, f"File too large: {actual_size_mb:.2f}MB (max: {max_size_mb:.2f}MB)"

    return True, None


def escape_like(value: str, escape_char: str = "\\") -> str:
    """Escape LIKE wildcards so user input matches literally."""
    return (
        value.replace(escape_char, escape_char * 2)
        .replace("%", f"{escape_char}%")
        .replace("_", f"{escape_char}_")
    )
