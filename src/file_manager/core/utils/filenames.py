"""File name sanitizing and storage token helpers."""

import re
import uuid

from file_manager.core.utils.constants import (
    FALLBACK_FILE_NAME,
    MAX_SANITIZED_NAME_LENGTH,
    MAX_TOKEN_LENGTH,
)

# Characters invalid in a file name on Windows, macOS or Linux, plus control chars
_INVALID_NAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]+')


def _truncate_utf8(text: str, max_bytes: int) -> str:
    """Cut ``text`` to at most ``max_bytes`` UTF-8 bytes on a character boundary."""
    encoded = text.encode("utf-8")
    if len(encoded) <= max_bytes:
        return text
    return encoded[:max_bytes].decode("utf-8", errors="ignore")


def sanitize_file_name(file_name: str) -> str:
    """Make a display name safe to use as a single path component.

    Invalid characters split the name; the remaining pieces are joined
    with ``_``. The result never contains a path separator, is never
    ``.`` or ``..`` and is at most ``MAX_SANITIZED_NAME_LENGTH`` bytes
    when encoded as UTF-8. A short extension survives truncation.

    Example:
        >>> sanitize_file_name("a/../b.txt")
        'a_.._b.txt'
    """
    # lone surrogates cannot be encoded; they become "?" and split like any invalid char
    text = (file_name or "").encode("utf-8", errors="replace").decode("utf-8")
    pieces = [piece for piece in _INVALID_NAME_CHARS.split(text) if piece]
    name = "_".join(pieces).strip().rstrip(". ")

    if len(name.encode("utf-8")) > MAX_SANITIZED_NAME_LENGTH:
        stem, dot, suffix = name.rpartition(".")
        suffix_bytes = len(suffix.encode("utf-8"))
        if dot and stem and 0 < suffix_bytes < 16:
            name = _truncate_utf8(stem, MAX_SANITIZED_NAME_LENGTH - suffix_bytes - 1) + "." + suffix
        else:
            name = _truncate_utf8(name, MAX_SANITIZED_NAME_LENGTH).rstrip(". ")

    if not name or name in {".", ".."}:
        return FALLBACK_FILE_NAME

    return name


def generate_storage_token(file_name: str) -> str:
    """Generate a unique token of the form ``{random_hex}_{sanitized_name}``."""
    return f"{uuid.uuid4().hex}_{sanitize_file_name(file_name)}"


def generate_file_id() -> str:
    """Generate a unique descriptor identifier."""
    return str(uuid.uuid4())


def is_plausible_token(token: object) -> bool:
    """Return True if ``token`` could name a single stored file.

    Tokens produced by another backend, oversized values and anything
    that would escape the storage directory are rejected.
    """
    if not isinstance(token, str) or not token:
        return False

    try:
        encoded = token.encode("utf-8")
    except UnicodeEncodeError:
        return False

    if len(encoded) > MAX_TOKEN_LENGTH:
        return False

    if token in {".", ".."}:
        return False

    return _INVALID_NAME_CHARS.search(token) is None
