"""Validation helpers for attachment metadata returned by the file-upload service."""

from decimal import Decimal
from typing import Any, Mapping
from urllib.parse import urlparse

from django.conf import settings

from InternshipApp.core.exceptions import ValidationError

DEFAULT_ALLOWED_ATTACHMENT_MIME: set[str] = {
    "image/jpeg",
    "image/png",
    "image/webp",
    "application/pdf",
}

# Upload service payloads use camelCase keys.
_KEY_ALIASES = {"sizeBytes": "size_bytes", "mimeType": "mime_type"}


def _max_bytes() -> int:
    return int(getattr(settings, "ATTACHMENT_MAX_BYTES", 4.5 * 1024 * 1024))


def _allowed_mime() -> set[str]:
    return set(getattr(settings, "ALLOWED_ATTACHMENT_MIME", DEFAULT_ALLOWED_ATTACHMENT_MIME))


def validate_file_size(size_bytes: int | None, field: str = "files") -> None:
    """Ensure the declared size is non-negative and within the configured limit."""
    if size_bytes is None:
        return
    if size_bytes < 0:
        raise ValidationError(field, "File size cannot be negative.")
    limit = _max_bytes()
    if size_bytes > limit:
        raise ValidationError(field, f"File exceeds {limit} bytes limit.")


def validate_attachment_mime(mime_type: str | None, field: str = "files") -> None:
    """Validate that the declared MIME type is in the allowed set."""
    if mime_type and mime_type not in _allowed_mime():
        raise ValidationError(field, f"Unsupported attachment mime: {mime_type}")


def validate_file_url(url: str, field: str = "files") -> None:
    """Ensure URL is an absolute http(s) URL."""
    result = urlparse(url or "")
    if result.scheme not in ("http", "https") or not result.netloc:
        raise ValidationError(field, f"Invalid file URL: {url!r}")


def _text(data: Mapping[str, Any], key: str, field: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(field, f"File {key} must be a string, got {value!r}.")
    return value.strip()


def _size(value: Any, field: str) -> int | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError(field, f"Invalid file size: {value!r}")
    try:
        size = Decimal(str(value))
    except ArithmeticError:
        raise ValidationError(field, f"Invalid file size: {value!r}")
    if not size.is_finite() or size != size.to_integral_value():
        raise ValidationError(field, f"File size must be a whole number of bytes: {value!r}")
    return int(size)


def clean_attachment(raw: Mapping[str, Any], field: str = "files") -> dict[str, Any]:
    """Normalise one attachment descriptor to ``url/filename/size_bytes/mime_type``."""
    if not isinstance(raw, Mapping):
        raise ValidationError(field, "Each file must be an object with url and filename.")
    data = {_KEY_ALIASES.get(key, key): value for key, value in raw.items()}
    url = _text(data, "url", field)
    filename = _text(data, "filename", field)
    if not filename:
        raise ValidationError(field, "Each file needs a filename.")
    validate_file_url(url, field)
    size_bytes = _size(data.get("size_bytes"), field)
    validate_file_size(size_bytes, field)
    mime_type = _text(data, "mime_type", field) or None
    validate_attachment_mime(mime_type, field)
    return {"url": url, "filename": filename, "size_bytes": size_bytes, "mime_type": mime_type}


def clean_attachments(raw_files: Any, field: str = "files", required: bool = False) -> list[dict[str, Any]]:
    """Validate a list of attachment descriptors; optionally require at least one."""
    if raw_files is None:
        raw_files = []
    if isinstance(raw_files, (str, bytes, Mapping)) or not hasattr(raw_files, "__iter__"):
        raise ValidationError(field, "Files must be a list.")
    cleaned = [clean_attachment(item, field) for item in raw_files]
    if required and not cleaned:
        raise ValidationError(field, "At least one file attachment is required.")
    return cleaned
