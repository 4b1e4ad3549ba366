"""Common utilities: name validation, text decoding and path management"""
import re
import os
from pathlib import Path
import logging

from core.exceptions import ValidationError

# ⚠️ DO NOT import settings here - causes circular import with config.py
# Settings is imported lazily inside functions that need it

def _get_logger():
    """Lazy logger initialization to avoid circular import"""
    from config import settings
    return logging.getLogger(settings.LOGGER_NAME)


# ============= Path Management =============

def get_project_root() -> str:
    """Returns the absolute path to the project's root directory."""
    return os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))


def get_log_file_path() -> str:
    """Creates the log directory if it doesn't exist and returns the full log file path."""
    project_root = get_project_root()
    log_dir = os.path.join(project_root, 'log')

    if not os.path.exists(log_dir):
        os.makedirs(log_dir, exist_ok=True)

    return os.path.join(log_dir, 'recommendation_review.log')


# ============= Name Validation =============

_UNSAFE_NAME = re.compile(r'[\\/\x00]|^\.{1,2}$')


def validate_name(value: str, label: str) -> str:
    """Strip a folder/document name and reject empty or path-like values."""
    name = (value or "").strip()
    if not name:
        raise ValidationError(f"{label} name must not be empty")
    if _UNSAFE_NAME.search(name):
        raise ValidationError(f"Invalid {label.lower()} name: {value!r}")
    return name


def validate_upload(filename: str, size: int) -> None:
    """Validate upload name, type and size. Raises ValidationError on failure."""
    from config import settings  # Lazy import

    validate_name(filename, "File")

    extension = get_file_extension(filename)
    if extension not in settings.ALLOWED_FILE_EXTENSIONS:
        raise ValidationError(
            f"Unsupported file type. Allowed: {', '.join(settings.ALLOWED_FILE_EXTENSIONS)}"
        )

    if size > settings.MAX_FILE_SIZE:
        max_mb = settings.MAX_FILE_SIZE // 1024 // 1024
        raise ValidationError(f"File too large. Max size: {max_mb}MB")


# ============= File Utilities =============

def get_file_extension(filename: str) -> str:
    """Extracts and normalizes the file extension from a filename."""
    return Path(filename).suffix[1:].lower()


def decode_text(content: bytes) -> str:
    """Decode uploaded bytes as text, tolerating a BOM and invalid sequences."""
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError:
        _get_logger().warning("Document is not valid UTF-8, replacing undecodable bytes")
        return content.decode("utf-8", errors="replace")


def modified_file_name(document_name: str) -> str:
    """Suggested name for a regenerated document, e.g. spec.docx -> spec_modified.txt"""
    from config import settings  # Lazy import

    stem = Path(document_name).stem or document_name
    return f"{stem}{settings.MODIFIED_FILE_SUFFIX}{settings.MODIFIED_FILE_EXTENSION}"


def truncate(text: str, limit: int) -> str:
    """Cut text to limit characters, marking the cut."""
    if len(text) <= limit:
        return text
    return text[:limit] + "\n[...truncated]"
