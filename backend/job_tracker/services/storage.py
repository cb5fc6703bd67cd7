"""
Resume file storage.

Files are validated by extension and size, then written under a per-user
directory with a random name. The returned URL is what gets stored on the
application as ``resume_url``.
"""
import logging
import uuid
from pathlib import Path

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {"jpeg", "jpg", "png", "pdf", "doc", "docx"}


class InvalidUpload(ValueError):
    """The uploaded file was rejected before being stored."""


def validate_file_type(filename: str) -> str:
    """
    Validate file type based on extension

    Args:
        filename: Name of uploaded file

    Returns:
        str: Lower-cased file extension

    Raises:
        InvalidUpload: If file type is not allowed
    """
    extension = Path(filename or "").suffix.lower().lstrip(".")
    if extension not in ALLOWED_EXTENSIONS:
        raise InvalidUpload(
            "Invalid file type. Only images, PDFs, and Word documents are allowed."
        )
    return extension


def validate_file_size(file_size: int, max_bytes: int) -> None:
    """
    Validate file size

    Raises:
        InvalidUpload: If the file is empty or exceeds the maximum
    """
    if file_size == 0:
        raise InvalidUpload("Uploaded file is empty")
    if file_size > max_bytes:
        max_size_mb = max_bytes / (1024 * 1024)
        raise InvalidUpload(f"File size exceeds maximum allowed size of {max_size_mb:g}MB")


def generate_unique_filename(extension: str) -> str:
    return f"{uuid.uuid4()}.{extension}"


class LocalResumeStorage:
    """Stores resumes on local disk and serves them from ``public_base_url``."""

    def __init__(self, upload_dir: str | Path, public_base_url: str, max_bytes: int):
        self.upload_dir = Path(upload_dir)
        self.public_base_url = public_base_url.rstrip("/")
        self.max_bytes = max_bytes

    def save(self, user_id: int, filename: str, contents: bytes) -> str:
        """Validate and persist a resume, returning its public URL."""
        extension = validate_file_type(filename)
        validate_file_size(len(contents), self.max_bytes)

        user_dir = self.upload_dir / str(user_id)
        user_dir.mkdir(parents=True, exist_ok=True)

        unique_filename = generate_unique_filename(extension)
        (user_dir / unique_filename).write_bytes(contents)
        logger.info("Stored resume %s for user %d (%d bytes)", unique_filename, user_id, len(contents))

        return f"{self.public_base_url}/{user_id}/{unique_filename}"
