"""
Upload validation for report and prescription files.

Runs before any network call:
- Content type must be a supported image or PDF
- Size must not exceed the configured limit (10 MiB by default)
"""

import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union

from clinical_client.config import get_settings
from clinical_client.errors import ValidationError


@dataclass(frozen=True)
class UploadFile:
    """A file ready to be sent as multipart form data."""
    filename: str
    content: bytes
    content_type: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def resolved_content_type(self) -> str:
        """Declared content type, or one guessed from the filename."""
        if self.content_type:
            return self.content_type.lower()
        guessed, _ = mimetypes.guess_type(self.filename)
        return guessed or "application/octet-stream"

    def as_multipart(self) -> Tuple[str, bytes, str]:
        return (self.filename, self.content, self.resolved_content_type)

    @classmethod
    def from_path(cls, path: Union[str, Path], content_type: Optional[str] = None) -> "UploadFile":
        path = Path(path)
        return cls(filename=path.name, content=path.read_bytes(), content_type=content_type)


class UploadValidator:
    """
    Validates files before upload.

    Rejections raise ValidationError; nothing is sent.
    """

    IMAGE_MIME_TYPES = {
        "image/jpeg",
        "image/jpg",
        "image/png",
        "image/webp",
    }
    PDF_MIME_TYPES = {"application/pdf"}

    def __init__(self, max_file_size: Optional[int] = None):
        self.max_file_size = max_file_size or get_settings().max_upload_bytes

    @property
    def allowed_types(self) -> set:
        return self.IMAGE_MIME_TYPES | self.PDF_MIME_TYPES

    def validate_type(self, upload: UploadFile) -> bool:
        """
        Raises:
            ValidationError: If the content type is not an allowed image or PDF
        """
        if upload.resolved_content_type not in self.allowed_types:
            raise ValidationError(
                "Invalid file type. Please upload an image (JPG, PNG, WebP) or PDF file.",
                error_code="INVALID_FILE_TYPE",
            )
        return True

    def validate_size(self, upload: UploadFile) -> bool:
        """
        Raises:
            ValidationError: If the file is larger than the limit
        """
        if upload.size > self.max_file_size:
            limit_mb = self.max_file_size // (1024 * 1024)
            raise ValidationError(
                f"File size exceeds {limit_mb}MB limit. Please upload a smaller file.",
                error_code="FILE_TOO_LARGE",
            )
        return True

    def validate(self, upload: UploadFile) -> UploadFile:
        """Run every check; returns the upload unchanged when it passes."""
        self.validate_type(upload)
        self.validate_size(upload)
        return upload
