from config import settings
from estimation.descriptor import describe_image
from estimation.estimator import ImageDescriptor
from exceptions import FileTooLargeError, UnsupportedFormatError
from utils.format_detect import is_pdf


def check_size(data: bytes) -> None:
    """Raise FileTooLargeError if data exceeds max_file_size_mb."""
    if len(data) > settings.max_file_size_bytes:
        raise FileTooLargeError(
            f"File size {len(data)} bytes exceeds limit of {settings.max_file_size_mb} MB",
            file_size=len(data),
            limit=settings.max_file_size_bytes,
        )


def validate_image(data: bytes) -> ImageDescriptor:
    """Validate size and decodability of an uploaded image.

    Returns:
        ImageDescriptor for the upload.

    Raises:
        FileTooLargeError: If file exceeds max_file_size_mb.
        UnsupportedFormatError: If Pillow cannot read the file.
    """
    check_size(data)
    if is_pdf(data):
        raise UnsupportedFormatError("PDF uploads go to /upload-pdf")
    return describe_image(data)


def validate_pdf(data: bytes) -> None:
    """Validate size and PDF magic of an uploaded document."""
    check_size(data)
    if not is_pdf(data):
        raise UnsupportedFormatError(
            "File is not a PDF",
            detected_bytes=data[:16].hex(),
        )
