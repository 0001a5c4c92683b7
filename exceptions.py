class ShrinkrayError(Exception):
    """Base exception for all Shrinkray errors."""

    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(self, message: str, **kwargs):
        self.message = message
        self.details = kwargs
        super().__init__(message)


class BadRequestError(ShrinkrayError):
    """Malformed request body, invalid JSON, missing required fields."""

    status_code = 400
    error_code = "bad_request"


class AuthenticationError(ShrinkrayError):
    """Invalid or missing API key."""

    status_code = 401
    error_code = "unauthorized"


class ForbiddenError(ShrinkrayError):
    """Authenticated, but not allowed (admin-only routes)."""

    status_code = 403
    error_code = "forbidden"


class NotFoundError(ShrinkrayError):
    """Job or stored file does not exist for this client."""

    status_code = 404
    error_code = "not_found"


class FileTooLargeError(ShrinkrayError):
    """File exceeds maximum allowed size."""

    status_code = 413
    error_code = "file_too_large"


class UnsupportedFormatError(ShrinkrayError):
    """File is not an image or PDF we can decode."""

    status_code = 415
    error_code = "unsupported_format"


class TranscodeError(ShrinkrayError):
    """Encoding failed (corrupt input, codec missing, etc.)."""

    status_code = 422
    error_code = "transcode_failed"


class BackpressureError(ShrinkrayError):
    """Transcode queue is full."""

    status_code = 503
    error_code = "service_overloaded"
