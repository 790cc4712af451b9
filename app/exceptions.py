"""
Application Exceptions
Errors raised by the pass services; routes translate them to HTTP errors
"""


class PassPortalError(Exception):
    """Base exception for all bus pass portal errors."""

    pass


class InvalidStudentIdError(PassPortalError, ValueError):
    """Raised when pass validity is requested without a usable student id."""

    def __init__(self, student_id):
        self.student_id = student_id
        super().__init__(f"Student id must be a non-empty string, got {student_id!r}")


class UnknownPassSourceError(PassPortalError):
    """Raised when a collection outside the configured pass sources is addressed."""

    def __init__(self, source_id: str):
        self.source_id = source_id
        super().__init__(f"Unknown pass source '{source_id}'")


class PassSourceReadError(PassPortalError):
    """Raised when a single pass source cannot be read."""

    action = "read"

    def __init__(self, source_id: str, reason: str = ""):
        self.source_id = source_id
        self.reason = reason
        message = f"Failed to {self.action} pass source '{source_id}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class PassSourceWriteError(PassSourceReadError):
    """Raised when a write to a single pass source fails."""

    action = "write"


class PassRequestNotFoundError(PassPortalError):
    """Raised when a pass request id does not exist in its source."""

    def __init__(self, source_id: str, request_id: str):
        self.source_id = source_id
        self.request_id = request_id
        super().__init__(f"Pass request '{request_id}' not found in '{source_id}'")
