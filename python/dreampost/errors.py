"""API error definitions.

All API errors are defined here with their corresponding HTTP status codes.
Generator (upstream) failures are not listed: they never reach the caller.
"""

from enum import Enum


class ApiErrorCode(str, Enum):
    """Standardized error codes for the API.

    Format: E_CATEGORY_NAME
    """

    # Not found errors (404)
    E_NOT_FOUND = "E_NOT_FOUND"
    E_POSTCARD_NOT_FOUND = "E_POSTCARD_NOT_FOUND"
    E_USER_NOT_FOUND = "E_USER_NOT_FOUND"

    # Validation errors (400)
    E_INVALID_REQUEST = "E_INVALID_REQUEST"
    E_UNKNOWN_USER = "E_UNKNOWN_USER"
    E_INVALID_TIMEZONE = "E_INVALID_TIMEZONE"
    E_SELF_TRADE = "E_SELF_TRADE"

    # Conflict errors (409)
    E_USERNAME_TAKEN = "E_USERNAME_TAKEN"

    # Server errors
    E_INTERNAL = "E_INTERNAL"  # 500


# Error code to HTTP status mapping
ERROR_CODE_TO_STATUS: dict[ApiErrorCode, int] = {
    ApiErrorCode.E_NOT_FOUND: 404,
    ApiErrorCode.E_POSTCARD_NOT_FOUND: 404,
    ApiErrorCode.E_USER_NOT_FOUND: 404,
    ApiErrorCode.E_INVALID_REQUEST: 400,
    ApiErrorCode.E_UNKNOWN_USER: 400,
    ApiErrorCode.E_INVALID_TIMEZONE: 400,
    ApiErrorCode.E_SELF_TRADE: 400,
    ApiErrorCode.E_USERNAME_TAKEN: 409,
    ApiErrorCode.E_INTERNAL: 500,
}


class ApiError(Exception):
    """Base exception for API errors.

    Attributes:
        code: The error code enum value
        message: Human-readable error message
        status_code: HTTP status code (derived from code)
    """

    def __init__(self, code: ApiErrorCode, message: str):
        self.code = code
        self.message = message
        self.status_code = ERROR_CODE_TO_STATUS.get(code, 500)
        super().__init__(message)


class NotFoundError(ApiError):
    """Resource not found error."""

    def __init__(self, code: ApiErrorCode = ApiErrorCode.E_NOT_FOUND, message: str = "Not found"):
        super().__init__(code, message)


class InvalidRequestError(ApiError):
    """Invalid request error."""

    def __init__(
        self, code: ApiErrorCode = ApiErrorCode.E_INVALID_REQUEST, message: str = "Invalid request"
    ):
        super().__init__(code, message)


class ConflictError(ApiError):
    """Resource state conflict error."""

    def __init__(self, code: ApiErrorCode, message: str = "Conflict"):
        super().__init__(code, message)
