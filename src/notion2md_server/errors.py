# ABOUTME: Error taxonomy shared by the Notion client, converters and HTTP layer.
# ABOUTME: Each error class carries the HTTP status it is reported with.


class Notion2MdError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500


class NotFoundError(Notion2MdError):
    """Raised when a page or database id does not exist upstream."""

    status_code = 404


class AuthError(Notion2MdError):
    """Raised when the Notion token is missing or rejected."""

    status_code = 401


class ValidationError(Notion2MdError):
    """Raised for malformed ids or pagination parameters."""

    status_code = 400


class TransientError(Notion2MdError):
    """Raised when Notion is unreachable, times out or keeps rate limiting."""

    status_code = 500


class UnsupportedPropertyError(Notion2MdError):
    """Raised when a property has a type the coercion engine does not know."""

    status_code = 500
