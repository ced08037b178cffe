from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class UnauthorizedError(HTTPException):
    """Bad credentials or an invalid/expired token."""

    def __init__(self, detail: Any = "Unauthorized", headers: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(status.HTTP_401_UNAUTHORIZED, detail, headers)


class UnauthenticatedError(HTTPException):
    """No identity attached to the request."""

    def __init__(self, detail: Any = "Not authenticated", headers: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            status.HTTP_401_UNAUTHORIZED,
            detail,
            headers or {"WWW-Authenticate": "Bearer"},
        )


class ForbiddenError(HTTPException):
    def __init__(self, detail: Any = "Forbidden", headers: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(status.HTTP_403_FORBIDDEN, detail, headers)


class NotFoundError(HTTPException):
    def __init__(self, detail: Any = "Not found", headers: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(status.HTTP_404_NOT_FOUND, detail, headers)


class ConflictError(HTTPException):
    def __init__(self, detail: Any = "Conflict", headers: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(status.HTTP_409_CONFLICT, detail, headers)


class ValidationError(HTTPException):
    def __init__(self, detail: Any = "Invalid request", headers: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(status.HTTP_400_BAD_REQUEST, detail, headers)


class MissingRequiredClaimError(HTTPException):
    """The identity provider did not supply a claim we need (email, id)."""

    def __init__(self, detail: Any = "Missing required claim", headers: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(status.HTTP_400_BAD_REQUEST, detail, headers)


class InternalError(HTTPException):
    def __init__(self, detail: Any = "Internal server error", headers: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(status.HTTP_500_INTERNAL_SERVER_ERROR, detail, headers)


class NotImplementedFeatureError(HTTPException):
    def __init__(self, detail: Any = "Not implemented", headers: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(status.HTTP_501_NOT_IMPLEMENTED, detail, headers)


class TokenSigningError(Exception):
    """Raised when a token cannot be produced (bad key, bad algorithm)."""
