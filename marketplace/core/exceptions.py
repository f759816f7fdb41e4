"""Domain exceptions raised by the mutation engine."""

from typing import Any, Dict, Optional

from fastapi import status


class MarketplaceError(Exception):
    """Base domain exception.

    Carries the HTTP status the API layer answers with, so the engine never
    has to import anything from the web framework beyond status codes.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: str = "Unexpected error"

    def __init__(self, detail: Optional[str] = None, payload: Optional[Dict[str, Any]] = None):
        self.detail = detail or self.default_detail
        self.payload = payload
        super().__init__(self.detail)

    def to_response(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "success": False,
            "error": type(self).__name__,
            "message": self.detail,
        }
        if self.payload:
            body["payload"] = self.payload
        return body


class NotFoundError(MarketplaceError):
    """Referenced or target entity does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Resource not found"


class ConflictError(MarketplaceError):
    """Uniqueness violation."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = "Resource already exists"


class ValidationError(MarketplaceError):
    """Malformed input the request schema cannot catch."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid input data"


class InternalError(MarketplaceError):
    """Unexpected store failure."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Unexpected error. Please try again later"
