"""Common schemas for API responses."""

from pydantic import BaseModel


class MessageResponse(BaseModel):
    """Response with message only."""

    success: bool = True
    message: str
