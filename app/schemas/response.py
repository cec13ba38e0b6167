from pydantic import BaseModel, Field
from typing import Optional, Any


class ErrorResponse(BaseModel):
    """
    Standard error response structure.
    """
    error: str
    code: str
    details: Optional[Any] = None


class MessageResponse(BaseModel):
    """
    Plain confirmation message.
    """
    message: str


class TerminateSessionsResponse(BaseModel):
    message: str
    terminated_count: int = Field(..., alias="terminatedCount")

    class Config:
        populate_by_name = True


class EmailTestResponse(BaseModel):
    success: bool
    message: str
