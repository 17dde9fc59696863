"""Common response schemas."""
from pydantic import BaseModel


class ErrorDetail(BaseModel):
    """Error detail structure."""
    code: str
    message: str


class ErrorResponse(BaseModel):
    """Standard error response returned for a rejected check-in."""
    success: bool = False
    error: ErrorDetail
