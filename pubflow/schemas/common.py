"""
Common schema types used across the API.
"""

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Body of every error response."""

    status: Literal["error"] = "error"
    detail: Any
    context: Optional[Dict[str, Any]] = None


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
    environment: str
    workflows: int
    storage: str
