from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ErrorInfo(BaseModel):
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None


class ApiResponse(BaseModel):
    """Error body returned by every exception handler."""
    success: bool = False
    error: ErrorInfo
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def fail(cls, message: str, code: str = "ERROR", details: Optional[Dict[str, Any]] = None) -> "ApiResponse":
        return cls(error=ErrorInfo(code=code, message=message, details=details))

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")
