from pydantic import BaseModel
from typing import Any, Optional


class ApiResponse(BaseModel):
    """Envelope every endpoint answers with"""
    success: bool
    message: Optional[str] = None
    data: Optional[Any] = None
    count: Optional[int] = None

    def __init__(self, success: bool = True, **fields):
        # Routes serialize with exclude_unset; success must always be sent
        super().__init__(success=success, **fields)
