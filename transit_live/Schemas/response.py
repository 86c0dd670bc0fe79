# transit_live/Schemas/response.py
from pydantic import BaseModel
from typing import Any, Optional


class Api_response(BaseModel):
    """
    Success envelope shared by every endpoint.

    Errors use the TrackingError body instead:
    {"success": false, "error": <code>, "detail": <message>}
    """
    success: bool = True
    data: Any = None
    message: Optional[str] = None
