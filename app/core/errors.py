from typing import Any, Dict, Optional

from fastapi import HTTPException, status

LOCATION_REQUIRED = "Location is required"
RATE_LIMIT_MESSAGE = "Has hecho demasiadas solicitudes. Espera 1 minuto y vuelve a intentarlo."


class APIError(HTTPException):
    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        super().__init__(status_code=status_code, detail=message, headers=headers)
        self.code = code
        self.details = details

    def content(self) -> Dict[str, Any]:
        return error_content(self.code, str(self.detail), self.details)


class ValidationError(APIError):
    def __init__(self, message: str = LOCATION_REQUIRED, code: str = "location_required"):
        super().__init__(status.HTTP_400_BAD_REQUEST, code, message)

    def content(self) -> Dict[str, Any]:
        # 400 bodies carry only the human readable error
        return {"error": str(self.detail)}


class RateLimitError(APIError):
    def __init__(self, retry_after_seconds: int, message: str = RATE_LIMIT_MESSAGE):
        super().__init__(
            status.HTTP_429_TOO_MANY_REQUESTS,
            "rate_limit_exceeded",
            message,
            {"resetTime": retry_after_seconds},
            headers={"Retry-After": str(retry_after_seconds)},
        )
        self.retry_after_seconds = retry_after_seconds


def error_content(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    content: Dict[str, Any] = {"error": code, "message": message}
    if details:
        content.update(details)
    return content
