from pydantic import BaseModel


class ErrorResponse(BaseModel):
    error: str
    error_code: str
