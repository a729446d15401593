"""
Pydantic models for relay request/response bodies.
"""

from pydantic import BaseModel


class SaveAnalysisRequest(BaseModel):
    session_id: str | None = None
    html: str | None = None
    error: str | None = None


class SaveAnalysisResponse(BaseModel):
    success: bool = True
    session_id: str
    url: str | None = None
    delivered: bool = False


class UploadAcknowledgment(BaseModel):
    success: bool = True
    session_id: str | None = None
    file_count: int = 0


class PendingStatus(BaseModel):
    status: str = "processing"
    message: str = "Análise ainda em processamento"


class FailedStatus(BaseModel):
    status: str = "failed"
    error: str


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
