from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


class EstimateRequest(BaseModel):
    """JSON body for descriptor-only estimation (no upload)."""

    format: str
    width: Optional[int] = Field(default=None, gt=0)
    height: Optional[int] = Field(default=None, gt=0)
    byte_size: int = Field(..., ge=0)
    level: Optional[str] = None
    target_format: Optional[str] = None


class EstimateResponse(BaseModel):
    """Response from the /estimate endpoint."""

    original_format: str
    target_format: str
    dimensions: dict
    level: str
    original_size: int
    estimated_size: int
    estimated_reduction_percent: int


class TranscodeResult(BaseModel):
    """Internal result passed between transcoder and response formatter."""

    original_size: int
    output_size: int
    reduction_percent: float
    format: str
    method: str
    quality: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None
    output_bytes: bytes = b""


class JobResponse(BaseModel):
    """Response for every processing route."""

    success: bool = True
    job_id: str
    filename: str
    download_url: str
    original_size: int
    compressed_size: int
    format: str
    level: str
    operation: str
    quality: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None
    # compress only
    estimated_size: Optional[int] = None
    estimated_reduction: Optional[int] = None
    actual_reduction: Optional[float] = None
    accuracy_percent: Optional[float] = None


class Job(BaseModel):
    """Record of one processed upload."""

    job_id: str
    client_id: str
    type: str
    status: str = "pending"
    input_name: str
    output_name: Optional[str] = None
    output_path: Optional[str] = None
    original_size: int = 0
    compressed_size: Optional[int] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class UserSettings(BaseModel):
    default_quality: str = "medium"
    auto_download: bool = False
    keep_original: bool = True
    email_notifications: bool = True
    compression_alerts: bool = True


class UserSettingsUpdate(BaseModel):
    """Partial settings update; omitted fields keep their value."""

    default_quality: Optional[str] = None
    auto_download: Optional[bool] = None
    keep_original: Optional[bool] = None
    email_notifications: Optional[bool] = None
    compression_alerts: Optional[bool] = None


class HistoryEntry(BaseModel):
    type: str
    input_name: str
    original_size: int
    compressed_size: Optional[int] = None
    created_at: datetime
    status: str


class UserExport(BaseModel):
    client_id: str
    settings: UserSettings
    history: list[HistoryEntry]
    export_date: datetime


class AdminStats(BaseModel):
    total_clients: int
    total_files_processed: int
    total_storage_used: int
    total_bytes_saved: int
    jobs_by_type: dict[str, int]


class ActivityEntry(BaseModel):
    type: str
    client_id: str
    file_name: str
    status: str
    timestamp: datetime


class ClientSummary(BaseModel):
    """One row of the admin client listing."""

    client_id: str
    files_processed: int
    last_activity: datetime


class ErrorResponse(BaseModel):
    """Standard error response."""

    success: bool = False
    error: str
    message: str


class HealthResponse(BaseModel):
    """GET /health response."""

    status: str = "ok"
    codecs: dict
    version: str
