"""
Pydantic models for API response schemas
"""
from pydantic import BaseModel, Field
from typing import Dict, Optional


class RootResponse(BaseModel):
    """Service banner"""
    message: str = Field(..., description="Service message", examples=["Document Relay"])


class UsageStats(BaseModel):
    """Outbound API usage for a time range"""
    total_requests: int = Field(..., description="Total number of outbound API calls")
    total_errors: int = Field(..., description="Total number of failed calls")
    api_breakdown: Dict[str, Dict[str, int]] = Field(default_factory=dict, description="Totals and errors per API")


class HealthStatusResponse(BaseModel):
    """Detailed health status response"""
    status: str = Field(..., description="Service status", examples=["ok"])
    mode: str = Field(..., description="Transport mode: webhook or polling")
    stats: Dict[str, UsageStats] = Field(..., description="Usage statistics by time range")


class WebhookAck(BaseModel):
    """Webhook acknowledgement returned to Telegram"""
    ok: bool = Field(..., description="Whether the update was accepted")
    error: Optional[str] = Field(default=None, description="Error detail when not accepted")
