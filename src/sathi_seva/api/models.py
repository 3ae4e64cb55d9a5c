"""API models for request/response schemas."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from sathi_seva.core.models import JobStatus


class StatusChangeRequest(BaseModel):
    """Request to move a job to a new status."""
    status: JobStatus = Field(..., description="Target job status")


class ApplyRequest(BaseModel):
    """Request to apply to a job."""
    message: Optional[str] = Field(None, description="Optional note to the client")


class DecisionRequest(BaseModel):
    """Client's decision on an application."""
    decision: str = Field(..., description="'accepted' or 'rejected'")


class ProfileUpdateRequest(BaseModel):
    """Editable profile fields; omitted fields are left unchanged."""
    full_name: Optional[str] = Field(None, description="Display name")
    phone: Optional[str] = Field(None, description="Phone number")
    address: Optional[str] = Field(None, description="Free-text address")
    skills: Optional[List[str]] = Field(None, description="Worker skill tags")
    city: Optional[str] = Field(None, description="City")
    state: Optional[str] = Field(None, description="State")
    pincode: Optional[str] = Field(None, description="Postal code")
    locality: Optional[str] = Field(None, description="Locality or area")
    latitude: Optional[float] = Field(None, ge=-90, le=90, description="Latitude")
    longitude: Optional[float] = Field(None, ge=-180, le=180, description="Longitude")


class TagSuggestRequest(BaseModel):
    """Request for tag suggestions."""
    description: str = Field(..., min_length=1, description="Job description")
    title: Optional[str] = Field(None, description="Job title")
    existing_tags: List[str] = Field(default_factory=list, description="Tags already on the draft")


class TagSuggestResponse(BaseModel):
    """Merged tag list for a job draft."""
    tags: List[str] = Field(..., description="Existing tags followed by suggestions")


class HealthCheck(BaseModel):
    """Health check response."""
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Check timestamp")
    version: str = Field(..., description="Service version")
    components: Dict[str, str] = Field(..., description="Component status")


class ErrorResponse(BaseModel):
    """Error response model."""
    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")
    timestamp: datetime = Field(..., description="Error timestamp")
