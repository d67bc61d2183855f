"""API schemas for request/response models."""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class DomainResult(BaseModel):
    """Registrable domain for one URL."""
    url: str
    hostname: str
    registrable_domain: str
    public_suffix: str
    is_public_suffix: bool = Field(..., description="The host itself is a public suffix, not a registrable name")


class BatchLookupRequest(BaseModel):
    """Request model for batch lookups."""
    urls: List[str] = Field(..., min_length=1, max_length=1000, description="URLs or hostnames to resolve")


class IndexStats(BaseModel):
    """Loaded index information."""
    loaded: bool
    rule_count: Optional[int] = None
    node_count: Optional[int] = None
    built_at: Optional[datetime] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    index: IndexStats


class ErrorResponse(BaseModel):
    """Error response model."""
    error: str
    detail: Optional[str] = None
