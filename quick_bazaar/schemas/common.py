"""
Common schemas used across the API.
"""
from typing import Any, Dict

from pydantic import BaseModel, Field

# Documents are passed through without schema enforcement
Document = Dict[str, Any]


class HealthCheckResponse(BaseModel):
    """Response schema for health check endpoint."""
    status: str = Field(..., description="Application health status")
    database: str = Field(..., description="Database connection status")
    timestamp: str = Field(..., description="Health check timestamp")
    version: str = Field(..., description="Application version")


class InsertOneResponse(BaseModel):
    """Result of inserting one document."""
    acknowledged: bool = Field(..., description="Whether the write was acknowledged")
    insertedId: Any = Field(..., description="Identifier assigned to the new document")


class DeleteOneResponse(BaseModel):
    """Result of deleting one document."""
    acknowledged: bool = Field(..., description="Whether the write was acknowledged")
    deletedCount: int = Field(..., description="Number of documents removed")
