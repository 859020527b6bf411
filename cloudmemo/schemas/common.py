"""
CloudMemo Backend - Shared Response Schemas
=============================================

What:  Error envelope and health report used across all routes.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standardized error body for all API errors.

    Fields:
        error: Machine-readable code (unauthorized, invalid_credentials,
               invalid_payload, not_found, service_unavailable, server_error)
        message: Human-readable description
        details: Optional extra context (e.g. which field failed validation)
        request_id: Correlation ID for tracing this error in server logs

    Example:
        {"error": "not_found", "message": "memo with ID '7' was not found",
         "request_id": "3f2a9c1e"}
    """
    error: str = Field(description="Machine-readable error code")
    message: Optional[str] = Field(default=None, description="Human-readable error description")
    details: Optional[List[Dict[str, Any]]] = Field(
        default=None, description="Per-field problems, each {field, message}"
    )
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health report returned by GET /health."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Relational store: connected, disconnected")
    kv_store: str = Field(description="Key-value store: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
