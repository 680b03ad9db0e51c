"""
Product API — Pydantic Request/Response Schemas
=================================================

What:  Pydantic models defining the HTTP contract of the products API.
Why:   Strict input validation, automatic serialization, and OpenAPI doc generation.
How:   Request bodies (JSON or form-encoded) are validated against these models
       by the route layer and responses are serialized through them. Validation
       failures are raised as ValidationError and answered with 400.

Design Decision:
    Schemas are separate from the SQLAlchemy model so that the API contract
    controls exactly which fields clients may set (never id or timestamps).
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, field_validator


# ══════════════════════════════════════════════════════════════════════════
# Request Models: what the client sends
# ══════════════════════════════════════════════════════════════════════════


def _clean_name(v: str) -> str:
    stripped = v.strip()
    if not stripped:
        raise ValueError("Product name must not be empty")
    return stripped


class ProductCreate(BaseModel):
    """
    What:  Body of POST /api/products.
    Rules: name is required; quantity and price default to 0 and may not be
           negative; unknown fields are ignored.
    """
    name: str = Field(max_length=255, description="Product name (required)")
    quantity: int = Field(default=0, ge=0, description="Units in stock")
    price: float = Field(default=0, ge=0, allow_inf_nan=False, description="Unit price")
    image: Optional[str] = Field(default=None, description="Image URL or path")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _clean_name(v)


class ProductUpdate(BaseModel):
    """
    What:  Body of PUT /api/products/{id}.
    How:   Every field is optional; only fields present in the body are
           replaced. Explicit nulls are rejected for name, quantity and price
           because the stored record requires them.
    """
    name: Optional[str] = Field(default=None, max_length=255)
    quantity: Optional[int] = Field(default=None, ge=0)
    price: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    image: Optional[str] = Field(default=None)

    @field_validator("name", "quantity", "price")
    @classmethod
    def reject_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} must not be null")
        return v

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _clean_name(v)


# ══════════════════════════════════════════════════════════════════════════
# Response Models: what the API returns
# ══════════════════════════════════════════════════════════════════════════


class ProductResponse(BaseModel):
    """
    Full representation of a stored product.

    Timestamps are always UTC-aware. Backends without timezone support
    (SQLite) hand back naive values, which are stored as UTC anyway.
    """
    id: uuid.UUID = Field(description="Unique product identifier (UUID)")
    name: str
    quantity: int
    price: float
    image: Optional[str] = None
    created_at: datetime = Field(description="When the product was created (UTC)")
    updated_at: datetime = Field(description="When the product was last modified (UTC)")

    model_config = {"from_attributes": True}

    @field_validator("created_at", "updated_at")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)


class DeleteResponse(BaseModel):
    """Confirmation returned by DELETE /api/products/{id}."""
    message: str = Field(default="Product deleted successfully")
    id: uuid.UUID


# ══════════════════════════════════════════════════════════════════════════
# Error / Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.

    Example:
        {
            "error": "not_found",
            "message": "product with ID 'abc' was not found",
            "details": {"resource": "product", "resource_id": "abc"},
            "request_id": "1a2b3c4d"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response showing service and database status."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
