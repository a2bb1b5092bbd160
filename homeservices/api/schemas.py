"""
API Schemas for HomeServices

Pydantic models for request validation and response documentation:
- Product models
- User models
- Home info models
- Quote models

Field names are the snake_case storage keys, so request bodies map straight
onto `Model.from_dict`.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from homeservices.storage.models import ProductType, RoomSize
from homeservices.validation import validate_email, validate_phone_number


# =============================================================================
# Product Schemas
# =============================================================================

class ProductIn(BaseModel):
    """Product create/replace request. Every field is replaced on update."""

    image_url: Optional[str] = None
    price_hourly: float = Field(..., ge=0)
    price_square_foot: float = Field(..., ge=0)
    product_description: str
    title: str = Field(..., min_length=1, max_length=255)
    type: ProductType

    model_config = ConfigDict(
        allow_inf_nan=False,
        json_schema_extra={
            "example": {
                "title": "Paint",
                "price_hourly": 50,
                "price_square_foot": 2,
                "product_description": "Interior wall painting",
                "type": "home",
            }
        }
    )


class ProductResponse(BaseModel):
    """Product response model."""

    id: int
    image_url: Optional[str] = None
    price_hourly: float
    price_square_foot: float
    product_description: str
    title: str
    type: ProductType


# =============================================================================
# User Schemas
# =============================================================================

class UserRegister(BaseModel):
    """Public registration request. `admin` cannot be set here."""

    email: str
    first_name: str = Field(..., min_length=1, max_length=255)
    last_name: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)
    phone_number: str

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return validate_email(value)

    @field_validator("phone_number")
    @classmethod
    def check_phone_number(cls, value: str) -> str:
        return validate_phone_number(value)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "jane@example.com",
                "first_name": "Jane",
                "last_name": "Doe",
                "password": "correct horse",
                "phone_number": "5551234567",
            }
        }
    )


class UserResponse(BaseModel):
    """Public user view (no password)."""

    id: int
    email: str
    first_name: str
    last_name: str
    phone_number: str
    admin: bool = False


# =============================================================================
# Home Info Schemas
# =============================================================================

class HomeInfoIn(BaseModel):
    """Home info upsert request."""

    bathroom_count: int = Field(..., ge=0)
    bedroom_count: int = Field(..., ge=0)
    kitchen_size: RoomSize
    other_rooms_count: int = Field(..., ge=0)
    square_footage: int = Field(..., ge=0)


class HomeInfoResponse(HomeInfoIn):
    id: int
    rwuser_id: int


# =============================================================================
# Quote Schemas
# =============================================================================

class QuoteResponse(BaseModel):
    """Quote request with its product embedded."""

    id: int
    created: float
    promised: float
    rwuser_id: int
    product: ProductResponse


# =============================================================================
# Error Schemas
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str
    detail: Optional[str] = None
    code: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": "Product not found",
                "detail": "No Product with identifier '42' exists",
                "code": "NOT_FOUND",
                "timestamp": "2025-01-20T12:00:00Z",
            }
        }
    )


# =============================================================================
# Health Check
# =============================================================================

class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)
