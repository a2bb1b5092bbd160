"""
Database models for HomeServices.

Each model maps one table and knows how to turn itself into its wire
representation (`to_dict`) and back (`from_dict`). Wire keys are the column
keys, so a stored row and a JSON body share the same field names.

Tables:
- products
- rwusers
- home_infos (one per user)
- quote_requests
- product_quoterequest (join table)
"""

import math
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Optional

from sqlalchemy import (
    Boolean,
    Column,
    Float,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
)
from sqlalchemy.orm import declarative_base, relationship

from homeservices.validation import validate_email, validate_phone_number

Base = declarative_base()


QUOTE_PROMISE_WINDOW = timedelta(days=3)

# Largest value an INTEGER column holds
MAX_INTEGER = 2**63 - 1


def is_storable_id(value: int) -> bool:
    """True if `value` can name a row, i.e. a positive 64-bit integer."""
    return 0 < value <= MAX_INTEGER


class ConversionError(ValueError):
    """A raw value could not be converted into an entity field."""

    def __init__(self, key: str, expected: str, value: Any = None):
        self.key = key
        self.expected = expected
        self.value = value
        super().__init__(f"Unable to convert '{key}': expected {expected}, got {value!r}")


class UnsavedEntityError(RuntimeError):
    """An operation needed a stored entity but got one without an id."""

    def __init__(self, entity: str):
        super().__init__(f"{entity} has not been saved yet")


class MissingRelationError(RuntimeError):
    """A required related row is absent."""


# =============================================================================
# Enums
# =============================================================================

class ProductType(str, Enum):
    """Market segment a product is sold to."""
    BUSINESS = "business"
    HOME = "home"

    @classmethod
    def parse(cls, raw: Any) -> "ProductType":
        """Exact, case-sensitive lookup by wire value."""
        try:
            return cls(raw)
        except ValueError:
            raise ConversionError("type", "valid ProductType value", raw) from None


class RoomSize(str, Enum):
    """Size bucket for a room."""
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"

    @classmethod
    def parse(cls, raw: Any) -> "RoomSize":
        """Exact, case-sensitive lookup by wire value."""
        try:
            return cls(raw)
        except ValueError:
            raise ConversionError("kitchen_size", "valid RoomSize value", raw) from None


# =============================================================================
# Field extraction helpers
# =============================================================================

_MISSING = object()


def _extract(data: dict, key: str, default: Any = _MISSING) -> Any:
    if not isinstance(data, dict):
        raise ConversionError(key, "an object", data)
    if key not in data:
        if default is _MISSING:
            raise ConversionError(key, "a value", None)
        return default
    return data[key]


def _extract_str(data: dict, key: str, optional: bool = False) -> Optional[str]:
    value = _extract(data, key, None if optional else _MISSING)
    if value is None and optional:
        return None
    if not isinstance(value, str):
        raise ConversionError(key, "a string", value)
    return value


def _extract_float(data: dict, key: str) -> float:
    value = _extract(data, key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConversionError(key, "a number", value)
    try:
        number = float(value)
    except OverflowError:
        raise ConversionError(key, "a finite number", value) from None
    if not math.isfinite(number):
        raise ConversionError(key, "a finite number", value)
    return number


def _extract_count(data: dict, key: str) -> int:
    value = _extract(data, key)
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= MAX_INTEGER:
        raise ConversionError(key, "a non-negative integer", value)
    return value


def _extract_id(data: dict, key: str, optional: bool = False) -> Optional[int]:
    value = _extract(data, key, None if optional else _MISSING)
    if value is None and optional:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or not is_storable_id(value):
        raise ConversionError(key, "an integer id", value)
    return value


class EntityMixin:
    """Shared helpers for stored entities."""

    @property
    def is_persisted(self) -> bool:
        return self.id is not None

    @property
    def persisted_id(self) -> int:
        """Id of a stored entity; raises if the entity was never saved."""
        if self.id is None:
            raise UnsavedEntityError(type(self).__name__)
        return self.id


# =============================================================================
# Join table
# =============================================================================

product_quoterequest = Table(
    "product_quoterequest",
    Base.metadata,
    Column("id", Integer, primary_key=True),
    Column("product_id", Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("quoterequest_id", Integer, ForeignKey("quote_requests.id", ondelete="CASCADE"), nullable=False, index=True),
)


# =============================================================================
# Product
# =============================================================================

class Product(EntityMixin, Base):
    """A purchasable home or business service."""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    image_url = Column(Text, nullable=True)
    price_hourly = Column(Float, nullable=False)
    price_square_foot = Column(Float, nullable=False)
    product_description = Column(Text, nullable=False)
    title = Column(String(255), nullable=False)
    type = Column(String(20), nullable=False, index=True)

    @property
    def product_type(self) -> ProductType:
        return ProductType.parse(self.type)

    def update_from(self, other: "Product") -> None:
        """Replace every field with the values of `other` (id is kept)."""
        self.image_url = other.image_url
        self.price_hourly = other.price_hourly
        self.price_square_foot = other.price_square_foot
        self.product_description = other.product_description
        self.title = other.title
        self.type = other.type

    @classmethod
    def from_dict(cls, data: dict) -> "Product":
        """Build a product from its wire representation, validating every field."""
        return cls(
            id=_extract_id(data, "id", optional=True),
            image_url=_extract_str(data, "image_url", optional=True),
            price_hourly=_extract_float(data, "price_hourly"),
            price_square_foot=_extract_float(data, "price_square_foot"),
            product_description=_extract_str(data, "product_description"),
            title=_extract_str(data, "title"),
            type=ProductType.parse(_extract(data, "type")).value,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "image_url": self.image_url,
            "price_hourly": self.price_hourly,
            "price_square_foot": self.price_square_foot,
            "product_description": self.product_description,
            "title": self.title,
            "type": self.product_type.value,
        }


# =============================================================================
# User
# =============================================================================

class User(EntityMixin, Base):
    """Registered customer account. `password` holds a one-way hash."""
    __tablename__ = "rwusers"

    id = Column(Integer, primary_key=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    first_name = Column(String(255), nullable=False)
    is_admin = Column("admin", Boolean, nullable=False, default=False)
    last_name = Column(String(255), nullable=False)
    password = Column(String(255), nullable=False)
    phone_number = Column(String(15), nullable=False)

    @classmethod
    def build(
        cls,
        email: str,
        first_name: str,
        last_name: str,
        password_hash: str,
        phone_number: str,
    ) -> "User":
        """New, unsaved, non-admin user with validated contact fields."""
        return cls(
            email=validate_email(email),
            first_name=first_name,
            last_name=last_name,
            password=password_hash,
            phone_number=validate_phone_number(phone_number),
            is_admin=False,
        )

    @classmethod
    def from_dict(cls, data: dict) -> "User":
        admin = _extract(data, "admin", False)
        if not isinstance(admin, bool):
            raise ConversionError("admin", "a boolean", admin)

        return cls(
            id=_extract_id(data, "id", optional=True),
            email=validate_email(_extract_str(data, "email")),
            first_name=_extract_str(data, "first_name"),
            is_admin=admin,
            last_name=_extract_str(data, "last_name"),
            password=_extract_str(data, "password"),
            phone_number=validate_phone_number(_extract_str(data, "phone_number")),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "first_name": self.first_name,
            "admin": bool(self.is_admin),
            "last_name": self.last_name,
            "password": self.password,
            "phone_number": self.phone_number,
        }

    def to_public_dict(self) -> dict:
        """Wire representation without the password hash."""
        data = self.to_dict()
        data.pop("password")
        return data


# =============================================================================
# HomeInfo
# =============================================================================

class HomeInfo(EntityMixin, Base):
    """Description of a user's home. At most one row per user."""
    __tablename__ = "home_infos"

    id = Column(Integer, primary_key=True)
    bathroom_count = Column(Integer, nullable=False)
    bedroom_count = Column(Integer, nullable=False)
    kitchen_size = Column(String(20), nullable=False)
    other_rooms_count = Column(Integer, nullable=False)
    square_footage = Column(Integer, nullable=False)
    user_id = Column("rwuser_id", Integer, ForeignKey("rwusers.id"), unique=True, nullable=False)

    @classmethod
    def for_user(
        cls,
        user: User,
        bathroom_count: int,
        bedroom_count: int,
        kitchen_size: str,
        other_rooms_count: int,
        square_footage: int,
    ) -> "HomeInfo":
        """New, unsaved home info owned by a stored user."""
        return cls.from_dict({
            "bathroom_count": bathroom_count,
            "bedroom_count": bedroom_count,
            "kitchen_size": kitchen_size,
            "other_rooms_count": other_rooms_count,
            "square_footage": square_footage,
            "rwuser_id": user.persisted_id,
        })

    def update_from(self, other: "HomeInfo") -> None:
        """Copy every measured field from `other`; id and owner are kept."""
        self.bathroom_count = other.bathroom_count
        self.bedroom_count = other.bedroom_count
        self.kitchen_size = other.kitchen_size
        self.other_rooms_count = other.other_rooms_count
        self.square_footage = other.square_footage

    @classmethod
    def from_dict(cls, data: dict) -> "HomeInfo":
        return cls(
            id=_extract_id(data, "id", optional=True),
            bathroom_count=_extract_count(data, "bathroom_count"),
            bedroom_count=_extract_count(data, "bedroom_count"),
            kitchen_size=RoomSize.parse(_extract(data, "kitchen_size")).value,
            other_rooms_count=_extract_count(data, "other_rooms_count"),
            square_footage=_extract_count(data, "square_footage"),
            user_id=_extract_id(data, "rwuser_id"),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "bathroom_count": self.bathroom_count,
            "bedroom_count": self.bedroom_count,
            "kitchen_size": RoomSize.parse(self.kitchen_size).value,
            "other_rooms_count": self.other_rooms_count,
            "square_footage": self.square_footage,
            "rwuser_id": self.user_id,
        }


# =============================================================================
# QuoteRequest
# =============================================================================

class QuoteRequest(EntityMixin, Base):
    """
    A user's request for a price quote on one product.

    `created` and `promised` are seconds since the Unix epoch; `promised` is
    always `created` plus the promise window.
    """
    __tablename__ = "quote_requests"

    id = Column(Integer, primary_key=True)
    created = Column(Float, nullable=False)
    promised = Column(Float, nullable=False)
    user_id = Column("rwuser_id", Integer, ForeignKey("rwusers.id"), nullable=False, index=True)

    products = relationship(
        "Product",
        secondary=product_quoterequest,
        lazy="selectin",
        order_by=product_quoterequest.c.id,
    )

    @staticmethod
    def promised_for(created: float) -> float:
        return created + QUOTE_PROMISE_WINDOW.total_seconds()

    @classmethod
    def for_user(cls, user: User, product: Product, now: Optional[datetime] = None) -> "QuoteRequest":
        """New, unsaved quote request linking a stored user to a stored product."""
        if not product.is_persisted:
            raise UnsavedEntityError("Product")
        created = (now or datetime.now(timezone.utc)).timestamp()

        return cls(
            created=created,
            promised=cls.promised_for(created),
            user_id=user.persisted_id,
            products=[product],
        )

    @property
    def product(self) -> Optional[Product]:
        return self.products[0] if self.products else None

    @classmethod
    def from_dict(cls, data: dict) -> "QuoteRequest":
        created = _extract_float(data, "created")
        promised = _extract_float(data, "promised")
        if not math.isclose(promised, cls.promised_for(created), rel_tol=0.0, abs_tol=1e-6):
            raise ConversionError("promised", "created + 3 days", promised)

        return cls(
            id=_extract_id(data, "id", optional=True),
            created=created,
            promised=promised,
            user_id=_extract_id(data, "rwuser_id"),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "created": self.created,
            "promised": self.promised,
            "rwuser_id": self.user_id,
        }

    def to_public_dict(self) -> dict:
        """Wire representation with the related product embedded."""
        product = self.product
        if product is None:
            raise MissingRelationError(f"QuoteRequest {self.id} has no product")

        data = self.to_dict()
        data["product"] = product.to_dict()
        return data
