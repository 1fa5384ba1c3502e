"""
API request and response models for Stockroom REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
inventory/models.py, which own the internal domain representation. Route
handlers map between the two.

Field-level syntax (required, lengths, non-negative numbers) is enforced here
and fails with 422 before a service is called. Rules that need the store
(uniqueness) live in the services.

Separation of concerns: domain dataclasses = domain truth; api/ models = API contract.
"""

from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints

from auth.models import User
from inventory.models import Item

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# NUMERIC(10, 2) upper bound.
MAX_PRICE = 99_999_999.99

# Usernames are trimmed the same way on register and login so a padded value
# round-trips. Passwords are never trimmed: every character is significant.
Username = Annotated[str, StringConstraints(strip_whitespace=True, min_length=3, max_length=50)]


# ---------------------------------------------------------------------------
# Auth -- request models
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /api/v1/auth/register."""

    username: Username
    # Syntax only (email-validator, no DNS lookup). Uniqueness is AuthService's job.
    email: EmailStr
    # Upper bound keeps inputs well clear of bcrypt's 72-byte input window
    # for typical passwords and caps hashing cost for hostile ones.
    password: str = Field(min_length=6, max_length=128)


class LoginRequest(BaseModel):
    """Request body for POST /api/v1/auth/login."""

    # Same trimming as Username, but no minimum beyond one character: a short
    # name simply fails the lookup.
    username: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]
    password: str = Field(min_length=1, max_length=128)


# ---------------------------------------------------------------------------
# Auth -- response models
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    """Public profile of an account. Has no password field of any kind."""

    model_config = ConfigDict(frozen=True)

    id: int
    username: str
    email: str
    created_at: str
    updated_at: str

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            created_at=user.created_at or "",
            updated_at=user.updated_at or "",
        )


class LoginResponse(BaseModel):
    """Response for POST /api/v1/auth/login."""

    model_config = ConfigDict(frozen=True)

    token: str
    token_type: str = "bearer"
    expires_in: int  # seconds
    user: UserResponse


# ---------------------------------------------------------------------------
# Inventory -- request models
# ---------------------------------------------------------------------------


class ItemCreate(BaseModel):
    """Request body for POST /api/v1/inventory/items."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=200)
    sku: str = Field(min_length=1, max_length=100)
    description: str = Field(default="", max_length=1000)
    quantity: int = Field(default=0, ge=0)
    price: float = Field(default=0.0, ge=0, le=MAX_PRICE)
    category: str = Field(default="", max_length=100)

    def to_item(self) -> Item:
        return Item(
            name=self.name,
            sku=self.sku,
            description=self.description,
            quantity=self.quantity,
            price=self.price,
            category=self.category,
        )


class ItemUpdate(BaseModel):
    """Request body for PUT/PATCH /api/v1/inventory/items/{item_id}.

    Every field is optional. Route handlers pass model_dump(exclude_unset=True)
    to the service, so fields the client did not send are never touched.
    Unknown fields are rejected rather than silently ignored.
    """

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    sku: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=1000)
    quantity: Optional[int] = Field(default=None, ge=0)
    price: Optional[float] = Field(default=None, ge=0, le=MAX_PRICE)
    category: Optional[str] = Field(default=None, max_length=100)


# ---------------------------------------------------------------------------
# Inventory -- response models
# ---------------------------------------------------------------------------


class ItemResponse(BaseModel):
    """A single live inventory item."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    sku: str
    description: str
    quantity: int
    price: float
    category: str
    created_at: str
    updated_at: str

    @classmethod
    def from_item(cls, item: Item) -> "ItemResponse":
        """Build an ItemResponse from a domain Item.

        The mapping lives here, colocated with the output model, rather than
        being repeated in every route handler.
        """
        return cls(
            id=item.id,
            name=item.name,
            sku=item.sku,
            description=item.description,
            quantity=item.quantity,
            price=item.price,
            category=item.category,
            created_at=item.created_at,
            updated_at=item.updated_at,
        )


# ---------------------------------------------------------------------------
# Errors and probes
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str


class ReadyResponse(BaseModel):
    """Response for GET /ready."""

    model_config = ConfigDict(frozen=True)

    status: str
    database: str
