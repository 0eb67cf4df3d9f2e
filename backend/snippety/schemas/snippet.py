"""
Snippety — Pydantic Schemas
=============================

What:  The `Snippet` domain value, the create-form model and the health
       response.
Why:   Route handlers and templates work with immutable values, never with
       ORM rows.

Design Decision:
    Snippet carries no presentation methods. Formatting (e.g. human-readable
    dates) is done by helper functions registered on the template engine.
"""

from datetime import datetime, timezone
from typing import Dict, Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator

from snippety.exceptions import ValidationError
from snippety.models.snippet import TITLE_MAX_LENGTH

# Lifetimes offered by the create form, in days
PERMITTED_EXPIRY_DAYS = (1, 7, 365)
DEFAULT_EXPIRY_DAYS = 365


class Snippet(BaseModel):
    """
    A live snippet as returned by SnippetStore.

    Timestamps are always UTC-aware; drivers that hand back naive values
    (SQLite) are normalized on the way in.
    """
    id: int
    title: str
    content: str
    created: datetime
    expires: datetime

    model_config = {"from_attributes": True, "frozen": True}

    @field_validator("created", "expires")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)


class SnippetCreateForm(BaseModel):
    """
    Fields posted by the "create snippet" form.

    Every rule here is a business rule the store does not check itself.
    """
    title: str = Field(default="")
    content: str = Field(default="")
    expires: int = Field(default=DEFAULT_EXPIRY_DAYS)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("This field cannot be blank")
        if len(v) > TITLE_MAX_LENGTH:
            raise ValueError(f"This field cannot be more than {TITLE_MAX_LENGTH} characters long")
        return v

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("This field cannot be blank")
        return v

    @field_validator("expires")
    @classmethod
    def validate_expires(cls, v: int) -> int:
        if v not in PERMITTED_EXPIRY_DAYS:
            raise ValueError("This field must equal 1, 7 or 365")
        return v

    @classmethod
    def from_form(cls, title: str, content: str, expires: str) -> "SnippetCreateForm":
        """
        Validate raw form strings.

        Raises:
            ValidationError: with one message per failing field
        """
        try:
            return cls(title=title, content=content, expires=expires)
        except PydanticValidationError as e:
            errors: Dict[str, str] = {}
            for err in e.errors():
                field = str(err["loc"][0]) if err["loc"] else "form"
                if field == "expires" and err["type"] != "value_error":
                    # Non-integer input; same message as an out-of-range value
                    errors.setdefault(field, "This field must equal 1, 7 or 365")
                else:
                    errors.setdefault(field, err["msg"].removeprefix("Value error, "))
            raise ValidationError(message="Invalid snippet form", errors=errors) from e


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring probes."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
    detail: Optional[str] = Field(default=None, description="Failure summary when unhealthy")
