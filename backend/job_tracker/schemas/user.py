from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for models whose JSON uses camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def check_password_length(v: str) -> str:
    if len(v) < 6:
        raise ValueError("Password must be at least 6 characters long")
    if len(v) > 128:
        raise ValueError("Password must be at most 128 characters long")
    return v


class UserBase(CamelModel):
    email: EmailStr


class UserCreate(UserBase):
    display_name: str = Field(min_length=1, max_length=255)
    password: str

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return check_password_length(v)


class UserResponse(CamelModel):
    id: int
    display_name: str
    email: str
    photo: str | None = None
    google_id: str | None = None
    created_at: datetime | None = None
