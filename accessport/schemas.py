"""
Pydantic models for transfer objects.

Transfer objects are the shape data takes when it leaves the data access
layer. They carry no identity and no store-managed fields.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class TransferObject(BaseModel):
    """Base for transfer objects: unknown keys are rejected."""

    model_config = ConfigDict(
        extra="forbid",
        str_strip_whitespace=True,
    )


class UserDTO(TransferObject):
    """Model for user data crossing a layer boundary."""

    username: str = Field(min_length=1, max_length=50)
    email: EmailStr
    full_name: Optional[str] = Field(default=None, max_length=255)


class UserPatchDTO(TransferObject):
    """Model for a partial user update; only fields that are set apply."""

    username: Optional[str] = Field(default=None, min_length=1, max_length=50)
    email: Optional[EmailStr] = None
    full_name: Optional[str] = Field(default=None, max_length=255)
