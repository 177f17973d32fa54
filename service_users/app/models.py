"""
User data models for Users Service.
"""

from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator


class User(BaseModel):
    """Registered user record.

    The password is stored and returned exactly as submitted.
    """
    id: int = Field(default=0, description="Store-generated identifier")
    name: str = Field(default="", description="Display name")
    password: str = Field(default="", description="Password as submitted")
    email: str = Field(default="", description="Unique email address")
    age: int = Field(default=0, description="Age in years")


class UserCreateRequest(BaseModel):
    """Request model for user registration.

    Decoded strictly: JSON values of the wrong type are rejected. Keys match
    case-insensitively, missing fields take zero values, unknown fields are
    ignored, and JSON nulls (whole body or single field) decode to zero values.
    """
    model_config = ConfigDict(strict=True, extra="ignore")

    name: str = ""
    password: str = ""
    email: str = ""
    age: int = 0

    @model_validator(mode="before")
    @classmethod
    def _fold_keys(cls, data: Any) -> Any:
        if data is None:
            return {}
        if isinstance(data, dict):
            return {key.lower(): value for key, value in data.items() if value is not None}
        return data

    def to_user(self) -> User:
        """Build a user record awaiting an identifier."""
        return User(
            name=self.name,
            password=self.password,
            email=self.email,
            age=self.age
        )


UserList = TypeAdapter(List[User])
