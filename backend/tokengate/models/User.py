import re

from sqlalchemy import Column, JSON
from sqlmodel import Field, SQLModel
from pydantic import EmailStr, field_validator

USERNAME_REGEX = re.compile(r"^[a-zA-Z0-9_.-]{3,64}$")

# ==========================================
# SQLModel (Database Entity + Base Pydantic)
# ==========================================
class User(SQLModel, table=True):
    __tablename__ = "users"

    id: int | None = Field(default=None, primary_key=True)
    username: str = Field(unique=True, index=True, nullable=False)
    hashed_password: str
    email: str | None = Field(default=None, unique=True, index=True, nullable=True)
    is_active: bool = Field(default=True)
    roles: list[str] = Field(default_factory=lambda: ["USER"], sa_column=Column(JSON, nullable=False))

    def role_set(self) -> frozenset[str]:
        return frozenset(self.roles or ())

# ==========================================
# Pydantic Models (DTOs)
# ==========================================

# Properties to receive via API on registration
class RegisterRequest(SQLModel):
    username: str
    email: EmailStr | None = None
    password: str = Field(min_length=8, max_length=64)

    @field_validator("username")
    @classmethod
    def check_username(cls, value: str) -> str:
        if not USERNAME_REGEX.match(value):
            raise ValueError("use 3 to 64 letters, numbers, '.', '_' or '-'")
        return value

# Properties to receive via API on login
class LoginRequest(SQLModel):
    username: str
    password: str

# Properties to return via API
class UserResponse(SQLModel):
    id: int
    username: str
    email: str | None = None
    is_active: bool
    roles: list[str]
