"""Administrator and staff login accounts."""
from datetime import datetime
from enum import Enum

from beanie import Document, Indexed
from pydantic import BaseModel, EmailStr, Field


class UserRole(str, Enum):
    ADMIN = "admin"
    STAFF = "staff"


class User(Document):
    """Login account; only admins may change records."""

    email: Indexed(EmailStr, unique=True)
    hashed_password: str
    role: UserRole = UserRole.ADMIN
    full_name: str
    is_active: bool = True
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "users"
        use_state_management = True


class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)
    role: UserRole = UserRole.ADMIN
    full_name: str
