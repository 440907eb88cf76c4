"""User schemas"""
from pydantic import EmailStr, Field

from .base import BaseSchema


class UserCreate(BaseSchema):
    """Schema for registering a user"""
    username: str = Field(..., min_length=4, max_length=32)
    email: EmailStr
    password: str = Field(..., min_length=6)


class UserUpdate(BaseSchema):
    """Schema for updating a user"""
    username: str = Field(..., min_length=4, max_length=32)


class UserResponse(BaseSchema):
    """Schema for user response"""
    id: str
    username: str
    email: str


class UserPage(BaseSchema):
    """Schema for paginated user listing"""
    content: list[UserResponse]
    page: int
    size: int
    total_pages: int
