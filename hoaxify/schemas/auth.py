"""Authentication and password reset schemas"""
from pydantic import EmailStr, Field

from .base import BaseSchema


class AuthRequest(BaseSchema):
    """Schema for sign-in credentials"""
    email: EmailStr
    password: str = Field(..., min_length=1)


class AuthResponse(BaseSchema):
    """Schema for sign-in response"""
    id: str
    username: str
    token: str


class PasswordResetRequest(BaseSchema):
    """Schema for requesting a password reset mail"""
    email: EmailStr


class PasswordUpdate(BaseSchema):
    """Schema for the new password of a reset"""
    password: str = Field(..., min_length=6)


class MessageResponse(BaseSchema):
    """Schema for message-only response"""
    message: str
