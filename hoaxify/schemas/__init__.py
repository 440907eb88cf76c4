"""
Pydantic Schemas for Hoaxify
"""

from .base import BaseSchema
from .user import UserCreate, UserUpdate, UserResponse, UserPage
from .auth import (
    AuthRequest,
    AuthResponse,
    PasswordResetRequest,
    PasswordUpdate,
    MessageResponse,
)

__all__ = [
    "BaseSchema",
    "UserCreate",
    "UserUpdate",
    "UserResponse",
    "UserPage",
    "AuthRequest",
    "AuthResponse",
    "PasswordResetRequest",
    "PasswordUpdate",
    "MessageResponse",
]
