"""
SQLAlchemy Models for Hoaxify

Usage:
    from hoaxify.models import User, Token
"""

from hoaxify.database import Base
from .user import User
from .token import Token

__all__ = [
    "Base",
    "User",
    "Token",
]
