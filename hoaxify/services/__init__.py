"""
アプリケーションサービス
"""

from .token_service import TokenService
from .email import send_account_activation, send_password_reset

__all__ = [
    "TokenService",
    "send_account_activation",
    "send_password_reset",
]
