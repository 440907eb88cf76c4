"""
Token Model - セッショントークンテーブル
"""

from datetime import datetime
from typing import TYPE_CHECKING
from sqlalchemy import String, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hoaxify.database import Base

if TYPE_CHECKING:
    from .user import User


class Token(Base):
    """セッショントークンテーブル"""

    __tablename__ = "tokens"

    token: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # スライディング有効期限の基準時刻（UTC）
    last_used_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, index=True
    )

    # Relationship
    user: Mapped["User"] = relationship("User", back_populates="tokens")
