"""
セッショントークン管理サービス

ログイン時に発行する不透明なランダムトークンを管理する。
有効期限はスライディング方式:
    - 最終使用時刻（last_used_at）から TTL 以内であれば有効
    - 検証に成功するたびに last_used_at を更新し、期限を延長する
    - 期限切れのトークンは検証では削除せず、定期クリーンアップで削除する
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from sqlalchemy import delete
from sqlalchemy.orm import Session

from hoaxify.config import settings
from hoaxify.models.token import Token

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    """現在時刻（UTC、タイムゾーン情報なし）"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def random_string(length: int) -> str:
    """暗号論的に安全なランダム文字列（16進数）を生成"""
    return secrets.token_hex((length + 1) // 2)[:length]


class TokenService:
    """セッショントークンの発行・検証・失効・クリーンアップ"""

    def __init__(
        self,
        ttl: timedelta,
        token_length: int = 32,
        clock: Callable[[], datetime] = utcnow,
    ):
        if token_length < 32:
            raise ValueError("token_length must be at least 32")
        self.ttl = ttl
        self.token_length = token_length
        self.clock = clock

    @classmethod
    def from_settings(cls) -> "TokenService":
        return cls(
            ttl=timedelta(days=settings.TOKEN_TTL_DAYS),
            token_length=settings.TOKEN_LENGTH,
        )

    def issue(self, db: Session, user_id: str) -> str:
        """
        新しいトークンを発行

        Args:
            db: DBセッション
            user_id: トークンを所有するユーザーID

        Returns:
            発行したトークン文字列
        """
        value = random_string(self.token_length)
        db.add(Token(token=value, user_id=user_id, last_used_at=self.clock()))
        db.commit()
        logger.info(f"セッショントークン発行: user_id={user_id}")
        return value

    def verify(self, db: Session, token: str) -> Optional[str]:
        """
        トークンを検証し、有効なら所有ユーザーIDを返す

        成功時は last_used_at を現在時刻に更新する（読み取りと同時に書き込み）。
        期限切れ・存在しない場合は None。
        """
        record = db.get(Token, token)
        if record is None:
            return None

        now = self.clock()
        if now - record.last_used_at >= self.ttl:
            return None

        record.last_used_at = now
        db.commit()
        return record.user_id

    def revoke(self, db: Session, token: str) -> None:
        """トークンを削除（存在しなくてもエラーにしない）"""
        db.execute(delete(Token).where(Token.token == token))
        db.commit()

    def revoke_all(self, db: Session, user_id: str, commit: bool = True) -> None:
        """
        ユーザーの全トークンを削除

        アカウント削除と同一トランザクションで行う場合は commit=False を指定する。
        """
        db.execute(delete(Token).where(Token.user_id == user_id))
        if commit:
            db.commit()

    def sweep(self, db: Session) -> int:
        """
        期限切れ（now - last_used_at >= TTL）のトークンを一括削除

        Returns:
            削除した件数
        """
        threshold = self.clock() - self.ttl
        result = db.execute(delete(Token).where(Token.last_used_at <= threshold))
        db.commit()
        return result.rowcount


# シングルトンインスタンス
token_service = TokenService.from_settings()
