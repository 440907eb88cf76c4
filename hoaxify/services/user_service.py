"""
ユーザーサービス

アカウントの登録・有効化・参照・更新・削除、パスワードリセットを扱う。
登録とパスワードリセット要求はメール送信と一体のトランザクションで、
メール送信に失敗した場合は DB への変更をロールバックする。
"""

import logging
import math
import uuid
from typing import Optional

import bcrypt
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from hoaxify.config import settings
from hoaxify.database import transaction
from hoaxify.errors import (
    EmailException,
    ForbiddenException,
    InvalidTokenException,
    NotFoundException,
)
from hoaxify.models.user import User
from hoaxify.schemas.user import UserPage, UserResponse
from hoaxify.services import email
from hoaxify.services.token_service import random_string, token_service

logger = logging.getLogger(__name__)


# パスワードハッシュ化
def hash_password(password: str) -> str:
    """パスワードをハッシュ化"""
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(password.encode(), salt).decode()


def verify_password(password: str, hashed_password: str) -> bool:
    """パスワード検証"""
    return bcrypt.checkpw(password.encode(), hashed_password.encode())


# ============================================
# 検索
# ============================================
def find_by_email(db: Session, email_address: str) -> Optional[User]:
    return db.scalars(select(User).where(User.email == email_address)).first()


def find_by_activation_token(db: Session, token: str) -> Optional[User]:
    return db.scalars(select(User).where(User.activation_token == token)).first()


def find_by_password_reset_token(db: Session, token: str) -> Optional[User]:
    return db.scalars(
        select(User).where(User.password_reset_token == token)
    ).first()


# ============================================
# 登録・有効化
# ============================================
def save(db: Session, username: str, email_address: str, password: str) -> User:
    """
    ユーザー登録

    未有効化状態でユーザーを作成し、有効化メールを送信する。
    メール送信に失敗した場合はユーザー作成をロールバックする。

    Raises:
        EmailException: 有効化メールの送信に失敗した場合
    """
    user = User(
        id=str(uuid.uuid4()),
        username=username,
        email=email_address,
        password_hash=hash_password(password),
        inactive=True,
        activation_token=random_string(settings.ONE_TIME_TOKEN_LENGTH),
    )

    with transaction(db) as tx:
        db.add(user)
        db.flush()

        if not email.send_account_activation(email_address, user.activation_token):
            logger.error(f"有効化メール送信失敗のため登録を取り消し: {email_address}")
            raise EmailException()

        tx.commit()

    logger.info(f"ユーザー登録: user_id={user.id}")
    return user


def activate(db: Session, token: str) -> None:
    """
    アカウント有効化

    トークンは一度だけ使用可能。既に有効化済みの場合も、存在しないトークンと
    同じく InvalidTokenException とする。
    """
    user = find_by_activation_token(db, token)
    if not user:
        raise InvalidTokenException()

    user.inactive = False
    user.activation_token = None
    db.commit()
    logger.info(f"アカウント有効化: user_id={user.id}")


# ============================================
# 参照・更新・削除
# ============================================
def get_users(
    db: Session, page: int, size: int, authenticated_user: Optional[User] = None
) -> UserPage:
    """有効なユーザー一覧（ログイン中のユーザー自身は除く）"""
    conditions = [User.inactive.is_(False)]
    if authenticated_user is not None:
        conditions.append(User.id != authenticated_user.id)

    total = db.scalar(select(func.count()).select_from(User).where(*conditions))
    users = db.scalars(
        select(User)
        .where(*conditions)
        .order_by(User.created_at, User.id)
        .offset(page * size)
        .limit(size)
    ).all()

    return UserPage(
        content=[UserResponse.model_validate(u) for u in users],
        page=page,
        size=size,
        total_pages=math.ceil(total / size),
    )


def get_user(db: Session, user_id: str) -> User:
    """有効なユーザーを取得（未有効化ユーザーは存在しない扱い）"""
    user = db.scalars(
        select(User).where(User.id == user_id, User.inactive.is_(False))
    ).first()
    if not user:
        raise NotFoundException("user_not_found")
    return user


def update_user(db: Session, user: User, username: str) -> User:
    user.username = username
    db.commit()
    db.refresh(user)
    return user


def delete_user(db: Session, user: User) -> None:
    """ユーザーと、そのユーザーの全セッショントークンを削除"""
    token_service.revoke_all(db, user.id, commit=False)
    db.delete(user)
    db.commit()
    logger.info(f"ユーザー削除: user_id={user.id}")


# ============================================
# パスワードリセット
# ============================================
def password_reset_request(db: Session, email_address: str) -> None:
    """
    パスワードリセット要求

    リセットトークンを設定してリセットメールを送信する。
    メール送信に失敗した場合はトークンの設定のみロールバックする。

    Raises:
        NotFoundException: メールアドレスが登録されていない場合
        EmailException: リセットメールの送信に失敗した場合
    """
    user = find_by_email(db, email_address)
    if not user:
        logger.info(f"パスワードリセット: 存在しないメールアドレス {email_address}")
        raise NotFoundException("email_not_in_use")

    with transaction(db) as tx:
        user.password_reset_token = random_string(settings.ONE_TIME_TOKEN_LENGTH)
        db.flush()

        if not email.send_password_reset(user.email, user.password_reset_token):
            logger.error(f"パスワードリセットメール送信失敗: {user.email}")
            raise EmailException()

        tx.commit()

    logger.info(f"パスワードリセットトークン発行: user_id={user.id}")


def check_password_reset_token(db: Session, token: Optional[str]) -> User:
    """
    パスワードリセットトークンに一致するユーザーを取得

    新しいパスワードの検証より前に呼び出し、存在しないトークンでは
    パスワード要件のエラーを返さないようにする。
    """
    user = find_by_password_reset_token(db, token) if token else None
    if not user:
        raise ForbiddenException("unauthorized_password_reset")
    return user


def update_password(db: Session, user: User, new_password: str) -> None:
    """パスワードを更新し、リセットトークンを無効化"""
    user.password_hash = hash_password(new_password)
    user.password_reset_token = None
    db.commit()
    logger.info(f"パスワードリセット完了: user_id={user.id}")
