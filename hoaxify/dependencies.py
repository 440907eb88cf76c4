"""依存注入モジュール"""
from typing import Optional

from fastapi import Depends, Header, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from hoaxify.database import get_db
from hoaxify.models.user import User
from hoaxify.services.token_service import token_service

BEARER_PREFIX = "Bearer "


def extract_token(authorization: Optional[str]) -> Optional[str]:
    """Authorizationヘッダーからトークンを取り出す"""
    if not authorization:
        return None
    if authorization.startswith(BEARER_PREFIX):
        authorization = authorization[len(BEARER_PREFIX):]
    return authorization.strip() or None


def get_authenticated_user(
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """
    現在のユーザーを取得

    トークンがない、または無効・期限切れの場合は匿名（None）として扱い、
    エラーにはしない。認証が必須かどうかは各エンドポイントで判断する。
    """
    token = extract_token(authorization)
    if token is None:
        return None

    user_id = token_service.verify(db, token)
    if user_id is None:
        return None

    return db.get(User, user_id)


class Pagination(BaseModel):
    page: int
    size: int


def _to_int(value: Optional[str]) -> Optional[int]:
    try:
        return int(value) if value is not None else None
    except ValueError:
        return None


def get_pagination(
    page: Optional[str] = Query(None),
    size: Optional[str] = Query(None),
    page_size_param: Optional[str] = Query(None, alias="pageSize"),
) -> Pagination:
    """
    ページング指定

    数値以外・範囲外の値はエラーにせず既定値に丸める
    （page: 0以上、size: 1〜10、既定値 page=0, size=10）
    ページサイズは size / pageSize のどちらでも指定でき、両方あれば size を優先する。
    """
    page_number = _to_int(page)
    page_size = _to_int(size if size is not None else page_size_param)

    if page_number is None or page_number < 0:
        page_number = 0
    if page_size is None or page_size < 1 or page_size > 10:
        page_size = 10

    return Pagination(page=page_number, size=page_size)
