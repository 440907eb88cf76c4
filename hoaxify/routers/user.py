"""
User API - ユーザー登録・有効化・一覧・更新・削除
"""

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Response, status
from sqlalchemy.orm import Session

from hoaxify.database import get_db
from hoaxify.dependencies import Pagination, get_authenticated_user, get_pagination
from hoaxify.errors import ForbiddenException, ValidationException
from hoaxify.i18n import get_language, translate
from hoaxify.models.user import User
from hoaxify.schemas.auth import MessageResponse
from hoaxify.schemas.user import UserCreate, UserPage, UserResponse, UserUpdate
from hoaxify.services import user_service
from hoaxify.validation import validate_payload

router = APIRouter(prefix="/api/1.0/users", tags=["users"])


@router.post(
    "",
    response_model=MessageResponse,
    summary="ユーザー登録",
    responses={
        400: {"description": "入力値エラー"},
        502: {"description": "有効化メールの送信失敗（ユーザーは作成されない）"},
    },
)
def register(
    payload: dict[str, Any] = Body(default={}),
    language: str = Depends(get_language),
    db: Session = Depends(get_db),
):
    """ユーザー登録エンドポイント"""
    request, errors = validate_payload(UserCreate, payload)

    # メール重複チェック（他のエラーと同時に返す）
    email_address = payload.get("email")
    if "email" not in errors and isinstance(email_address, str):
        if user_service.find_by_email(db, email_address):
            errors["email"] = "email_in_use"

    if errors:
        raise ValidationException(errors)

    user_service.save(db, request.username, request.email, request.password)

    return MessageResponse(message=translate("user_created", language))


@router.post(
    "/token/{token}",
    response_model=MessageResponse,
    summary="アカウント有効化",
    responses={400: {"description": "トークンが無効、または有効化済み"}},
)
def activate(
    token: str,
    language: str = Depends(get_language),
    db: Session = Depends(get_db),
):
    """アカウント有効化エンドポイント"""
    user_service.activate(db, token)
    return MessageResponse(message=translate("account_activation_success", language))


@router.get("", response_model=UserPage, summary="ユーザー一覧")
def list_users(
    pagination: Pagination = Depends(get_pagination),
    current_user: Optional[User] = Depends(get_authenticated_user),
    db: Session = Depends(get_db),
):
    """有効なユーザーの一覧（ログイン中は自分自身を除く）"""
    return user_service.get_users(
        db, pagination.page, pagination.size, authenticated_user=current_user
    )


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    summary="ユーザー取得",
    responses={404: {"description": "ユーザーが存在しない、または未有効化"}},
)
def get_user(user_id: str, db: Session = Depends(get_db)):
    return UserResponse.model_validate(user_service.get_user(db, user_id))


@router.put(
    "/{user_id}",
    response_model=UserResponse,
    summary="ユーザー更新",
    responses={
        400: {"description": "入力値エラー"},
        403: {"description": "未認証、または他のユーザー"},
    },
)
def update_user(
    user_id: str,
    payload: dict[str, Any] = Body(default={}),
    current_user: Optional[User] = Depends(get_authenticated_user),
    db: Session = Depends(get_db),
):
    """ユーザー更新エンドポイント（本人のみ）"""
    if current_user is None or current_user.id != user_id:
        raise ForbiddenException("unauthorized_user_update")

    request, errors = validate_payload(UserUpdate, payload)
    if errors:
        raise ValidationException(errors)

    user = user_service.update_user(db, current_user, request.username)
    return UserResponse.model_validate(user)


@router.delete(
    "/{user_id}",
    summary="ユーザー削除",
    responses={403: {"description": "未認証、または他のユーザー"}},
)
def delete_user(
    user_id: str,
    current_user: Optional[User] = Depends(get_authenticated_user),
    db: Session = Depends(get_db),
):
    """
    ユーザー削除エンドポイント（本人のみ）

    ユーザーのセッショントークンもすべて削除されます。
    """
    if current_user is None or current_user.id != user_id:
        raise ForbiddenException("unauthorized_user_delete")

    user_service.delete_user(db, current_user)
    return Response(status_code=status.HTTP_200_OK)
