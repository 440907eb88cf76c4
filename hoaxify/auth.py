from fastapi import APIRouter, Body, Depends, Header, Response, status
from sqlalchemy.orm import Session
from typing import Any, Optional
import logging

from hoaxify.database import get_db
from hoaxify.dependencies import extract_token
from hoaxify.errors import (
    AccountInactiveException,
    AuthenticationException,
    ValidationException,
)
from hoaxify.i18n import get_language, translate
from hoaxify.schemas.auth import (
    AuthRequest,
    AuthResponse,
    MessageResponse,
    PasswordResetRequest,
    PasswordUpdate,
)
from hoaxify.services import user_service
from hoaxify.services.token_service import token_service
from hoaxify.validation import validate_payload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/1.0", tags=["auth"])


@router.post("/auth", response_model=AuthResponse)
def login(payload: dict[str, Any] = Body(default={}), db: Session = Depends(get_db)):
    """
    ユーザーログイン

    未有効化アカウントはパスワードの照合より先に判定し、
    パスワード誤りとは別のエラーを返す。
    """
    credentials, errors = validate_payload(AuthRequest, payload)
    if errors:
        raise AuthenticationException()

    user = user_service.find_by_email(db, credentials.email)
    if not user:
        raise AuthenticationException()

    if user.inactive:
        raise AccountInactiveException()

    # パスワード検証
    if not user_service.verify_password(credentials.password, user.password_hash):
        raise AuthenticationException()

    # トークン生成
    token = token_service.issue(db, user.id)

    return AuthResponse(id=user.id, username=user.username, token=token)


@router.post("/logout")
def logout(
    authorization: Optional[str] = Header(None), db: Session = Depends(get_db)
):
    """ログアウト（トークンがなくても成功）"""
    token = extract_token(authorization)
    if token is not None:
        token_service.revoke(db, token)
    return Response(status_code=status.HTTP_200_OK)


@router.post("/user/password", response_model=MessageResponse)
def password_reset_request(
    payload: dict[str, Any] = Body(default={}),
    language: str = Depends(get_language),
    db: Session = Depends(get_db),
):
    """
    パスワードリセットリクエスト

    メールアドレスに対してパスワードリセット用のメールを送信します。
    """
    request, errors = validate_payload(PasswordResetRequest, payload)
    if errors:
        raise ValidationException(errors)

    user_service.password_reset_request(db, request.email)

    return MessageResponse(message=translate("password_reset_success", language))


@router.put("/user/password", response_model=MessageResponse)
def password_update(
    payload: dict[str, Any] = Body(default={}),
    language: str = Depends(get_language),
    db: Session = Depends(get_db),
):
    """
    パスワードリセット実行

    トークンを先に検証し、新しいパスワードを設定します。
    """
    token = payload.get("password_reset_token")
    user = user_service.check_password_reset_token(
        db, token if isinstance(token, str) else None
    )

    request, errors = validate_payload(PasswordUpdate, payload)
    if errors:
        raise ValidationException(errors)

    user_service.update_password(db, user, request.password)

    return MessageResponse(message=translate("password_update_success", language))
