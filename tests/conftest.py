"""
テスト用の共通設定・フィクスチャ
"""

import os
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# テスト用の環境変数を設定（hoaxify.mainをインポートする前に設定）
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RESEND_API_KEY", "test-resend-api-key")
os.environ.setdefault("SCHEDULER_ENABLED", "false")

import resend

from hoaxify.main import app
from hoaxify.database import get_db, Base
from hoaxify.models.user import User
from hoaxify.services.user_service import hash_password


# テスト用のインメモリSQLiteデータベース
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    """テスト用のDBセッションを提供"""
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function")
def db_session():
    """各テスト用のDBセッション"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory(db_session):
    """アプリ外（スケジューラーなど）から使うセッションファクトリー"""
    return TestingSessionLocal


@pytest.fixture(scope="function")
def client(db_session):
    """テスト用のAPIクライアント"""
    app.dependency_overrides[get_db] = override_get_db
    Base.metadata.create_all(bind=engine)

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    Base.metadata.drop_all(bind=engine)


class Mailbox:
    """resend.Emails.send の代わりに送信内容を記録する"""

    def __init__(self):
        self.messages = []
        self.fail = False

    def send(self, params):
        if self.fail:
            raise RuntimeError("Invalid mailbox")
        self.messages.append(params)
        return {"id": f"test-mail-{len(self.messages)}"}

    @property
    def last(self):
        return self.messages[-1] if self.messages else None


@pytest.fixture(autouse=True)
def mailbox(monkeypatch):
    """外部へメールを送信しないようにする（fail=True で送信失敗を再現）"""
    box = Mailbox()
    monkeypatch.setattr(resend.Emails, "send", box.send)
    return box


@pytest.fixture
def add_user(db_session):
    """テスト用ユーザーを直接DBに作成"""

    def _add_user(
        username="user1",
        email="user1@mail.com",
        password="P4ssword",
        inactive=False,
        **fields,
    ):
        user = User(
            id=fields.pop("id", None) or f"id-{username}",
            username=username,
            email=email,
            password_hash=hash_password(password),
            inactive=inactive,
            **fields,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _add_user


@pytest.fixture
def login(client):
    """ログインしてトークンを取得"""

    def _login(email="user1@mail.com", password="P4ssword"):
        response = client.post(
            "/api/1.0/auth", json={"email": email, "password": password}
        )
        return response.json().get("token")

    return _login


@pytest.fixture
def auth_headers(add_user, login):
    """認証ヘッダーを取得"""
    add_user()
    return {"Authorization": f"Bearer {login()}"}
