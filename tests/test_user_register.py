"""
ユーザー登録・アカウント有効化のテスト
"""

import pytest

from hoaxify.models.user import User

VALID_USER = {
    "username": "user1",
    "email": "user1@mail.com",
    "password": "P4ssword",
}


def post_user(client, user=None, headers=None):
    return client.post(
        "/api/1.0/users", json=user or VALID_USER, headers=headers or {}
    )


class TestRegister:
    """ユーザー登録テスト"""

    def test_register_success(self, client):
        """正常な新規登録"""
        response = post_user(client)
        assert response.status_code == 200
        assert response.json()["message"] == "User created"

    def test_register_success_message_localized(self, client):
        response = post_user(client, headers={"Accept-Language": "ja"})
        assert response.json()["message"] == "ユーザーを登録しました"

    def test_register_saves_user(self, client, db_session):
        """ユーザーがDBに保存される"""
        post_user(client)
        users = db_session.query(User).all()
        assert len(users) == 1
        assert users[0].username == "user1"
        assert users[0].email == "user1@mail.com"

    def test_register_hashes_password(self, client, db_session):
        post_user(client)
        user = db_session.query(User).one()
        assert user.password_hash != "P4ssword"

    def test_register_creates_inactive_user(self, client, db_session):
        """新規ユーザーは未有効化"""
        post_user(client)
        user = db_session.query(User).one()
        assert user.inactive is True

    def test_register_ignores_inactive_false(self, client, db_session):
        """inactive=false を指定しても未有効化で作成"""
        post_user(client, {**VALID_USER, "inactive": False})
        user = db_session.query(User).one()
        assert user.inactive is True

    def test_register_sets_activation_token(self, client, db_session):
        post_user(client)
        user = db_session.query(User).one()
        assert user.activation_token

    def test_register_sends_activation_email(self, client, db_session, mailbox):
        """有効化トークン入りのメールを送信"""
        post_user(client)
        user = db_session.query(User).one()
        assert mailbox.last["to"] == ["user1@mail.com"]
        assert user.activation_token in mailbox.last["html"]

    def test_register_email_failure_returns_502(self, client, mailbox):
        """メール送信失敗 → 502"""
        mailbox.fail = True
        response = post_user(client)
        assert response.status_code == 502
        assert response.json()["message"] == "Email failure"
        assert response.json()["code"] == "email_failure"

    def test_register_email_failure_rolls_back_user(
        self, client, db_session, mailbox
    ):
        """メール送信失敗時はユーザーを作成しない"""
        mailbox.fail = True
        post_user(client)
        assert db_session.query(User).count() == 0

    def test_register_after_email_failure(self, client, db_session, mailbox):
        """ロールバック後は同じメールアドレスで再登録できる"""
        mailbox.fail = True
        post_user(client)
        mailbox.fail = False
        response = post_user(client)
        assert response.status_code == 200
        assert db_session.query(User).count() == 1


class TestRegisterValidation:
    """入力値検証テスト"""

    def test_username_null(self, client):
        response = post_user(client, {**VALID_USER, "username": None})
        assert response.status_code == 400
        assert "validation_errors" in response.json()

    def test_username_and_email_null(self, client):
        """複数フィールドのエラーを同時に返す"""
        response = post_user(
            client, {**VALID_USER, "username": None, "email": None}
        )
        assert set(response.json()["validation_errors"]) == {"username", "email"}

    @pytest.mark.parametrize(
        "field, value, message",
        [
            ("username", None, "Username cannot be null"),
            ("username", "use", "Username character length must be between 4 to 32 characters"),
            ("username", "u" * 33, "Username character length must be between 4 to 32 characters"),
            ("email", None, "Email cannot be null"),
            ("email", "mail.com", "Email is not valid"),
            ("email", "user.mail.com", "Email is not valid"),
            ("email", "user@mail", "Email is not valid"),
            ("password", None, "Password cannot be null"),
            ("password", "12345", "Password must be at least 6 characters"),
        ],
    )
    def test_field_error_message(self, client, field, value, message):
        response = post_user(client, {**VALID_USER, field: value})
        assert response.json()["validation_errors"][field] == message

    def test_email_in_use(self, client, add_user):
        add_user()
        response = post_user(client)
        assert response.status_code == 400
        assert response.json()["validation_errors"]["email"] == "Email already in use"

    def test_email_in_use_with_username_null(self, client, add_user):
        """重複メールと他のエラーを同時に返す"""
        add_user()
        response = post_user(client, {**VALID_USER, "username": None})
        errors = response.json()["validation_errors"]
        assert "email" in errors
        assert "username" in errors

    def test_validation_error_localized(self, client):
        response = post_user(
            client,
            {**VALID_USER, "password": "12345"},
            headers={"Accept-Language": "ja"},
        )
        assert (
            response.json()["validation_errors"]["password"]
            == "パスワードは6文字以上で入力してください"
        )

    def test_validation_error_sends_no_email(self, client, mailbox):
        post_user(client, {**VALID_USER, "username": None})
        assert mailbox.messages == []


class TestActivation:
    """アカウント有効化テスト"""

    def test_activate_success(self, client, db_session):
        post_user(client)
        token = db_session.query(User).one().activation_token

        response = client.post(f"/api/1.0/users/token/{token}")
        assert response.status_code == 200
        assert response.json()["message"] == "Account is activated"

        db_session.expire_all()
        user = db_session.query(User).one()
        assert user.inactive is False
        assert user.activation_token is None

    def test_activate_twice_fails(self, client, db_session):
        """同じトークンでの2回目の有効化は失敗"""
        post_user(client)
        token = db_session.query(User).one().activation_token

        client.post(f"/api/1.0/users/token/{token}")
        response = client.post(f"/api/1.0/users/token/{token}")
        assert response.status_code == 400
        assert response.json()["code"] == "account_activation_failure"

    def test_activate_wrong_token(self, client, db_session):
        post_user(client)
        response = client.post("/api/1.0/users/token/this-token-does-not-exist")
        assert response.status_code == 400
        assert (
            response.json()["message"]
            == "This account is either active or the token is invalid"
        )

        db_session.expire_all()
        assert db_session.query(User).one().inactive is True

    def test_activated_user_can_login(self, client, db_session):
        post_user(client)
        token = db_session.query(User).one().activation_token
        client.post(f"/api/1.0/users/token/{token}")

        response = client.post(
            "/api/1.0/auth", json={"email": "user1@mail.com", "password": "P4ssword"}
        )
        assert response.status_code == 200
