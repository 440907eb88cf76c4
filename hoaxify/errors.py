"""
API例外クラス

各例外は HTTP ステータスと、ローカライズ用の安定したメッセージコードを持つ。
レスポンス本文への変換は hoaxify.main の例外ハンドラが行う。
"""

from typing import Optional


class ApiException(Exception):
    """API例外の基底クラス"""

    status_code: int = 500
    code: str = "internal_error"

    def __init__(self, code: Optional[str] = None):
        if code is not None:
            self.code = code
        super().__init__(self.code)


class ValidationException(ApiException):
    """入力値エラー（フィールドごとのコード付き）"""

    status_code = 400
    code = "validation_failure"

    def __init__(self, errors: dict[str, str]):
        super().__init__()
        self.errors = errors


class AuthenticationException(ApiException):
    """メールアドレス不明・パスワード不一致"""

    status_code = 401
    code = "authentication_failure"


class AccountInactiveException(ApiException):
    """未有効化アカウントでのログイン"""

    status_code = 403
    code = "inactive_authentication_failure"


class InvalidTokenException(ApiException):
    """有効化トークンが存在しない、または使用済み"""

    status_code = 400
    code = "account_activation_failure"


class ForbiddenException(ApiException):
    status_code = 403
    code = "forbidden"


class NotFoundException(ApiException):
    status_code = 404
    code = "not_found"


class EmailException(ApiException):
    """メール送信失敗"""

    status_code = 502
    code = "email_failure"
