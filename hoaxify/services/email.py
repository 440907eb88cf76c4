"""
Email Service - Resendを使用したメール送信

送信結果は True / False で返し、送信エラーの詳細はここでログに記録する。
呼び出し側は結果に応じてコミット・ロールバックを判断する。
"""

import logging
import resend

from hoaxify.config import settings

logger = logging.getLogger(__name__)

# Resend API設定
resend.api_key = settings.RESEND_API_KEY


def activation_url(token: str) -> str:
    return f"{settings.FRONTEND_URL}/#login?token={token}"


def password_reset_url(token: str) -> str:
    return f"{settings.FRONTEND_URL}/#user/password?reset={token}"


def _render(title: str, lead: str, url: str, button: str) -> str:
    return f"""
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
</head>
<body style="font-family: sans-serif; line-height: 1.6; color: #333;">
    <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
        <h2 style="color: #f97316;">{title}</h2>
        <p>{lead}</p>
        <p style="margin: 30px 0;">
            <a href="{url}"
               style="background-color: #f97316; color: white; padding: 12px 24px;
                      text-decoration: none; border-radius: 8px; display: inline-block;">
                {button}
            </a>
        </p>
        <hr style="border: none; border-top: 1px solid #eee; margin: 30px 0;">
        <p style="color: #999; font-size: 12px;">
            This e-mail was sent automatically by {settings.PROJECT_NAME}.
        </p>
    </div>
</body>
</html>
"""


def _send(to_email: str, subject: str, html: str) -> bool:
    try:
        params: resend.Emails.SendParams = {
            "from": settings.RESEND_FROM_EMAIL,
            "to": [to_email],
            "subject": subject,
            "html": html,
        }
        result = resend.Emails.send(params)
        logger.info(f"メール送信成功: {to_email}, subject={subject}, id={result.get('id')}")
        return True

    except Exception as e:
        logger.error(f"メール送信エラー: {to_email}, subject={subject}, error={e}")
        return False


def send_account_activation(to_email: str, token: str) -> bool:
    """
    アカウント有効化メールを送信

    Args:
        to_email: 送信先メールアドレス
        token: 有効化トークン

    Returns:
        送信成功時はTrue、失敗時はFalse
    """
    html = _render(
        title="Account Activation",
        lead="Please click below link to activate your account",
        url=activation_url(token),
        button="Activate",
    )
    return _send(to_email, "Account Activation", html)


def send_password_reset(to_email: str, token: str) -> bool:
    """
    パスワードリセットメールを送信

    Args:
        to_email: 送信先メールアドレス
        token: パスワードリセットトークン

    Returns:
        送信成功時はTrue、失敗時はFalse
    """
    html = _render(
        title="Password Reset",
        lead="Please click below link to reset your password",
        url=password_reset_url(token),
        button="Reset",
    )
    return _send(to_email, "Password Reset Link", html)
