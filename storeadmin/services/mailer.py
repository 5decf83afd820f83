from __future__ import annotations

import html
import os
from datetime import datetime

from fastapi_mail import ConnectionConfig, FastMail, MessageSchema

APP_BASE_URL = os.getenv("APP_BASE_URL", "http://localhost:3000")
ACTIVATION_PATH = "/admin/confirmar-conta"


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes"}


def build_connection_config() -> ConnectionConfig:
    return ConnectionConfig(
        MAIL_USERNAME=os.getenv("MAIL_USERNAME", ""),
        MAIL_PASSWORD=os.getenv("MAIL_PASSWORD", ""),
        MAIL_FROM=os.getenv("MAIL_FROM", "no-reply@example.com"),
        MAIL_FROM_NAME=os.getenv("MAIL_FROM_NAME", "Store Admin"),
        MAIL_PORT=int(os.getenv("MAIL_PORT", "587")),
        MAIL_SERVER=os.getenv("MAIL_SERVER", "smtp.gmail.com"),
        MAIL_STARTTLS=_env_flag("MAIL_STARTTLS", "1"),
        MAIL_SSL_TLS=_env_flag("MAIL_SSL_TLS", "0"),
        USE_CREDENTIALS=bool(os.getenv("MAIL_USERNAME")),
        VALIDATE_CERTS=_env_flag("MAIL_VALIDATE_CERTS", "1"),
        SUPPRESS_SEND=int(_env_flag("MAIL_SUPPRESS_SEND", "0")),
    )


def activation_link(token: str, base_url: str = APP_BASE_URL) -> str:
    return f"{base_url.rstrip('/')}{ACTIVATION_PATH}?token={token}"


class ActivationMailer:
    """Sends the account activation email for a pending administrator."""

    def __init__(self, conf: ConnectionConfig, base_url: str = APP_BASE_URL) -> None:
        self._fm = FastMail(conf)
        self._base_url = base_url

    async def send_activation_email(self, *, email: str, name: str, token: str) -> None:
        link = activation_link(token, self._base_url)
        html_content = f"""
        <html>
            <body>
                <h2>Welcome to the store administration panel</h2>
                <p>Hello, {html.escape(name)}!</p>
                <p>An administrator account was created for you. To activate it and choose your password,
                open the link below:</p>
                <p><a href="{link}">{link}</a></p>
                <p>This link is valid for 24 hours. You cannot sign in until the account is activated.</p>
                <p>If you did not expect this email, you can ignore it.</p>
                <p>&copy; {datetime.now().year} Store Admin</p>
            </body>
        </html>
        """
        message = MessageSchema(
            subject="Confirm your administrator account",
            recipients=[email],
            body=html_content,
            subtype="html",
        )
        await self._fm.send_message(message)


def get_mailer() -> ActivationMailer:
    """FastAPI dependency; tests override it with a fake."""
    return ActivationMailer(build_connection_config())
