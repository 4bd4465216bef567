from app.platform.config import settings
from app.platform.services.email import env, send_email


def send_login_code(to_email: str, code: str):
    """Used for: passwordless login"""
    template = env.get_template("login_code.html")
    html_content = template.render(
        otp_code=code,
        expiration_minutes=max(1, settings.OTP_TTL_SECONDS // 60),
        app_name=settings.MAIL_FROM_NAME,
    )
    send_email(to_email, f"Your {settings.MAIL_FROM_NAME} login code", html_content)
