"""
Outbound email.

There is no mail transport; messages are written to the application log so the
reset link can be picked up during development.
"""

from tutorconnect.core.logging_config import get_logger
from tutorconnect.server.core.config import settings

logger = get_logger(__name__)


def build_reset_url(token: str) -> str:
    return f"{settings.auth.frontend_url.rstrip('/')}/reset-password?token={token}"


async def send_password_reset_email(email: str, first_name: str, token: str) -> str:
    """Log the password reset email for ``email`` and return the reset URL."""
    reset_url = build_reset_url(token)
    logger.info(
        f"Password reset email for {email}: hello {first_name}, reset your password within "
        f"{settings.auth.password_reset_expire_minutes} minutes at {reset_url}"
    )
    return reset_url
