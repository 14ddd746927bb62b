"""Welcome email delivery via the Resend API.

Plain-text email, one HTTP POST per message.
"""

from typing import TYPE_CHECKING

import httpx
import structlog

from talentops.providers.errors import AuthenticationError, DeliveryError
from talentops.providers.http_client import classify_http_error, post_json
from talentops.providers.notification.base import NotificationProvider, WelcomePayload

if TYPE_CHECKING:
    from talentops.providers.config import ProviderConfig

logger = structlog.get_logger()

RESEND_API_URL = "https://api.resend.com/emails"
WELCOME_SUBJECT = "Welcome to the team"


class ResendNotificationProvider(NotificationProvider):
    """Notification provider sending email through Resend.

    Args:
        config: Provider configuration with resend_api_key and email_from.
        client: Optional shared AsyncClient.
    """

    def __init__(
        self,
        config: "ProviderConfig",
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(config)
        self._client = client

    async def send_welcome(self, recipient_email: str, payload: WelcomePayload) -> None:
        if not self.config.resend_api_key:
            raise AuthenticationError("RESEND_API_KEY is not configured")
        try:
            await post_json(
                self._client,
                RESEND_API_URL,
                json={
                    "from": self.config.email_from,
                    "to": recipient_email,
                    "subject": WELCOME_SUBJECT,
                    "text": payload.render_text(self.config.login_url),
                },
                headers={"Authorization": f"Bearer {self.config.resend_api_key}"},
                timeout=self.config.request_timeout_seconds,
            )
        except httpx.HTTPError as e:
            error = classify_http_error(e, rejected=DeliveryError)
            logger.warning(
                "welcome_email_failed",
                login_id=payload.login_id,
                error_type=type(error).__name__,
            )
            raise error from e
        logger.info("welcome_email_sent", login_id=payload.login_id)
