"""HTTP identity provisioning adapter.

POSTs to ``{identity_api_url}/accounts`` with the candidate id as an
idempotency key. The service answers with ``{"login_id": "..."}``.
"""

import uuid
from typing import TYPE_CHECKING

import httpx
import structlog

from talentops.providers.errors import ProviderError, ProvisionError
from talentops.providers.http_client import classify_http_error, json_body, post_json
from talentops.providers.identity.base import IdentityProvider

if TYPE_CHECKING:
    from talentops.providers.config import ProviderConfig

logger = structlog.get_logger()


class HttpIdentityProvider(IdentityProvider):
    """Identity provider backed by a REST service.

    Args:
        config: Provider configuration with identity endpoint and key.
        client: Optional shared AsyncClient (tests pass one with a
            MockTransport). When omitted a client is created per call.
    """

    def __init__(
        self,
        config: "ProviderConfig",
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(config)
        self._client = client

    def _headers(self, candidate_id: uuid.UUID) -> dict[str, str]:
        headers = {"Idempotency-Key": str(candidate_id)}
        if self.config.identity_api_key:
            headers["Authorization"] = f"Bearer {self.config.identity_api_key}"
        return headers

    async def provision_account(
        self,
        candidate_id: uuid.UUID,
        temporary_secret: str,
        role: str,
        department: str | None,
    ) -> str:
        url = f"{self.config.identity_api_url.rstrip('/')}/accounts"
        try:
            resp = await post_json(
                self._client,
                url,
                json={
                    "external_id": str(candidate_id),
                    "temporary_password": temporary_secret,
                    "role": role,
                    "department": department,
                    "must_change_password": True,
                },
                headers=self._headers(candidate_id),
                timeout=self.config.request_timeout_seconds,
            )
        except httpx.HTTPError as e:
            error = classify_http_error(e, rejected=ProvisionError)
            logger.warning(
                "identity_provision_failed",
                candidate_id=str(candidate_id),
                error_type=type(error).__name__,
            )
            raise error from e

        login_id = json_body(resp).get("login_id")
        if not isinstance(login_id, str) or not login_id:
            raise ProviderError("Identity service response missing login_id")
        logger.info(
            "identity_provisioned", candidate_id=str(candidate_id), login_id=login_id
        )
        return login_id
