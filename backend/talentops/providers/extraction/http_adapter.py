"""HTTP extraction oracle adapter.

POSTs ``{"source_ref": ...}`` to ``{extraction_api_url}/extract`` and coerces
whatever JSON object comes back.
"""

from typing import TYPE_CHECKING

import httpx
import structlog

from talentops.providers.errors import ExtractionError
from talentops.providers.extraction.base import (
    ExtractionProvider,
    ProfileExtraction,
    coerce_extraction,
)
from talentops.providers.http_client import classify_http_error, json_body, post_json

if TYPE_CHECKING:
    from talentops.providers.config import ProviderConfig

logger = structlog.get_logger()


class HttpExtractionProvider(ExtractionProvider):
    """Extraction provider backed by a REST service.

    Args:
        config: Provider configuration with extraction endpoint and key.
        client: Optional shared AsyncClient.
    """

    def __init__(
        self,
        config: "ProviderConfig",
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(config)
        self._client = client

    async def extract(self, source_ref: str) -> ProfileExtraction:
        headers: dict[str, str] = {}
        if self.config.extraction_api_key:
            headers["Authorization"] = f"Bearer {self.config.extraction_api_key}"
        url = f"{self.config.extraction_api_url.rstrip('/')}/extract"
        try:
            resp = await post_json(
                self._client,
                url,
                json={"source_ref": source_ref},
                headers=headers,
                timeout=self.config.request_timeout_seconds,
            )
        except httpx.HTTPError as e:
            error = classify_http_error(e, rejected=ExtractionError)
            logger.warning(
                "profile_extraction_failed",
                source_ref=source_ref,
                error_type=type(error).__name__,
            )
            raise error from e

        extraction = coerce_extraction(json_body(resp))
        logger.info(
            "profile_extracted",
            source_ref=source_ref,
            empty=extraction.is_empty,
            skill_count=len(extraction.skills),
        )
        return extraction
