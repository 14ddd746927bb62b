"""Mock extraction provider for testing."""

from typing import Any

from talentops.providers.errors import ProviderError
from talentops.providers.extraction.base import (
    ExtractionProvider,
    ProfileExtraction,
    coerce_extraction,
)


class MockExtractionProvider(ExtractionProvider):
    """Returns canned payloads keyed by source reference.

    Unknown references produce an empty extraction, like an oracle that
    found nothing.

    Attributes:
        calls: Record of all method invocations for test assertions.
    """

    def __init__(
        self,
        payloads: dict[str, Any] | None = None,
        error: ProviderError | None = None,
    ) -> None:
        """Initialize mock extraction provider.

        Note: Does not call super().__init__() - we don't need a config for mock.

        Args:
            payloads: Raw oracle payloads by source_ref.
            error: If set, every extract() call raises it.
        """
        self.calls: list[dict[str, Any]] = []
        self.payloads = dict(payloads or {})
        self.error = error

    async def extract(self, source_ref: str) -> ProfileExtraction:
        self.calls.append({"method": "extract", "source_ref": source_ref})
        if self.error is not None:
            raise self.error
        return coerce_extraction(self.payloads.get(source_ref))
