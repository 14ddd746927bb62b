"""Mock identity provider for testing."""

import uuid
from typing import Any

from talentops.providers.errors import ProviderError
from talentops.providers.identity.base import IdentityProvider


class MockIdentityProvider(IdentityProvider):
    """In-process identity provider.

    Login ids are derived from the candidate id, so repeat calls for the same
    candidate return the same account.

    Attributes:
        calls: Record of all method invocations for test assertions.
        failures: Errors raised, in order, by the next provision calls.
    """

    def __init__(self, failures: list[ProviderError] | None = None) -> None:
        """Initialize mock identity provider.

        Note: Does not call super().__init__() - we don't need a config for mock.

        Args:
            failures: Errors to raise before succeeding.
        """
        self.calls: list[dict[str, Any]] = []
        self.failures = list(failures or [])
        self.accounts: dict[uuid.UUID, str] = {}

    async def provision_account(
        self,
        candidate_id: uuid.UUID,
        temporary_secret: str,
        role: str,
        department: str | None,
    ) -> str:
        self.calls.append(
            {
                "method": "provision_account",
                "candidate_id": candidate_id,
                "role": role,
                "department": department,
            }
        )
        if self.failures:
            raise self.failures.pop(0)
        return self.accounts.setdefault(candidate_id, f"emp-{candidate_id.hex[:8]}")
