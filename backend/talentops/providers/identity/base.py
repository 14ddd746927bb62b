"""Abstract base class for identity provisioning providers.

The identity service owns login accounts. The onboarding core only asks it
to create one for an accepted candidate and stores the returned login id as
the candidate's account link.
"""

import uuid
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from talentops.providers.config import ProviderConfig


class IdentityProvider(ABC):
    """Creates login identities for activated candidates."""

    def __init__(self, config: "ProviderConfig") -> None:
        """Initialize with provider configuration.

        Args:
            config: Provider configuration including endpoint and API key.
        """
        self.config = config

    @abstractmethod
    async def provision_account(
        self,
        candidate_id: uuid.UUID,
        temporary_secret: str,
        role: str,
        department: str | None,
    ) -> str:
        """Create a login identity for a candidate.

        Implementations must be idempotent per candidate_id: provisioning the
        same candidate twice returns the same login id.

        Args:
            candidate_id: Candidate being activated.
            temporary_secret: Initial password the user must change.
            role: Role granted to the account.
            department: Department, if any.

        Returns:
            Login identifier (username) of the account.

        Raises:
            ProviderError: On failure.
        """
        ...
