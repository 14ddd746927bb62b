"""Tests for provider factory singletons."""

from collections.abc import Iterator

import pytest

from talentops.providers import factory
from talentops.providers.config import ProviderConfig
from talentops.providers.extraction.http_adapter import HttpExtractionProvider
from talentops.providers.extraction.mock_adapter import MockExtractionProvider
from talentops.providers.identity.http_adapter import HttpIdentityProvider
from talentops.providers.identity.mock_adapter import MockIdentityProvider
from talentops.providers.notification.mock_adapter import MockNotificationProvider
from talentops.providers.notification.resend_adapter import (
    ResendNotificationProvider,
)


@pytest.fixture(autouse=True)
def clean_factory() -> Iterator[None]:
    factory.reset_providers()
    yield
    factory.reset_providers()


class TestProviderSelection:
    """Configured names map to adapters."""

    def test_mock_providers_by_default(self) -> None:
        config = ProviderConfig()

        assert isinstance(factory.get_identity_provider(config), MockIdentityProvider)
        assert isinstance(
            factory.get_notification_provider(config), MockNotificationProvider
        )
        assert isinstance(
            factory.get_extraction_provider(config), MockExtractionProvider
        )

    def test_real_adapters(self) -> None:
        config = ProviderConfig(
            identity_provider="http",
            notification_provider="resend",
            extraction_provider="http",
        )

        assert isinstance(factory.get_identity_provider(config), HttpIdentityProvider)
        assert isinstance(
            factory.get_notification_provider(config), ResendNotificationProvider
        )
        assert isinstance(
            factory.get_extraction_provider(config), HttpExtractionProvider
        )

    @pytest.mark.parametrize(
        ("getter", "field"),
        [
            (factory.get_identity_provider, "identity_provider"),
            (factory.get_notification_provider, "notification_provider"),
            (factory.get_extraction_provider, "extraction_provider"),
        ],
    )
    def test_unknown_provider_raises(self, getter, field: str) -> None:
        config = ProviderConfig(**{field: "carrier-pigeon"})

        with pytest.raises(ValueError, match="carrier-pigeon"):
            getter(config)


class TestSingletons:
    """Instances are cached until reset."""

    def test_returns_same_instance(self) -> None:
        first = factory.get_identity_provider(ProviderConfig())

        assert factory.get_identity_provider() is first

    def test_reset_clears_instances(self) -> None:
        first = factory.get_notification_provider(ProviderConfig())

        factory.reset_providers()

        assert factory.get_notification_provider(ProviderConfig()) is not first

    def test_config_loaded_from_env_once(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PROVIDER_MAX_RETRIES", "7")

        config = factory.get_provider_config()

        assert config.max_retries == 7
        assert factory.get_provider_config() is config
