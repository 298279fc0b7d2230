from judicial_monitor.config.settings import Settings
from judicial_monitor.registry.base import BaseRegistryClient
from judicial_monitor.registry.example_adapter import ExampleRegistryClient
from judicial_monitor.registry.firecrawl_adapter import FirecrawlClient
from judicial_monitor.registry.rama_judicial_adapter import RamaJudicialClient


class RegistryClientFactory:
    """Creates the configured registry adapter."""

    SUPPORTED = ("rama_judicial", "firecrawl", "example")

    @classmethod
    def create(cls, settings: Settings) -> BaseRegistryClient:
        """Create a registry client from application settings."""
        provider = settings.registry_provider.lower()
        if provider == "example":
            return ExampleRegistryClient()
        if provider == "rama_judicial":
            return RamaJudicialClient(
                base_url=settings.rama_judicial_base_url,
                timeout_seconds=settings.registry_timeout_seconds,
                max_pages=settings.rama_judicial_max_pages,
            )
        if provider == "firecrawl":
            if not settings.firecrawl_api_key:
                raise ValueError("firecrawl_api_key is required for registry_provider=firecrawl")
            return FirecrawlClient(
                api_key=settings.firecrawl_api_key,
                base_url=settings.firecrawl_base_url,
                timeout_seconds=settings.registry_timeout_seconds,
                wait_for_ms=settings.firecrawl_wait_for_ms,
            )
        raise ValueError(
            f"Unknown registry provider '{provider}'. Choose from: {list(cls.SUPPORTED)}"
        )
