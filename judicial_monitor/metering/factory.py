from judicial_monitor.config.settings import Settings
from judicial_monitor.metering.base import MeteringGateway
from judicial_monitor.metering.http_gateway import HttpMeteringGateway
from judicial_monitor.metering.unlimited_gateway import UnlimitedMeteringGateway


class MeteringGatewayFactory:
    """Creates the configured metering gateway."""

    @classmethod
    def create(cls, settings: Settings) -> MeteringGateway:
        provider = settings.metering_provider.lower()
        if provider == "unlimited":
            return UnlimitedMeteringGateway()
        if provider == "http":
            url = settings.metering_base_url.strip()
            if not url:
                raise ValueError("metering_base_url is required for metering_provider=http")
            return HttpMeteringGateway(
                base_url=url,
                api_key=settings.metering_api_key,
                tool_type=settings.metering_tool_type,
                timeout_seconds=settings.metering_timeout_seconds,
            )
        raise ValueError(
            f"Unknown metering provider '{provider}'. Choose from: ['http', 'unlimited']"
        )
