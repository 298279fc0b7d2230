from judicial_monitor.logging.logger import Log
from judicial_monitor.metering.base import MeteringGateway


class UnlimitedMeteringGateway(MeteringGateway):
    """Gateway that authorizes everything. For local development and tests."""

    def authorize(self, owner_id: str, units: int, *, action: str) -> None:
        Log.debug(f"Unlimited metering: authorized {units} unit(s) of {action} for {owner_id}")

    def record_usage(self, owner_id: str, units: int, *, action: str) -> None:
        Log.debug(f"Unlimited metering: {units} unit(s) of {action} used by {owner_id}")
