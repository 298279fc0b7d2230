from typing import Any

import httpx

from judicial_monitor.logging.logger import Log
from judicial_monitor.metering.base import MeteringGateway
from judicial_monitor.metering.exceptions import AuthorizationDenied, MeteringError


class HttpMeteringGateway(MeteringGateway):
    """Metering gateway backed by the credits HTTP service.

    ``POST /credits-authorize`` answers 402 (or ``allowed: false``) when the
    balance is insufficient; ``POST /credits-consume`` records usage.
    """

    AUTHORIZE_PATH = "/credits-authorize"
    CONSUME_PATH = "/credits-consume"

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        tool_type: str,
        timeout_seconds: int,
        client: httpx.Client | None = None,
    ) -> None:
        self._client = client or httpx.Client(
            base_url=base_url,
            timeout=timeout_seconds,
            headers={"Authorization": f"Bearer {api_key}"},
        )
        self._tool_type = tool_type

    def authorize(self, owner_id: str, units: int, *, action: str) -> None:
        response = self._post(self.AUTHORIZE_PATH, owner_id, units, action)
        body = _json_or_empty(response)
        if response.status_code == 402 or body.get("allowed") is False:
            Log.warning(f"Metering denied {units} unit(s) of {action} for owner {owner_id}")
            raise AuthorizationDenied(
                f"Insufficient credits for {action}",
                current_balance=body.get("currentBalance"),
                required=body.get("required"),
            )
        if response.is_error:
            raise MeteringError(f"Metering service returned HTTP {response.status_code}")

    def record_usage(self, owner_id: str, units: int, *, action: str) -> None:
        if units <= 0:
            return
        response = self._post(self.CONSUME_PATH, owner_id, units, action)
        if response.is_error:
            raise MeteringError(
                f"Failed to record {units} unit(s) for owner {owner_id}: "
                f"HTTP {response.status_code}"
            )
        Log.debug(f"Recorded {units} unit(s) of {action} for owner {owner_id}")

    def _post(self, path: str, owner_id: str, units: int, action: str) -> httpx.Response:
        try:
            return self._client.post(
                path,
                json={
                    "lawyerId": owner_id,
                    "toolType": self._tool_type,
                    "units": units,
                    "metadata": {"action": action},
                },
            )
        except httpx.HTTPError as exc:
            raise MeteringError(f"Metering service unreachable: {exc}") from exc


def _json_or_empty(response: httpx.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}
