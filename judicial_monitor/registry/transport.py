"""httpx error translation shared by the registry adapters."""

from typing import Any

import httpx

from judicial_monitor.registry.exceptions import (
    MalformedPayloadError,
    RegistryHTTPError,
    RegistryNetworkError,
    RegistryRateLimitedError,
)


def send(client: httpx.Client, method: str, url: str, **kwargs: Any) -> httpx.Response:
    """Issue a request, mapping transport failures to RegistryNetworkError."""
    try:
        return client.request(method, url, **kwargs)
    except httpx.TimeoutException as exc:
        raise RegistryNetworkError(f"Registry request timed out: {exc}") from exc
    except httpx.TransportError as exc:
        raise RegistryNetworkError(f"Registry network error: {exc}") from exc


def raise_for_status(response: httpx.Response) -> None:
    if response.status_code == 429:
        raise RegistryRateLimitedError(
            "Registry rate limit exceeded",
            retry_after=_retry_after(response),
        )
    if response.is_error:
        raise RegistryHTTPError(
            f"Registry returned HTTP {response.status_code}",
            status_code=response.status_code,
        )


def decode_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise MalformedPayloadError(f"Registry returned invalid JSON: {exc}") from exc


def _retry_after(response: httpx.Response) -> float | None:
    value = response.headers.get("Retry-After")
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None
