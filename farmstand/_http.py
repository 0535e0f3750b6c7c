"""Shared httpx client setup for the hosted (PostgREST-style) backend."""

import httpx


def rest_client(
    base_url: str,
    api_key: str,
    timeout: float = 10.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """
    Build an AsyncClient for ``{base_url}/rest/v1``.

    Args:
        base_url: Project URL of the hosted backend
        api_key: Anon key, sent both as ``apikey`` and as bearer token
        timeout: Per-request timeout in seconds
        transport: Optional transport override (tests use httpx.MockTransport)
    """
    return httpx.AsyncClient(
        base_url=f"{base_url.rstrip('/')}/rest/v1",
        timeout=timeout,
        transport=transport,
        headers={
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        },
    )


def error_message(response: httpx.Response) -> str:
    """Best-effort human readable message from an error response."""
    try:
        data = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    if isinstance(data, dict):
        for field in ("message", "error_description", "error", "hint"):
            if data.get(field):
                return str(data[field])
    return f"HTTP {response.status_code}"
