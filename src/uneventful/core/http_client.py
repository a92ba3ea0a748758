"""
Shared httpx client setup with lazy initialization.
"""

import httpx

_http_client: httpx.AsyncClient | None = None


def get_http_client() -> httpx.AsyncClient:
    """Get or create the shared async HTTP client (lazy initialization)."""
    global _http_client
    if _http_client is None:
        _http_client = httpx.AsyncClient(
            timeout=30.0,
            headers={"Accept": "application/json"},
        )
    return _http_client


async def close_http_client() -> None:
    """Close the shared client, if one was created."""
    global _http_client
    if _http_client is not None:
        await _http_client.aclose()
        _http_client = None


def safe_error_message(response: httpx.Response) -> str:
    """Condense a provider error payload into a short, loggable message."""
    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        error_payload = payload.get("error")
        if isinstance(error_payload, dict):
            message = error_payload.get("message")
            if isinstance(message, str) and message.strip():
                return " ".join(message.split())[:200]
        if isinstance(error_payload, str) and error_payload.strip():
            description = payload.get("error_description")
            if isinstance(description, str) and description.strip():
                return f"{error_payload}: {' '.join(description.split())}"[:200]
            return error_payload.strip()[:200]

    raw_text = response.text.strip()
    if raw_text:
        return " ".join(raw_text.split())[:200]
    return "Request failed without an error payload"
