"""
Best-effort IP to location lookup.

The provider is an unauthenticated third-party HTTP endpoint, so its answer
is treated as untrusted display text. Every failure (timeout, transport
error, bad status, malformed payload) degrades to returning the IP itself;
a lookup never fails a login.
"""

import logging

import httpx

from calendarium.core.config import settings

logger = logging.getLogger(__name__)

LOCAL_ADDRESSES = frozenset({"127.0.0.1", "::1", "localhost"})
LOCAL_LABEL = "Local"

# Location column width
MAX_LOCATION_LENGTH = 255


async def locate(ip: str | None, client: httpx.AsyncClient | None = None) -> str | None:
    """
    Resolve ``ip`` to ``"City, Region, Country"``.

    Args:
        ip: Client address; None when the transport did not expose one
        client: Optional client to reuse (tests inject a mocked transport)

    Returns:
        "Local" for loopback addresses, the joined location parts on a
        successful lookup, otherwise ``ip`` unchanged
    """
    if not ip:
        return ip
    if ip in LOCAL_ADDRESSES:
        return LOCAL_LABEL
    if not settings.geolocation_enabled:
        return ip

    url = settings.geolocation_url.format(ip=ip)
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=settings.geolocation_timeout) as own_client:
                response = await own_client.get(url)
        else:
            response = await client.get(url, timeout=settings.geolocation_timeout)
        response.raise_for_status()
        payload = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.warning(f"Geolocation lookup failed for {ip}: {e}")
        return ip

    if not isinstance(payload, dict) or payload.get("status") != "success":
        logger.info(f"Geolocation provider has no answer for {ip}")
        return ip

    parts = [
        str(payload[key]).strip()
        for key in ("city", "regionName", "country")
        if payload.get(key)
    ]
    if not parts:
        return ip
    return ", ".join(parts)[:MAX_LOCATION_LENGTH]
