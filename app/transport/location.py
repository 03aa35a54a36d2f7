# app/transport/location.py
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from app.store.models import LocationData

logger = logging.getLogger(__name__)

# Best-effort async lookup (city/region/country). Any provider may be plugged
# in; None or a failure only means the session is stored without a location.
LocationProvider = Callable[[], Awaitable[Optional[LocationData]]]


async def lookup_location(
    provider: Optional[LocationProvider],
    *,
    timezone: Optional[str] = None,
    timeout_sec: float = 5.0,
) -> Optional[LocationData]:
    """
    Location for a finished session, never raising.
    Falls back to timezone-only data when the provider is missing or fails.
    """
    location: Optional[LocationData] = None
    if provider is not None:
        try:
            location = await asyncio.wait_for(provider(), timeout=timeout_sec)
        except asyncio.TimeoutError:
            logger.info("Location lookup timed out after %.1fs", timeout_sec)
        except Exception as e:
            logger.warning("Location lookup failed: %s", e, exc_info=True)

    if location is not None:
        if timezone and not location.timezone:
            location = location.model_copy(update={"timezone": timezone})
        return location

    if timezone:
        return LocationData(timezone=timezone)
    return None
