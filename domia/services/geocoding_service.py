"""
Nominatim (OpenStreetMap) geocoding.

Turns a client's postal address into coordinates for tour optimization.
Lookups are best effort: every failure (network error, timeout, HTTP error,
empty or malformed answer) is logged and reported as "no coordinate" instead
of being raised to the caller.
"""

import logging
import math
import re
from typing import Optional

import httpx

from ..config import (
    DEFAULT_COUNTRY,
    GEOCODING_MIN_INTERVAL_SECONDS,
    GEOCODING_TIMEOUT_SECONDS,
    NOMINATIM_BASE_URL,
    NOMINATIM_USER_AGENT,
)
from ..domain.tours.geo import Coordinate
from ..rate_limiter import MinIntervalRateLimiter

logger = logging.getLogger(__name__)

# Country names (French and English spellings) -> ISO codes for Nominatim's countrycodes filter
COUNTRY_CODE_HINTS = (
    ("france", "fr"),
    ("espagne", "es"),
    ("spain", "es"),
    ("belgique", "be"),
    ("belgium", "be"),
    ("suisse", "ch"),
    ("switzerland", "ch"),
    ("luxembourg", "lu"),
)


def _normalize_part(value) -> str:
    return re.sub(r"\s+", " ", str(value if value is not None else "")).strip()


def format_address_for_geocoding(
    address: Optional[str] = None,
    postal_code: Optional[str] = None,
    city: Optional[str] = None,
    country: Optional[str] = None,
) -> str:
    """Build a single-line query such as "12 rue de la Paix, 75002 Paris, France" """
    street = _normalize_part(address)
    locality = " ".join(p for p in (_normalize_part(postal_code), _normalize_part(city)) if p)
    country_name = _normalize_part(country) or DEFAULT_COUNTRY

    return ", ".join(p for p in (street, locality, country_name) if p)


def guess_country_code(country: Optional[str]) -> Optional[str]:
    name = _normalize_part(country).lower()
    if not name:
        return None
    for hint, code in COUNTRY_CODE_HINTS:
        if hint in name:
            return code
    return None


class NominatimGeocoder:
    """Async Nominatim client with its own request throttle"""

    def __init__(
        self,
        base_url: str = NOMINATIM_BASE_URL,
        user_agent: str = NOMINATIM_USER_AGENT,
        timeout: float = GEOCODING_TIMEOUT_SECONDS,
        rate_limiter: Optional[MinIntervalRateLimiter] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self.timeout = timeout
        self.rate_limiter = rate_limiter or MinIntervalRateLimiter(GEOCODING_MIN_INTERVAL_SECONDS)
        self._transport = transport

    async def geocode(
        self,
        address: str,
        country: Optional[str] = None,
        language: Optional[str] = None,
    ) -> Optional[Coordinate]:
        """
        Look up a free-text address.

        Args:
            address: Full address line (see format_address_for_geocoding)
            country: Country name used to restrict the search, if recognized
            language: Preferred result language (Accept-Language header)

        Returns:
            The first match's coordinate, or None
        """
        query = _normalize_part(address)
        if not query:
            return None

        params = {
            "q": query,
            "format": "json",
            "limit": "1",
            "addressdetails": "0",
        }
        country_code = guess_country_code(country)
        if country_code:
            params["countrycodes"] = country_code

        headers = {"User-Agent": self.user_agent, "Accept": "application/json"}
        if language:
            headers["Accept-Language"] = language

        await self.rate_limiter.wait()

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                resp = await client.get(f"{self.base_url}/search", params=params, headers=headers)
        except httpx.HTTPError as e:
            logger.warning(f"⚠️ Nominatim request failed for '{query}': {e}")
            return None

        if resp.status_code >= 400:
            logger.warning(f"Nominatim API error {resp.status_code}: {resp.text[:200]}")
            return None

        try:
            data = resp.json()
        except ValueError:
            logger.warning("Nominatim returned a non-JSON body")
            return None

        if not isinstance(data, list) or not data:
            logger.info(f"ℹ️ No geocoding match for '{query}'")
            return None

        first = data[0] if isinstance(data[0], dict) else {}
        try:
            lat = float(first.get("lat"))
            lon = float(first.get("lon"))
        except (TypeError, ValueError):
            logger.warning(f"Nominatim returned unusable coordinates for '{query}'")
            return None

        if not (math.isfinite(lat) and math.isfinite(lon)):
            return None

        return Coordinate(lat=lat, lon=lon)


_geocoder: Optional[NominatimGeocoder] = None


def get_geocoder() -> NominatimGeocoder:
    """FastAPI dependency returning the application's shared geocoder"""
    global _geocoder
    if _geocoder is None:
        _geocoder = NominatimGeocoder()
    return _geocoder
