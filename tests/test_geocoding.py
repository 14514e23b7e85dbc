import asyncio

import httpx
import pytest

from domia.domain.tours.geo import Coordinate
from domia.rate_limiter import MinIntervalRateLimiter
from domia.services.geocoding_service import (
    NominatimGeocoder,
    format_address_for_geocoding,
    guess_country_code,
)


class FakeClock:
    def __init__(self, start=100.0):
        self.now = start
        self.sleeps = []

    def __call__(self):
        return self.now

    async def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


def make_geocoder(handler, clock=None):
    clock = clock or FakeClock()
    limiter = MinIntervalRateLimiter(1.1, clock=clock, sleep=clock.sleep)
    return NominatimGeocoder(
        base_url="https://nominatim.test",
        user_agent="domia-tests/1.0",
        timeout=8,
        rate_limiter=limiter,
        transport=httpx.MockTransport(handler),
    )


def test_format_address():
    assert (
        format_address_for_geocoding(" 12  rue de la Paix ", "75002", "Paris", "France")
        == "12 rue de la Paix, 75002 Paris, France"
    )
    assert format_address_for_geocoding("5 rue Neuve", None, "Lille", None) == "5 rue Neuve, Lille, France"


@pytest.mark.parametrize(
    "country,code",
    [("France", "fr"), ("Belgique", "be"), ("Switzerland", "ch"), ("Atlantis", None), (None, None)],
)
def test_guess_country_code(country, code):
    assert guess_country_code(country) == code


def test_geocode_sends_nominatim_query_and_parses_result():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = request.url
        seen["headers"] = request.headers
        return httpx.Response(200, json=[{"lat": "48.8698", "lon": "2.3311", "display_name": "Paris"}])

    geocoder = make_geocoder(handler)
    result = asyncio.run(geocoder.geocode("12 rue de la Paix, 75002 Paris, France", "France", "fr"))

    assert result == Coordinate(48.8698, 2.3311)
    assert seen["url"].path == "/search"
    params = seen["url"].params
    assert params["q"] == "12 rue de la Paix, 75002 Paris, France"
    assert params["format"] == "json"
    assert params["limit"] == "1"
    assert params["countrycodes"] == "fr"
    assert seen["headers"]["User-Agent"] == "domia-tests/1.0"
    assert seen["headers"]["Accept-Language"] == "fr"


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, json=[]),
        httpx.Response(500, text="boom"),
        httpx.Response(429, text="slow down"),
        httpx.Response(200, text="<html>not json</html>"),
        httpx.Response(200, json=[{"lat": "north", "lon": "2.3"}]),
        httpx.Response(200, json=[{"lat": "nan", "lon": "2.3"}]),
        httpx.Response(200, json={"error": "Unable to geocode"}),
    ],
)
def test_geocode_failures_become_none(response):
    geocoder = make_geocoder(lambda request: response)
    assert asyncio.run(geocoder.geocode("somewhere")) is None


def test_geocode_network_error_becomes_none():
    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    geocoder = make_geocoder(handler)
    assert asyncio.run(geocoder.geocode("12 rue de la Paix")) is None


def test_blank_address_skips_the_request():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json=[])

    geocoder = make_geocoder(handler)
    assert asyncio.run(geocoder.geocode("   ")) is None
    assert calls == []


def test_consecutive_lookups_are_spaced_out():
    clock = FakeClock()
    geocoder = make_geocoder(lambda request: httpx.Response(200, json=[{"lat": "1", "lon": "2"}]), clock)

    async def lookups():
        await geocoder.geocode("first")
        clock.now += 0.4
        await geocoder.geocode("second")
        clock.now += 5
        await geocoder.geocode("third")

    asyncio.run(lookups())

    # Only the second call came too early
    assert clock.sleeps == [pytest.approx(0.7)]


def test_rate_limiter_first_call_does_not_wait():
    clock = FakeClock()
    limiter = MinIntervalRateLimiter(1.0, clock=clock, sleep=clock.sleep)

    assert asyncio.run(limiter.wait()) == 0.0
    assert clock.sleeps == []


def test_rate_limiter_rejects_negative_interval():
    with pytest.raises(ValueError):
        MinIntervalRateLimiter(-1)
