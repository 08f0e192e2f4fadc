"""Upstream data providers: REST Countries, Open-Meteo and Frankfurter.

Free APIs, no keys required. Each function makes a single GET and normalizes
the response. Failures raise ProviderError tagged with the category; retries
are left to the caller.
"""

import logging

import httpx
from pydantic import ValidationError

from config import settings
from errors import NoBaseCurrencyError, ProviderError
from services.models import Category, CountryInfo, CurrencyRates, WeatherData

logger = logging.getLogger(__name__)


def new_client() -> httpx.AsyncClient:
    """Shared client for all providers, created once per process."""
    return httpx.AsyncClient(timeout=settings.http_timeout_seconds)


async def _get_json(client: httpx.AsyncClient, category: Category, url: str, params: dict | None = None):
    try:
        resp = await client.get(url, params=params)
        resp.raise_for_status()
        return resp.json()
    except httpx.HTTPError as e:
        logger.warning("%s provider request failed for %s: %s", category.value, url, e)
        raise ProviderError(category, str(e)) from e
    except ValueError as e:
        raise ProviderError(category, f"invalid JSON body: {e}") from e


async def fetch_country(client: httpx.AsyncClient, iso_code: str) -> CountryInfo:
    """Look up capital, coordinates, population, area and currencies for an ISO code."""
    url = f"{settings.countries_api_url}/alpha/{iso_code.strip().upper()}"
    data = await _get_json(client, Category.COUNTRY, url)

    if not isinstance(data, list) or not data or not isinstance(data[0], dict):
        raise ProviderError(Category.COUNTRY, f"invalid country response for {iso_code}")
    raw = data[0]

    try:
        return CountryInfo(
            name=(raw.get("name") or {}).get("common", ""),
            capital=raw.get("capital") or [],
            latlng=raw.get("latlng") or [],
            population=raw.get("population") or 0,
            area=raw.get("area") or 0.0,
            currencies=raw.get("currencies") or {},
        )
    except (ValidationError, AttributeError) as e:
        raise ProviderError(Category.COUNTRY, f"invalid country response: {e}") from e


async def fetch_country_name(client: httpx.AsyncClient, iso_code: str) -> str:
    country = await fetch_country(client, iso_code)
    if not country.name:
        raise ProviderError(Category.COUNTRY, f"no country found for ISO code: {iso_code}")
    return country.name


async def fetch_weather(client: httpx.AsyncClient, latitude: float, longitude: float) -> WeatherData:
    """Current temperature (°C) and precipitation (mm) at a location."""
    data = await _get_json(
        client,
        Category.WEATHER,
        f"{settings.weather_api_url}/v1/forecast",
        params={
            "latitude": f"{latitude:.4f}",
            "longitude": f"{longitude:.4f}",
            "current": "temperature_2m,precipitation",
        },
    )
    try:
        current = data["current"]
        return WeatherData(
            temperature=current["temperature_2m"],
            precipitation=current["precipitation"],
        )
    except (KeyError, TypeError, ValidationError) as e:
        raise ProviderError(Category.WEATHER, f"invalid weather response structure: {e}") from e


def base_currency(country: CountryInfo, iso_code: str = "") -> str:
    """First currency listed for the country."""
    for code in country.currencies:
        return code
    raise NoBaseCurrencyError(iso_code or country.name)


async def fetch_currency_rates(client: httpx.AsyncClient, base: str, targets: list[str]) -> CurrencyRates:
    """Exchange rates from ``base`` into each of ``targets``."""
    if not base:
        raise NoBaseCurrencyError("")

    data = await _get_json(
        client,
        Category.CURRENCY,
        f"{settings.currency_api_url}/latest",
        params={"from": base, "to": ",".join(targets)},
    )
    try:
        return CurrencyRates(rates=data["rates"])
    except (KeyError, TypeError, ValidationError) as e:
        raise ProviderError(Category.CURRENCY, f"invalid currency response structure: {e}") from e
