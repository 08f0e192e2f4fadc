"""Domain and wire models shared by the services and routes.

JSON field names are camelCase on the wire (``isoCode``, ``targetCurrencies``)
and snake_case in Python.
"""

import enum
from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")

TIMESTAMP_LAYOUT = "%Y%m%d %H:%M"


class Category(str, enum.Enum):
    """Enrichment data categories, each with its own cache collection."""

    COUNTRY = "country"
    WEATHER = "weather"
    CURRENCY = "currency"

    @property
    def collection(self) -> str:
        return f"{self.value}_cache"


class Event(str, enum.Enum):
    REGISTER = "REGISTER"
    CHANGE = "CHANGE"
    PATCH = "PATCH"
    DELETE = "DELETE"
    INVOKE = "INVOKE"
    LOW_TEMP = "LOW_TEMP"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Dashboard configuration (owned by the registration workflow)
# ---------------------------------------------------------------------------

class FeatureConfig(CamelModel):
    temperature: bool = False
    precipitation: bool = False
    capital: bool = False
    coordinates: bool = False
    population: bool = False
    area: bool = False
    target_currencies: list[str] = Field(default_factory=list)

    @property
    def wants_country(self) -> bool:
        return self.capital or self.coordinates or self.population or self.area

    @property
    def wants_weather(self) -> bool:
        return self.temperature or self.precipitation

    @property
    def wants_currency(self) -> bool:
        return bool(self.target_currencies)


class DashboardConfig(CamelModel):
    id: str = ""
    country: str = ""
    iso_code: str = ""
    features: FeatureConfig = Field(default_factory=FeatureConfig)
    last_change: str = ""


class RegistrationRequest(CamelModel):
    country: str = ""
    iso_code: str = ""
    features: FeatureConfig = Field(default_factory=FeatureConfig)


class RegistrationResponse(CamelModel):
    id: str
    last_change: str


# ---------------------------------------------------------------------------
# Provider payloads (normalized) and the cache envelope
# ---------------------------------------------------------------------------

class CurrencyDetails(BaseModel):
    name: str = ""
    symbol: str = ""


class CountryInfo(BaseModel):
    name: str = ""
    capital: list[str] = Field(default_factory=list)
    latlng: list[float] = Field(default_factory=list)
    population: int = 0
    area: float = 0.0
    currencies: dict[str, CurrencyDetails] = Field(default_factory=dict)


class WeatherData(BaseModel):
    temperature: float
    precipitation: float


class CurrencyRates(BaseModel):
    rates: dict[str, float]


class CacheEntry(BaseModel, Generic[T]):
    """Stored cache record. ``timestamp`` is the write instant."""

    timestamp: datetime
    data: T


# ---------------------------------------------------------------------------
# Enrichment results
# ---------------------------------------------------------------------------

class Coordinates(BaseModel):
    latitude: float
    longitude: float


class PopulatedFeatures(CamelModel):
    capital: str | None = None
    coordinates: Coordinates | None = None
    population: int | None = None
    area: float | None = None
    temperature: float | None = None
    precipitation: float | None = None
    target_currencies: dict[str, float] | None = None


class PopulatedDashboard(CamelModel):
    id: str
    country: str
    iso_code: str
    features: PopulatedFeatures
    last_retrieval: str


# ---------------------------------------------------------------------------
# Notifications and status
# ---------------------------------------------------------------------------

class Webhook(BaseModel):
    id: str = ""
    url: str
    event: Event
    country: str = ""


class WebhookRequest(BaseModel):
    url: str = ""
    event: str = ""
    country: str = ""


class StatusReport(BaseModel):
    countries_api: int
    meteo_api: int
    currency_api: int
    notification_db: int
    webhooks: int
    version: str
    uptime: int


def format_timestamp(moment: datetime) -> str:
    return moment.strftime(TIMESTAMP_LAYOUT)
