import pytest

from services.cache_keys import country_key, currency_key, weather_key


@pytest.mark.parametrize("iso", ["no", "NO", "  no ", "\tNo\n"])
def test_country_key_ignores_case_and_whitespace(iso):
    assert country_key(iso) == "NO"


def test_weather_key_rounds_to_one_decimal():
    assert weather_key(59.91, 10.75) == "59.9_10.8"


def test_weather_key_buckets_nearby_coordinates():
    assert weather_key(59.91, 10.71) == weather_key(59.94, 10.74)
    assert weather_key(59.91, 10.75) != weather_key(60.01, 10.75)


def test_weather_key_negative_coordinates():
    assert weather_key(-33.87, -151.21) == "-33.9_-151.2"


def test_currency_key_is_order_independent():
    key1 = currency_key("NOK", ["USD", "EUR", "SEK"])
    key2 = currency_key("NOK", ["SEK", "USD", "EUR"])

    assert key1 == key2
    assert key1 == "NOK_EUR_SEK_USD"
    assert key1.startswith("NOK")


def test_currency_key_does_not_mutate_targets():
    targets = ["USD", "EUR"]
    currency_key("NOK", targets)
    assert targets == ["USD", "EUR"]


def test_currency_key_ignores_case_and_repeats():
    assert currency_key("nok", ["usd", " EUR", "USD"]) == currency_key("NOK", ["EUR", "USD"]) == "NOK_EUR_USD"
