"""Deterministic cache keys for each enrichment category."""

KEY_SEPARATOR = "_"


def country_key(iso_code: str) -> str:
    return iso_code.strip().upper()


def weather_key(latitude: float, longitude: float) -> str:
    """Bucket coordinates into a 0.1° cell, e.g. (59.91, 10.75) -> "59.9_10.8"."""
    return f"{latitude:.1f}{KEY_SEPARATOR}{longitude:.1f}"


def currency_key(base: str, targets: list[str]) -> str:
    """Base code followed by the sorted, de-duplicated target codes.

    Codes are upper-cased, so target order, case and repeats do not matter.
    """
    codes = sorted({target.strip().upper() for target in targets})
    return KEY_SEPARATOR.join([base.strip().upper(), *codes])
