"""
/**
 * @file weather.py
 * @purpose Sample functions for the Berlin weather demo: city coordinates and a weather lookup.
 *
 * @notes
 * - Canned data only; every function takes and returns strings.
 * - Swapping latitude and longitude yields a different forecast on purpose.
 */
"""

BERLIN_LAT = "52.520008"
BERLIN_LONG = "13.405"


def lookup_city_latitude(city_name: str) -> str:
    """Returns the latitude of a given city."""
    if city_name.strip().lower() == "berlin":
        return BERLIN_LAT
    return "0.0"


def lookup_city_longitude(city_name: str) -> str:
    """Returns the longitude of a given city."""
    if city_name.strip().lower() == "berlin":
        return BERLIN_LONG
    return "0.01"


def lookup_weather_by_coordinate(lat: str, long: str) -> str:
    """
    Returns the weather for a given latitude and longitude.

    Args:
        lat: Latitude in decimal degrees
        long: Longitude in decimal degrees
    """
    if lat == BERLIN_LAT and long == BERLIN_LONG:
        return "bright and sunny weather out there"
    if lat == BERLIN_LONG and long == BERLIN_LAT:
        return "high chance of hurricanes in the area"
    return "overcast and grey, with a chance of hail"
