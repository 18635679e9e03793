"""
Tools submodule for the inquiry framework.

Sample functions that can be registered with an Inquiry to demonstrate function calling.

@notes
- All sample tools are pure lookups over canned data.
"""

from .weather import lookup_city_latitude, lookup_city_longitude, lookup_weather_by_coordinate

# Define public API for import *
__all__ = [
    "lookup_city_latitude",
    "lookup_city_longitude",
    "lookup_weather_by_coordinate",
]
