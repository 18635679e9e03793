"""Shared fixtures: a scripted stand-in for the LLM and a registry with the Berlin tools."""
import copy
import json

import pytest

from function_inquiry.registry import FunctionRegistry
from function_inquiry.tools import lookup_city_latitude, lookup_city_longitude, lookup_weather_by_coordinate


def function_call_response(name, arguments):
    """A response whose top choice asks for `name`; `arguments` may be a dict or raw text."""
    if not isinstance(arguments, str):
        arguments = json.dumps(arguments)
    return {"choices": [{
        "index": 0,
        "finish_reason": "function_call",
        "content": None,
        "function_call": {"name": name, "arguments": arguments},
    }]}


def text_response(content):
    return {"choices": [{
        "index": 0,
        "finish_reason": "stop",
        "content": content,
        "function_call": None,
    }]}


class ScriptedLLM:
    """Returns the scripted responses in order and records every request it receives."""

    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    def __call__(self, **kwargs):
        self.calls.append(copy.deepcopy(kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def weather_registry():
    registry = FunctionRegistry()
    registry.register(lookup_city_latitude, "returns the latitude of a given city")
    registry.register(lookup_city_longitude, "returns the longitude of a given city")
    registry.register(lookup_weather_by_coordinate, "returns the weather for a given latitude and longitude")
    return registry


@pytest.fixture
def berlin_script():
    return [
        function_call_response("lookup_city_latitude", {"0": "Berlin"}),
        function_call_response("lookup_city_longitude", {"0": "Berlin"}),
        function_call_response("lookup_weather_by_coordinate", {"0": "52.520008", "1": "13.405"}),
        text_response("It is bright and sunny in Berlin."),
    ]
