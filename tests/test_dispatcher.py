"""Tests for invoking registered functions by name with text arguments."""
import asyncio
from dataclasses import dataclass
from typing import Dict, List, NamedTuple, Set, Tuple

import pytest
from pydantic import BaseModel
from typing_extensions import TypedDict

from function_inquiry.dispatcher import Dispatcher, render_result
from function_inquiry.errors import (
    ArgumentCoercionError,
    ArityMismatch,
    FunctionExecutionError,
    UnknownFunction,
)
from function_inquiry.registry import FunctionRegistry


class Point(BaseModel):
    x: float
    y: float


@dataclass
class Window:
    start: str
    end: str


class Span(NamedTuple):
    start: int
    end: int


class Address(TypedDict):
    city: str
    zip: str


def concat(first: str, second: str) -> str:
    return f"{first}|{second}"


def add(a: int, b: int) -> int:
    return a + b


def scale(value: float, factor: float) -> float:
    return value * factor


def negate(flag: bool) -> bool:
    return not flag


def total(values: List[int]) -> int:
    return sum(values)


def pair_type(values: Tuple[str, ...]) -> str:
    return type(values).__name__


def unique(tags: Set[str]) -> str:
    return ",".join(sorted(tags))


def mean(scores: Dict[str, float]) -> float:
    return sum(scores.values()) / len(scores)


def span_length(span: Span) -> int:
    return span.end - span.start


def city_of(address: Address) -> str:
    return address["city"]


def distance(point: Point) -> float:
    return (point.x ** 2 + point.y ** 2) ** 0.5


def window_length(window: Window) -> str:
    return f"{window.start}-{window.end}"


def keys(mapping: dict) -> list:
    return sorted(mapping)


def nothing(value: str) -> None:
    return None


def explode(value: str) -> str:
    raise RuntimeError("boom")


async def slow_echo(value: str) -> str:
    await asyncio.sleep(0)
    return f"echo {value}"


@pytest.fixture
def dispatcher():
    registry = FunctionRegistry()
    for func in (concat, add, scale, negate, total, pair_type, unique, mean, span_length, city_of, distance, window_length,
                 keys, nothing, explode, slow_echo):
        registry.register(func, f"test function {func.__name__}")
    return Dispatcher(registry)


class TestInvoke:
    """Successful invocations."""

    @pytest.mark.asyncio
    async def test_arguments_keep_their_order(self, dispatcher):
        assert await dispatcher.invoke("concat", ["a", "b"]) == "a|b"
        assert await dispatcher.invoke("concat", ["b", "a"]) == "b|a"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name, args, expected", [
        ("add", ["2", " 40 "], "42"),
        ("scale", ["1.5", "2"], "3.0"),
        ("negate", ["TRUE"], "False"),
        ("negate", ["no"], "True"),
        ("total", ["[1, 2, 3]"], "6"),
        ("total", ['["1", "2"]'], "3"),
        ("pair_type", ['["a", "b"]'], "tuple"),
        ("unique", ['["b", "a", "b"]'], "a,b"),
        ("mean", ['{"a": 1, "b": "2"}'], "1.5"),
        ("span_length", ['{"start": 2, "end": "9"}'], "7"),
        ("city_of", ['{"city": "Berlin", "zip": "10115"}'], "Berlin"),
        ("distance", ['{"x": 3, "y": 4}'], "5.0"),
        ("window_length", ['{"start": "9", "end": "17"}'], "9-17"),
        ("keys", ['{"b": 1, "a": 2}'], '["a", "b"]'),
        ("nothing", ["anything"], "null"),
    ])
    async def test_arguments_are_coerced(self, dispatcher, name, args, expected):
        assert await dispatcher.invoke(name, args) == expected

    @pytest.mark.asyncio
    async def test_coroutine_functions_are_awaited(self, dispatcher):
        assert await dispatcher.invoke("slow_echo", ["hi"]) == "echo hi"


class TestInvokeErrors:
    """Dispatch-time failures."""

    @pytest.mark.asyncio
    async def test_unknown_function(self, dispatcher):
        with pytest.raises(UnknownFunction) as exc_info:
            await dispatcher.invoke("lookup_population", ["Berlin"])
        assert exc_info.value.function_name == "lookup_population"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("args", [[], ["1"], ["1", "2", "3"]])
    async def test_arity_mismatch(self, dispatcher, args):
        with pytest.raises(ArityMismatch) as exc_info:
            await dispatcher.invoke("add", args)
        assert exc_info.value.expected == 2
        assert exc_info.value.received == len(args)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name, args, index", [
        ("add", ["1", "two"], 1),
        ("add", ["4.2", "1"], 0),
        ("scale", ["nan", "1"], 0),
        ("scale", ["1", "inf"], 1),
        ("negate", ["maybe"], 0),
        ("total", ['{"a": 1}'], 0),
        ("total", ["not json"], 0),
        ("total", ['["1", "two"]'], 0),
        ("total", ["[1.5]"], 0),
        ("unique", ["[[\"a\"]]"], 0),
        ("mean", ['{"a": "high"}'], 0),
        ("span_length", ['{"start": 2}'], 0),
        ("city_of", ['{"city": "Berlin"}'], 0),
        ("distance", ['{"x": "far", "y": 4}'], 0),
        ("distance", ["[3, 4]"], 0),
        ("window_length", ['{"start": "9"}'], 0),
    ])
    async def test_coercion_errors(self, dispatcher, name, args, index):
        with pytest.raises(ArgumentCoercionError) as exc_info:
            await dispatcher.invoke(name, args)
        assert exc_info.value.index == index
        assert exc_info.value.value == args[index]

    @pytest.mark.asyncio
    async def test_function_errors_are_wrapped(self, dispatcher):
        with pytest.raises(FunctionExecutionError) as exc_info:
            await dispatcher.invoke("explode", ["x"])
        assert isinstance(exc_info.value.__cause__, RuntimeError)


class TestRenderResult:
    def test_strings_pass_through(self):
        assert render_result("52.520008") == "52.520008"

    def test_models_and_containers_are_json(self):
        assert render_result(Point(x=1, y=2)) == '{"x":1.0,"y":2.0}'
        assert render_result({"status": "Paid"}) == '{"status": "Paid"}'
        assert render_result((1, 2)) == "[1, 2]"

    def test_scalars_use_str(self):
        assert render_result(3) == "3"
        assert render_result(True) == "True"
