"""
/**
 * @file dispatcher.py
 * @purpose Invokes a registered function by name with the text arguments the LLM supplied.
 *
 * @dependencies
 * - pydantic: TypeAdapter validation of array and object arguments against their annotation.
 *
 * @notes
 * - Arguments are coerced with an explicit switch over the declared JSON schema type;
 *   no code is evaluated.
 * - Arguments are passed positionally, in the order given.
 * - Coroutine functions are awaited.
 */
"""

import inspect
import json
import logging
import math
from functools import lru_cache
from typing import Any, Callable, Dict, List, Sequence

from pydantic import BaseModel, TypeAdapter, ValidationError

from .errors import ArgumentCoercionError, ArityMismatch, FunctionExecutionError, UnknownFunction
from .models import ParameterSpec
from .registry import FunctionRegistry
from .utils.utils import is_named_tuple

logger = logging.getLogger(__name__)

_TRUE_VALUES = ("true", "1", "yes")
_FALSE_VALUES = ("false", "0", "no")


def _to_string(text: str, spec: ParameterSpec) -> str:
    return text


def _to_integer(text: str, spec: ParameterSpec) -> int:
    return int(text.strip())


def _to_number(text: str, spec: ParameterSpec) -> float:
    value = float(text.strip())
    if not math.isfinite(value):
        raise ValueError("not a finite number")
    return value


def _to_boolean(text: str, spec: ParameterSpec) -> bool:
    lowered = text.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError("expected true or false")


@lru_cache(maxsize=None)
def _adapter(annotation: Any) -> TypeAdapter:
    return TypeAdapter(annotation)


def _to_array(text: str, spec: ParameterSpec) -> Any:
    value = json.loads(text)
    if not isinstance(value, list):
        raise ValueError("expected a JSON array")
    return _adapter(spec.annotation).validate_python(value)


def _to_object(text: str, spec: ParameterSpec) -> Any:
    value = json.loads(text)
    if not isinstance(value, dict):
        raise ValueError("expected a JSON object")
    if is_named_tuple(spec.annotation):
        value = spec.annotation(**value)
    return _adapter(spec.annotation).validate_python(value)


COERCERS: Dict[str, Callable[[str, ParameterSpec], Any]] = {
    "string": _to_string,
    "integer": _to_integer,
    "number": _to_number,
    "boolean": _to_boolean,
    "array": _to_array,
    "object": _to_object,
}


def render_result(result: Any) -> str:
    """Renders a function's return value as the text sent back to the LLM."""
    if isinstance(result, str):
        return result
    if isinstance(result, BaseModel):
        return result.model_dump_json()
    if result is None or isinstance(result, (dict, list, tuple)):
        return json.dumps(result, ensure_ascii=False, default=str)
    return str(result)


class Dispatcher:
    """Looks up functions in a registry and calls them with coerced arguments."""

    def __init__(self, registry: FunctionRegistry):
        self.registry = registry

    def coerce_arguments(self, name: str, args: Sequence[str]) -> List[Any]:
        entry = self.registry.get(name)
        if entry is None:
            raise UnknownFunction(name)

        parameters = entry.descriptor.parameters
        if len(args) != len(parameters):
            raise ArityMismatch(name, len(parameters), len(args))

        values = []
        for spec, text in zip(parameters, args):
            try:
                values.append(COERCERS[spec.type](text, spec))
            except (ValueError, TypeError, ValidationError) as e:
                raise ArgumentCoercionError(name, spec.index, spec.type, text, str(e)) from e
        return values

    async def invoke(self, name: str, args: Sequence[str]) -> str:
        """
        Calls the function registered under `name` and returns its result as text.

        Raises:
            UnknownFunction: If no function is registered under `name`.
            ArityMismatch: If the number of arguments differs from the parameter count.
            ArgumentCoercionError: If an argument cannot be parsed into its declared type.
            FunctionExecutionError: If the function itself raises.
        """
        values = self.coerce_arguments(name, args)
        handle = self.registry.get(name).handle

        logger.info("Calling %s with %d argument(s)", name, len(values))
        try:
            result = handle(*values)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            raise FunctionExecutionError(name, f"Function '{name}' raised {type(e).__name__}: {e}") from e

        return render_result(result)
