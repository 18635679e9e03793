import collections.abc
import dataclasses
import inspect
import logging
import re
from typing import Any, Callable, Dict, List, Optional, Tuple, get_args, get_origin, get_type_hints

from pydantic import BaseModel

from ..errors import RegistrationError, UnknownPrimitiveType, UnsupportedInputKind
from ..models import FunctionDescriptor, ParameterSpec

logger = logging.getLogger(__name__)

FUNCTION_NAME_PATTERN = re.compile(r'^[a-zA-Z0-9_-]+$')

_SCALAR_TYPES = {
    str: "string",
    bool: "boolean",
    int: "integer",
    float: "number",
}
_ARRAY_ORIGINS = (
    list, tuple, set, frozenset,
    collections.abc.Sequence, collections.abc.MutableSequence,
    collections.abc.Set, collections.abc.MutableSet,
)
_OBJECT_ORIGINS = (dict, collections.abc.Mapping, collections.abc.MutableMapping)
_POSITIONAL_KINDS = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


def create_function_definition(func: Callable, description: Optional[str] = None) -> FunctionDescriptor:
    """
    Derives the descriptor of a Python function without calling it.

    Parameters are exposed to the LLM by position: the property keys are "0", "1", ...
    and every parameter is required.

    Args:
        func: The function or bound method to describe.
        description: What the function does. Defaults to the first paragraph of its docstring.

    Returns:
        The FunctionDescriptor for `func`.

    Raises:
        UnsupportedInputKind: If `func` is not a function, has an invalid name or
            parameters that cannot be passed by position.
        UnknownPrimitiveType: If a parameter annotation has no JSON schema type.
        RegistrationError: If no description is given and the docstring has none.
    """
    if not (inspect.isfunction(func) or inspect.ismethod(func)):
        raise UnsupportedInputKind(f"Expected a function, got {type(func).__name__}")

    function_name = func.__name__
    if not FUNCTION_NAME_PATTERN.match(function_name):
        raise UnsupportedInputKind(f"Function name '{function_name}' contains invalid characters")

    doc_description, param_descriptions = _parse_docstring(inspect.getdoc(func) or "")
    description = (description or doc_description or "").strip()
    if not description:
        raise RegistrationError(f"Function '{function_name}' needs a description or a docstring.")

    try:
        type_hints = get_type_hints(func)
    except Exception as e:
        logger.warning("Could not resolve type hints for %s: %s", function_name, e)
        type_hints = {}

    parameters: List[ParameterSpec] = []
    for index, (name, param) in enumerate(inspect.signature(func).parameters.items()):
        if param.kind not in _POSITIONAL_KINDS:
            raise UnsupportedInputKind(
                f"Parameter '{name}' of '{function_name}' cannot be passed by position"
            )

        annotation = type_hints.get(name, param.annotation)
        param_type, items = json_schema_type(annotation, function_name, name)

        param_desc = param_descriptions.get(name)
        parameters.append(ParameterSpec(
            index=index,
            name=name,
            type=param_type,
            description=f"{name}: {param_desc}" if param_desc else f"The {name} parameter",
            items=items,
            annotation=annotation,
        ))

    return FunctionDescriptor(name=function_name, description=description, parameters=parameters)


def json_schema_type(annotation: Any, function_name: str = "", parameter: str = "") -> Tuple[str, Optional[Dict[str, Any]]]:
    """
    Maps a parameter annotation to its JSON schema type and, for arrays, the item schema.
    """
    if annotation is inspect.Parameter.empty:
        return "string", None

    if isinstance(annotation, type) and annotation in _SCALAR_TYPES:
        return _SCALAR_TYPES[annotation], None

    origin = get_origin(annotation)
    if annotation in _ARRAY_ORIGINS or origin in _ARRAY_ORIGINS:
        args = [arg for arg in get_args(annotation) if arg is not Ellipsis]
        if not args:
            return "array", {"type": "string"}
        item_type, item_items = json_schema_type(args[0], function_name, parameter)
        items = {"type": item_type}
        if item_items:
            items["items"] = item_items
        return "array", items

    if annotation in _OBJECT_ORIGINS or origin in _OBJECT_ORIGINS:
        return "object", None

    if is_record_type(annotation):
        return "object", None

    raise UnknownPrimitiveType(function_name, parameter, annotation)


def is_named_tuple(annotation: Any) -> bool:
    return inspect.isclass(annotation) and issubclass(annotation, tuple) and hasattr(annotation, "_fields")


def is_record_type(annotation: Any) -> bool:
    """Pydantic models, dataclasses, NamedTuples and TypedDicts are passed as JSON objects."""
    if not inspect.isclass(annotation):
        return False
    return (
        issubclass(annotation, (BaseModel, dict))
        or dataclasses.is_dataclass(annotation)
        or is_named_tuple(annotation)
    )


_SECTION_HEADERS = ('args:', 'arguments:', 'parameters:', 'params:', 'returns:', 'return:', 'raises:', 'yields:', 'example:', 'examples:')
_SPHINX_PARAM = re.compile(r'^[:@]param\s+(?:\w+\s+)?(\w+):?\s*(.*)$')
_GOOGLE_PARAM = re.compile(r'^(\w+)\s*(?:\([^)]*\))?\s*:\s*(.+)$')


def _parse_docstring(docstring: str) -> Tuple[str, Dict[str, str]]:
    """
    Parse docstring to extract description and parameter descriptions.
    """
    lines = [line.strip() for line in docstring.strip().split('\n')]

    description_lines = []
    for line in lines:
        if not line or line.lower().startswith(_SECTION_HEADERS) or _SPHINX_PARAM.match(line):
            break
        description_lines.append(line)
    description = ' '.join(description_lines).strip()

    param_descriptions = {}
    in_args = False
    for line in lines:
        lowered = line.lower()
        sphinx = _SPHINX_PARAM.match(line)
        if sphinx:
            param_descriptions[sphinx.group(1)] = sphinx.group(2).strip()
            continue
        if lowered.startswith(_SECTION_HEADERS):
            in_args = lowered.startswith(('args:', 'arguments:', 'parameters:', 'params:'))
            continue
        if in_args:
            google = _GOOGLE_PARAM.match(line)
            if google:
                param_descriptions[google.group(1)] = google.group(2).strip()

    return description, param_descriptions
