"""
/**
 * @file registry.py
 * @purpose Holds the functions the LLM may call, keyed by canonical name.
 *
 * @notes
 * - Built once at startup and only read while questions are answered, so a single
 *   registry can be shared by several Inquiry instances.
 * - Registering a name twice replaces the earlier function (last write wins).
 */
"""

import logging
from typing import Any, Callable, Dict, Iterator, List, NamedTuple, Optional

from .models import FunctionDescriptor, FunctionListing
from .utils.utils import create_function_definition

logger = logging.getLogger(__name__)


class RegisteredFunction(NamedTuple):
    descriptor: FunctionDescriptor
    handle: Callable


class FunctionRegistry:
    """Maps canonical function names to their descriptor and callable."""

    def __init__(self):
        self._functions: Dict[str, RegisteredFunction] = {}
        self._listing: Dict[str, FunctionListing] = {}

    def register(self, func: Callable, description: Optional[str] = None) -> FunctionDescriptor:
        """Derives the descriptor of `func` and stores it under the function's own name."""
        descriptor = create_function_definition(func, description)
        if descriptor.name in self._functions:
            logger.warning("Function '%s' registered twice, replacing the earlier one", descriptor.name)

        self._functions[descriptor.name] = RegisteredFunction(descriptor, func)
        self._listing[descriptor.name] = FunctionListing(name=descriptor.name, description=descriptor.description)
        logger.debug("Registered %s with %d parameter(s)", descriptor.name, descriptor.arity)
        return descriptor

    def get(self, name: str) -> Optional[RegisteredFunction]:
        return self._functions.get(name)

    def listing(self) -> List[FunctionListing]:
        return list(self._listing.values())

    def definitions(self) -> List[Dict[str, Any]]:
        """Returns the function schemas in the format of the OpenAI `functions` parameter."""
        return [entry.descriptor.to_openai() for entry in self._functions.values()]

    def __contains__(self, name: object) -> bool:
        return name in self._functions

    def __len__(self) -> int:
        return len(self._functions)

    def __iter__(self) -> Iterator[str]:
        return iter(self._functions)
