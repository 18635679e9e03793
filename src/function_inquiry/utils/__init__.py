"""
Utilities submodule for the inquiry framework.

@dependencies
- utils.py: Function descriptor derivation (inspect + typing)
- xa_logger.py: Structured logging of LLM calls

@notes
- create_function_definition: Builds positional JSON schemas from Python signatures.
- LLMLogger: Non-intrusive logging wrapper; does not modify LLM call behavior.
"""

from .utils import create_function_definition, json_schema_type
from .xa_logger import LLMLogger, enable_llm_logging

# Define public API for import *
__all__ = [
    "create_function_definition",
    "json_schema_type",
    "LLMLogger",
    "enable_llm_logging",
]
