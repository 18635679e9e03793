"""
Function-calling inquiry package.

Lets an LLM call statically registered Python functions to gather facts before it
answers a question.

@dependencies
- openai: For API client (pip install openai)
- pydantic: For data models and validation (pip install pydantic)
- python-dotenv: For loading settings from a .env file

@notes
- Inquiry.answer_async runs the loop; Inquiry.answer wraps it with asyncio.run().
- Error handling: every failure is an InquiryError subclass, see errors.py.
- Security: API keys are loaded from environment variables only.
"""

# Core public API
from .core import Inquiry, LLMConfig, call_llm_with_functions, get_llm_config, parse_function_arguments
from .dispatcher import Dispatcher
from .registry import FunctionRegistry

# Data models
from .models import (
    Conversation,
    FunctionDefinition,
    FunctionDescriptor,
    FunctionListing,
    FunctionParameters,
    LoopState,
    Message,
    ParameterProperty,
    ParameterSpec,
    PendingCall,
)

# Errors
from .errors import (
    ArgumentCoercionError,
    ArgumentParseError,
    ArityMismatch,
    ConfigurationError,
    ConversationOrderError,
    DeadlineExceeded,
    DispatchError,
    FunctionExecutionError,
    InquiryError,
    NoChoicesReturned,
    RegistrationError,
    TurnLimitExceeded,
    UnknownFunction,
    UnknownPrimitiveType,
    UnsupportedInputKind,
    UpstreamError,
)

# Utilities
from .utils.utils import create_function_definition

# Configure __all__ for import *
__all__ = [
    "Inquiry",
    "LLMConfig",
    "call_llm_with_functions",
    "get_llm_config",
    "parse_function_arguments",
    "Dispatcher",
    "FunctionRegistry",
    "Conversation",
    "FunctionDefinition",
    "FunctionDescriptor",
    "FunctionListing",
    "FunctionParameters",
    "LoopState",
    "Message",
    "ParameterProperty",
    "ParameterSpec",
    "PendingCall",
    "ArgumentCoercionError",
    "ArgumentParseError",
    "ArityMismatch",
    "ConfigurationError",
    "ConversationOrderError",
    "DeadlineExceeded",
    "DispatchError",
    "FunctionExecutionError",
    "InquiryError",
    "NoChoicesReturned",
    "RegistrationError",
    "TurnLimitExceeded",
    "UnknownFunction",
    "UnknownPrimitiveType",
    "UnsupportedInputKind",
    "UpstreamError",
    "create_function_definition",
]

__version__ = "1.0.0"
__author__ = "gianpd"
__license__ = "MIT"
