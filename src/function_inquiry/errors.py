"""
/**
 * @file errors.py
 * @purpose Error kinds raised while registering functions and answering a question.
 *
 * @notes
 * - Every error is terminal for the current answer; nothing is retried.
 * - Kinds that have a natural builtin counterpart also subclass it, so callers can
 *   catch either `InquiryError` subclasses or the familiar builtin.
 */
"""


class InquiryError(Exception):
    """Base class for all errors raised by the inquiry framework."""


class ConfigurationError(InquiryError):
    """Raised when required configuration (e.g. the API key) is missing or invalid."""


class RegistrationError(InquiryError):
    """Raised when a function cannot be registered."""


class UnsupportedInputKind(RegistrationError, TypeError):
    """Raised when the value given for registration is not a usable function."""


class UnknownPrimitiveType(RegistrationError, TypeError):
    """Raised when a parameter annotation has no JSON schema type."""

    def __init__(self, function_name: str, parameter: str, annotation):
        self.function_name = function_name
        self.parameter = parameter
        self.annotation = annotation
        super().__init__(
            f"Parameter '{parameter}' of '{function_name}' has unsupported type {annotation!r}"
        )


class ConversationOrderError(InquiryError):
    """Raised when a function result is appended without a matching function call."""


class DeadlineExceeded(InquiryError, TimeoutError):
    """Raised when the caller's deadline passed before the next model request."""


class TurnLimitExceeded(InquiryError):
    """Raised when the model did not produce an answer within `max_turns` requests."""


class UpstreamError(InquiryError):
    """Raised when the request to the LLM fails."""


class NoChoicesReturned(InquiryError):
    """Raised when the LLM returns an empty list of choices."""


class ArgumentParseError(InquiryError, ValueError):
    """Raised when the arguments of a function call cannot be decoded."""


class DispatchError(InquiryError):
    """Base class for errors raised while invoking a registered function."""

    def __init__(self, function_name: str, message: str):
        self.function_name = function_name
        super().__init__(message)


class UnknownFunction(DispatchError, LookupError):
    def __init__(self, function_name: str):
        super().__init__(function_name, f"Function '{function_name}' is not registered")


class ArityMismatch(DispatchError, TypeError):
    def __init__(self, function_name: str, expected: int, received: int):
        self.expected = expected
        self.received = received
        super().__init__(
            function_name,
            f"Function '{function_name}' takes {expected} argument(s), {received} given",
        )


class ArgumentCoercionError(DispatchError, ValueError):
    def __init__(self, function_name: str, index: int, expected_type: str, value: str, reason: str = ""):
        self.index = index
        self.expected_type = expected_type
        self.value = value
        message = f"Argument {index} of '{function_name}' is not a valid {expected_type}: {value!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(function_name, message)


class FunctionExecutionError(DispatchError):
    """Raised when the invoked host function itself raises."""
