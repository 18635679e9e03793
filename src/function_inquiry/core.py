"""
/**
 * @file core.py
 * @purpose Answers a question by letting the LLM call registered functions until it replies with text.
 *
 * @dependencies
 * - openai: For the chat completion client (legacy `functions` parameter).
 * - python-dotenv: Loads the API key and settings from a `.env` file.
 * - .registry / .dispatcher: Function lookup and invocation.
 * - .utils.xa_logger: Optional structured logging of every LLM call.
 *
 * @notes
 * - One model request per turn; a function call requested by the model is dispatched and its
 *   result appended before the next request, so every result directly answers its call.
 * - No retries: every error ends the current answer and is raised as an InquiryError subclass.
 * - The deadline is checked before each request; a request in flight gets the remaining time
 *   as its timeout.
 * - Synchronous LLM call functions run in a worker thread (`asyncio.to_thread`).
 */
"""

import asyncio
import inspect
import json
import logging
import os
import time
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import openai
from dotenv import load_dotenv

from .dispatcher import Dispatcher
from .errors import (
    ArgumentParseError,
    ConfigurationError,
    DeadlineExceeded,
    InquiryError,
    NoChoicesReturned,
    TurnLimitExceeded,
    UpstreamError,
)
from .models import Conversation, FunctionDescriptor, LoopState, PendingCall
from .registry import FunctionRegistry
from .utils.xa_logger import enable_llm_logging

load_dotenv()

logger = logging.getLogger(__name__)

PROMPTS_PATH = Path(__file__).parent / "prompts"

with open(PROMPTS_PATH / "system.md", encoding="utf-8") as f:
    DEFAULT_SYSTEM_PROMPT = f.read().strip()


def _env(name: str, default: Optional[str], cast: Callable[[str], Any]) -> Any:
    value = os.getenv(name, default)
    if value in (None, ""):
        return None
    try:
        return cast(value)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a valid {cast.__name__}, got {value!r}") from e


class LLMConfig:
    """Configuration for LLM calls"""
    def __init__(self):
        self.api_key = os.getenv("OPENAI_API_KEY")
        self.base_url = os.getenv("OPENAI_BASE_URL") or None
        self.model = os.getenv("OPENAI_MODEL", "gpt-3.5-turbo")
        self.temperature = _env("OPENAI_TEMPERATURE", "1.0", float)
        self.top_p = _env("OPENAI_TOP_P", "1.0", float)
        self.timeout = _env("OPENAI_TIMEOUT", "180", float)
        self.max_retries = _env("OPENAI_MAX_RETRIES", "0", int)
        self.max_turns = _env("INQUIRY_MAX_TURNS", None, int)

    def require_api_key(self) -> str:
        if not self.api_key:
            raise ConfigurationError("OPENAI_API_KEY environment variable is required")
        return self.api_key


@lru_cache(maxsize=1)
def get_llm_config() -> LLMConfig:
    return LLMConfig()


def _choice_to_dict(choice: Any) -> Dict[str, Any]:
    message = choice.message
    function_call = None
    if getattr(message, "function_call", None):
        function_call = {
            "name": message.function_call.name,
            "arguments": message.function_call.arguments,
        }
    return {
        "index": choice.index,
        "finish_reason": choice.finish_reason,
        "content": message.content,
        "function_call": function_call,
    }


def call_llm_with_functions(messages: List[Dict[str, Any]], functions: List[Dict[str, Any]] = None,
                            temperature: Optional[float] = None, model: Optional[str] = None,
                            top_p: Optional[float] = None, timeout: Optional[float] = None) -> Dict[str, Any]:
    """
    Sends the conversation and the function schemas to the chat completion endpoint.

    Args:
        messages: The conversation so far, in OpenAI message format.
        functions: Optional function schemas the model may call.
        temperature: Optional temperature override.
        model: Optional model override.
        top_p: Optional nucleus sampling override.
        timeout: Optional request timeout in seconds.

    Returns:
        Dict: {"choices": [{"index", "finish_reason", "content", "function_call"}]} where
        "function_call" is {"name", "arguments"} or None.
    """
    config = get_llm_config()
    client = openai.OpenAI(
        api_key=config.require_api_key(),
        base_url=config.base_url,
        max_retries=config.max_retries,
    )

    call_params = {
        "model": model or config.model,
        "messages": messages,
        "temperature": temperature if temperature is not None else config.temperature,
        "top_p": top_p if top_p is not None else config.top_p,
        "timeout": timeout if timeout is not None else config.timeout,
    }
    if functions:
        call_params["functions"] = functions

    response = client.chat.completions.create(**call_params)
    return {"choices": [_choice_to_dict(choice) for choice in response.choices]}


def _argument_text(key: str, value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (bool, int, float)):
        return json.dumps(value)
    raise ArgumentParseError(f"Argument {key!r} must be a string or scalar, got {type(value).__name__}")


def parse_function_arguments(raw_arguments: Optional[str]) -> List[str]:
    """
    Decodes the model's argument payload, a JSON object keyed "0", "1", ..., into an ordered list.

    Values must be strings; JSON numbers and booleans are taken as their JSON text.

    Raises:
        ArgumentParseError: If the payload is not such an object, holds other values,
            or its keys are not 0..n-1.
    """
    if raw_arguments is None or not raw_arguments.strip():
        return []

    try:
        payload = json.loads(raw_arguments)
    except json.JSONDecodeError as e:
        raise ArgumentParseError(f"Function arguments are not valid JSON: {raw_arguments!r}") from e
    if not isinstance(payload, dict):
        raise ArgumentParseError(f"Function arguments must be a JSON object: {raw_arguments!r}")

    indexed: Dict[int, str] = {}
    for key, value in payload.items():
        try:
            index = int(key)
        except ValueError as e:
            raise ArgumentParseError(f"Argument key {key!r} is not a positional index") from e
        if index < 0 or index in indexed:
            raise ArgumentParseError(f"Argument key {key!r} is negative or repeated")
        indexed[index] = _argument_text(key, value)

    if sorted(indexed) != list(range(len(indexed))):
        raise ArgumentParseError(f"Argument keys must run from 0 to {len(indexed) - 1}: {sorted(indexed)}")
    return [indexed[index] for index in range(len(indexed))]


def _is_async_callable(func: Callable) -> bool:
    return inspect.iscoroutinefunction(func) or inspect.iscoroutinefunction(getattr(func, "__call__", None))


def _resolve_deadline(timeout: Optional[float], deadline: Optional[float]) -> Optional[float]:
    candidates = [d for d in (deadline, None if timeout is None else time.monotonic() + timeout) if d is not None]
    return min(candidates) if candidates else None


class Inquiry:
    """
    Answers questions with an LLM that may call the registered functions to gather facts.
    """

    def __init__(
        self,
        registry: Optional[FunctionRegistry] = None,
        llm_call_func: Optional[Callable[..., Any]] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        top_p: Optional[float] = None,
        system_prompt: Optional[str] = None,
        max_turns: Optional[int] = None,
        max_function_response_length: Optional[int] = 4096,
        enable_logging: bool = False,
        log_dir: str = "llm_logs"
    ):
        """
        Initializes the Inquiry instance.

        Args:
            registry: The functions the model may call. A new, empty registry when omitted.
            llm_call_func: Callable with the signature of `call_llm_with_functions`; may be async.
            model: The model to use for chat completions.
            temperature: The sampling temperature.
            top_p: The nucleus sampling parameter.
            system_prompt: The system prompt that opens every conversation.
            max_turns: The maximum number of model requests per question. None for no limit.
            max_function_response_length: The maximum character length of a function result in the
                conversation before it's truncated. Set to None for no limit.
            enable_logging: If True, every LLM call is recorded by LLMLogger.
            log_dir: The directory to store LLM logs.
        """
        config = get_llm_config()
        self.registry = registry if registry is not None else FunctionRegistry()
        self.dispatcher = Dispatcher(self.registry)
        self.model = model or config.model
        self.temperature = temperature if temperature is not None else config.temperature
        self.top_p = top_p if top_p is not None else config.top_p
        self.system_prompt = system_prompt or DEFAULT_SYSTEM_PROMPT
        self.max_turns = max_turns if max_turns is not None else config.max_turns
        self.max_function_response_length = max_function_response_length

        llm_call_func = llm_call_func or call_llm_with_functions
        self.logger = None
        if enable_logging:
            self._llm_call_func, self.logger = enable_llm_logging(call_llm_function=llm_call_func, log_dir=log_dir)
        else:
            self._llm_call_func = llm_call_func

    def register_function(self, func: Callable, description: Optional[str] = None) -> FunctionDescriptor:
        """Registers a function the model may call."""
        return self.registry.register(func, description)

    def answer(self, question: str, timeout: Optional[float] = None, deadline: Optional[float] = None,
               conversation: Optional[Conversation] = None) -> str:
        """Synchronous wrapper around `answer_async`."""
        return asyncio.run(self.answer_async(question, timeout=timeout, deadline=deadline, conversation=conversation))

    async def answer_async(self, question: str, timeout: Optional[float] = None, deadline: Optional[float] = None,
                           conversation: Optional[Conversation] = None) -> str:
        """
        Runs the request / dispatch loop until the model answers with text.

        Args:
            question: The user's question.
            timeout: Seconds from now after which no new model request is made.
            deadline: Absolute `time.monotonic()` value with the same meaning. The earlier one wins.
            conversation: Optional Conversation to record the transcript in. It is reset first.

        Returns:
            The model's final answer.

        Raises:
            InquiryError: A subclass naming the kind of failure.
        """
        if conversation is None:
            conversation = Conversation()
        conversation.reset(self.system_prompt, question)
        deadline = _resolve_deadline(timeout, deadline)

        state = LoopState.AWAITING_MODEL
        turn = 0
        try:
            while True:
                self._check_deadline(deadline)
                if self.max_turns is not None and turn >= self.max_turns:
                    raise TurnLimitExceeded(f"No answer after {self.max_turns} model request(s)")
                turn += 1

                choice = await self._submit(conversation, deadline, turn)
                call = self._pending_call(choice)

                if call is None:
                    content = choice.get("content") or ""
                    if not content:
                        logger.info("Turn %d: empty answer without a function call, asking again", turn)
                        continue
                    conversation.add_assistant(content)
                    self._transition(state, LoopState.DONE)
                    return content

                state = self._transition(state, LoopState.DISPATCHING_CALL)
                logger.info("Turn %d: model requested %s", turn, call)
                conversation.expect_function_result(call.name)
                result = await self.dispatcher.invoke(call.name, call.arguments)
                conversation.add_function_result(call.name, self._condense_function_response(result))
                state = self._transition(state, LoopState.AWAITING_MODEL)
        except InquiryError as e:
            self._transition(state, LoopState.FAILED)
            logger.warning("Answer failed: %s: %s", type(e).__name__, e)
            raise

    async def _submit(self, conversation: Conversation, deadline: Optional[float], turn: int) -> Dict[str, Any]:
        logger.info("Turn %d: making request to LLM (%d messages)", turn, len(conversation))
        call_params = {
            "messages": conversation.to_openai(),
            "functions": self.registry.definitions() or None,
            "temperature": self.temperature,
            "model": self.model,
            "top_p": self.top_p,
        }
        if deadline is not None:
            call_params["timeout"] = max(deadline - time.monotonic(), 0.0)

        try:
            if _is_async_callable(self._llm_call_func):
                response = self._llm_call_func(**call_params)
            else:
                response = await asyncio.to_thread(self._llm_call_func, **call_params)
            if inspect.isawaitable(response):
                response = await response
        except InquiryError:
            raise
        except Exception as e:
            raise UpstreamError(f"LLM request failed: {e}") from e

        choices = (response or {}).get("choices") or []
        if not choices:
            raise NoChoicesReturned("The LLM returned no choices")
        return choices[0]

    @staticmethod
    def _pending_call(choice: Dict[str, Any]) -> Optional[PendingCall]:
        if choice.get("finish_reason") != "function_call":
            return None
        function_call = choice.get("function_call")
        if not function_call or not function_call.get("name"):
            raise ArgumentParseError("The LLM signalled a function call without naming a function")
        return PendingCall(
            name=function_call["name"],
            arguments=parse_function_arguments(function_call.get("arguments")),
        )

    @staticmethod
    def _check_deadline(deadline: Optional[float]):
        if deadline is not None and time.monotonic() >= deadline:
            raise DeadlineExceeded("context deadline exceeded")

    @staticmethod
    def _transition(current: LoopState, new: LoopState) -> LoopState:
        logger.debug("%s -> %s", current.value, new.value)
        return new

    def _condense_function_response(self, content: str) -> str:
        """
        Truncates the function result if it exceeds the configured maximum length.
        """
        if self.max_function_response_length is None or len(content) <= self.max_function_response_length:
            return content

        truncated_content = content[:self.max_function_response_length]
        return (
            f"{truncated_content}\n"
            f"[... (Content truncated. Original length: {len(content)} characters)]"
        )
