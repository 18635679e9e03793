from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .errors import ConversationOrderError

PrimitiveType = Literal["string", "integer", "number", "boolean", "object", "array"]


class ParameterProperty(BaseModel):
    """
    Defines a single property within the parameters of a function.
    """
    type: PrimitiveType = Field(..., description="The JSON schema type of the parameter.")
    description: str = Field(..., description="A description of the parameter.")
    items: Optional[Dict[str, Any]] = Field(None, description="Item schema for array parameters.")


class FunctionParameters(BaseModel):
    """
    Defines the parameters of a function as a JSON schema object.
    """
    type: str = "object"
    properties: Dict[str, ParameterProperty]
    required: List[str]


class FunctionDefinition(BaseModel):
    """
    The function entry sent to the LLM in the `functions` list.
    """
    name: str = Field(..., description="The name of the function to be called.")
    description: str = Field(..., description="A description of what the function does.")
    parameters: FunctionParameters


class ParameterSpec(BaseModel):
    """
    One positional parameter of a registered function.
    """
    index: int
    name: str
    type: PrimitiveType
    description: str
    items: Optional[Dict[str, Any]] = None
    annotation: Any = Field(default=None, exclude=True, repr=False)

    @property
    def key(self) -> str:
        return str(self.index)


class FunctionDescriptor(BaseModel):
    """
    Everything the framework knows about a registered function, keyed by its canonical name.
    """
    name: str
    description: str
    parameters: List[ParameterSpec]

    @property
    def arity(self) -> int:
        return len(self.parameters)

    def definition(self) -> FunctionDefinition:
        properties = {
            spec.key: ParameterProperty(type=spec.type, description=spec.description, items=spec.items)
            for spec in self.parameters
        }
        return FunctionDefinition(
            name=self.name,
            description=self.description,
            parameters=FunctionParameters(
                properties=properties,
                required=[spec.key for spec in self.parameters],
            ),
        )

    def to_openai(self) -> Dict[str, Any]:
        return self.definition().model_dump(exclude_none=True)


class FunctionListing(BaseModel):
    """
    Name and description pair shown in the menu of available functions.
    """
    name: str
    description: str


class Message(BaseModel):
    """
    Represents a message in the conversation history.
    """
    model_config = ConfigDict(frozen=True)

    role: Literal["system", "user", "assistant", "function"]
    content: str
    name: Optional[str] = None

    @model_validator(mode="after")
    def _check_name(self) -> "Message":
        if self.role == "function" and not self.name:
            raise ValueError("function messages must carry the function name")
        if self.role != "function" and self.name is not None:
            raise ValueError("only function messages carry a name")
        return self

    def to_openai(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class PendingCall(BaseModel):
    """
    A function call requested by the model, with its arguments ordered by position.
    """
    name: str
    arguments: List[str]

    def __str__(self) -> str:
        return f"{self.name}({', '.join(repr(a) for a in self.arguments)})"


class LoopState(str, Enum):
    AWAITING_MODEL = "awaiting_model"
    DISPATCHING_CALL = "dispatching_call"
    DONE = "done"
    FAILED = "failed"


class Conversation:
    """
    The ordered messages sent to the model for a single question.

    Messages are only ever appended. A function result may only follow the function
    call the model requested in the turn just before it.
    """

    def __init__(self):
        self._messages: List[Message] = []
        self._expected_function: Optional[str] = None

    def reset(self, system_prompt: str, question: str):
        """Discards any previous history and seeds the system and user messages."""
        self._messages = [
            Message(role="system", content=system_prompt),
            Message(role="user", content=question),
        ]
        self._expected_function = None

    @property
    def messages(self) -> Tuple[Message, ...]:
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self):
        return iter(self.messages)

    def add_assistant(self, content: str) -> Message:
        if self._expected_function is not None:
            raise ConversationOrderError(
                f"Expected the result of '{self._expected_function}' before another assistant message"
            )
        return self._append(Message(role="assistant", content=content))

    def expect_function_result(self, name: str):
        """Records that the model asked for `name`; its result must come next."""
        if self._expected_function is not None:
            raise ConversationOrderError(
                f"Result of '{self._expected_function}' was never appended"
            )
        self._expected_function = name

    def add_function_result(self, name: str, content: str) -> Message:
        if self._expected_function is None:
            raise ConversationOrderError(f"No function call is waiting for a result (got '{name}')")
        if self._expected_function != name:
            raise ConversationOrderError(
                f"Expected the result of '{self._expected_function}', got '{name}'"
            )
        self._expected_function = None
        return self._append(Message(role="function", name=name, content=content))

    def to_openai(self) -> List[Dict[str, Any]]:
        return [message.to_openai() for message in self._messages]

    def _append(self, message: Message) -> Message:
        if not self._messages:
            raise ConversationOrderError("Conversation must be reset with a question first")
        self._messages.append(message)
        return message
