"""Core domain models for the termsession system.

These models represent the data flowing through a terminal session:
log entries rendered to the host, command descriptors used for help and
autocomplete, cursor geometry, and the interaction mode the session is
currently in.
"""

from __future__ import annotations

import enum
from typing import Annotated, Any, Callable, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class EntryKind(str, enum.Enum):
    """How a log entry's payload should be rendered."""

    PLAIN = "plain"
    MARKUP = "markup"
    CODE = "code"
    TABLE = "table"
    STRUCTURED_DATA = "structured-data"
    COMMAND_ECHO = "command-echo"
    SEPARATOR = "separator"


class EntryClass(str, enum.Enum):
    """Semantic class of a log entry, used by hosts for colouring."""

    SUCCESS = "success"
    ERROR = "error"
    SYSTEM = "system"
    INFO = "info"
    WARNING = "warning"
    NONE = "none"


class SessionState(str, enum.Enum):
    """Interaction mode of a session."""

    INPUT = "input"  # Accepting commands
    EXECUTING = "executing"  # Waiting on the host to succeed/fail
    FLASH = "flash"  # Streaming display-only output
    PROMPT = "prompt"  # Blocking question awaiting an answer


# ---------------------------------------------------------------------------
# Log Entry Models
# ---------------------------------------------------------------------------


class TableContent(BaseModel):
    """Payload of a ``table`` log entry."""

    model_config = ConfigDict(frozen=True)

    head: list[str] = Field(default_factory=list, description="Column titles")
    rows: list[list[str]] = Field(default_factory=list, description="Row cells, one list per row")


class LogEntry(BaseModel):
    """A single immutable entry in a session's log.

    The wire shape uses ``type`` and ``class`` as field names, which are
    exposed here as ``kind`` and ``category``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: EntryKind = Field(default=EntryKind.PLAIN, alias="type")
    category: EntryClass = Field(default=EntryClass.NONE, alias="class")
    content: Any = Field(default="", description="Kind-dependent payload")
    tag: str | None = Field(default=None, description="Optional short label")

    @field_validator("category", mode="before")
    @classmethod
    def _blank_category(cls, value: Any) -> Any:
        if value is None or value == "":
            return EntryClass.NONE
        return value

    @model_validator(mode="before")
    @classmethod
    def _table_payload(cls, data: Any) -> Any:
        if isinstance(data, dict):
            kind = data.get("type", data.get("kind"))
            content = data.get("content")
            if kind == EntryKind.TABLE and isinstance(content, dict):
                data = {**data, "content": TableContent.model_validate(content)}
        return data

    @model_validator(mode="after")
    def _table_requires_columns(self) -> LogEntry:
        if self.kind is EntryKind.TABLE and not isinstance(self.content, TableContent):
            raise ValueError("table content must have head and rows")
        return self

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the ``{type, class?, content, tag?}`` wire dict."""
        data = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        if self.category is EntryClass.NONE:
            data.pop("class", None)
        return data


# ---------------------------------------------------------------------------
# Command Models
# ---------------------------------------------------------------------------


class CommandExample(BaseModel):
    model_config = ConfigDict(frozen=True)

    command: str
    description: str = ""


class CommandDescriptor(BaseModel):
    """Help and autocomplete metadata for one command key."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(description="Token the user types to invoke the command")
    title: str = ""
    group: str = ""
    usage: str = ""
    description: str = ""
    examples: list[CommandExample] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Layout Models
# ---------------------------------------------------------------------------


class CursorBox(BaseModel):
    """Pixel position and width of the input cursor.

    ``at_end`` marks the reset position after the last character, where
    the host draws the cursor in its default place.
    """

    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=0)
    left: float = 0.0
    top: float = 0.0
    width: float = Field(gt=0)
    at_end: bool = False


class CharWidth(BaseModel):
    model_config = ConfigDict(frozen=True)

    narrow: float
    wide: float


class LayoutMetrics(BaseModel):
    """Window and content dimensions reported to the host."""

    model_config = ConfigDict(frozen=True)

    screen_width: float
    screen_height: float
    client_width: float
    client_height: float
    char_width: CharWidth


# ---------------------------------------------------------------------------
# Interaction Modes (discriminated union)
# ---------------------------------------------------------------------------


class InputMode(BaseModel):
    model_config = ConfigDict(frozen=True)

    mode: Literal["input"] = "input"


class ExecutingMode(BaseModel):
    model_config = ConfigDict(frozen=True)

    mode: Literal["executing"] = "executing"
    command_key: str
    command_line: str


class FlashMode(BaseModel):
    model_config = ConfigDict(frozen=True)

    mode: Literal["flash"] = "flash"
    content: str | None = Field(default=None, description="Most recent chunk from the stream")


class PromptMode(BaseModel):
    model_config = ConfigDict(frozen=True)

    mode: Literal["prompt"] = "prompt"
    question: str | None = None
    secret: bool = False
    auto_echo: bool = False
    callback: Callable[[str], Any] | None = Field(default=None, exclude=True)


InteractionMode = Annotated[
    Union[InputMode, ExecutingMode, FlashMode, PromptMode],
    Field(discriminator="mode"),
]


def state_of(mode: InputMode | ExecutingMode | FlashMode | PromptMode) -> SessionState:
    """Map an interaction mode value to its SessionState tag."""
    return SessionState(mode.mode)
