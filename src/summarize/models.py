# src/summarize/models.py
import enum
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple, Union

from summarize.errors import ErrorKind, WarningKind


class OutputFormat(str, enum.Enum):
    DEFAULT = "default"
    CXML = "cxml"
    MARKDOWN = "markdown"


class ModelFamily(str, enum.Enum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"


class TokenizerModel(str, enum.Enum):
    """Models selectable with --model. Values are the CLI spellings."""
    GEMINI_15_PRO = "gemini15-pro"
    GEMINI_15_FLASH = "gemini15-flash"
    GEMINI_20_FLASH = "gemini20-flash"
    GEMINI_20_FLASH_LITE = "gemini20-flash-lite"
    GEMINI_20_PRO = "gemini20-pro"
    GEMINI_20_PRO_EXP = "gemini20-pro-exp"
    GEMINI_20_PRO_EXP_0205 = "gemini20-pro-exp0205"
    GEMINI_20_FLASH_THINKING_EXP = "gemini20-flash-thinking-exp"
    GPT_35_TURBO = "gpt35-turbo"
    GPT_4 = "gpt4"
    GPT_4_TURBO = "gpt4-turbo"
    CLAUDE_3_SONNET = "claude3-sonnet"
    CLAUDE_3_OPUS = "claude3-opus"

    @property
    def family(self) -> ModelFamily:
        if self.value.startswith("gpt"):
            return ModelFamily.OPENAI
        if self.value.startswith("claude"):
            return ModelFamily.ANTHROPIC
        return ModelFamily.GEMINI

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    def __str__(self) -> str:
        return self.display_name


_DISPLAY_NAMES = {
    TokenizerModel.GEMINI_15_PRO: "Gemini 1.5 Pro",
    TokenizerModel.GEMINI_15_FLASH: "Gemini 1.5 Flash",
    TokenizerModel.GEMINI_20_FLASH: "Gemini 2.0 Flash",
    TokenizerModel.GEMINI_20_FLASH_LITE: "Gemini 2.0 Flash-Lite",
    TokenizerModel.GEMINI_20_PRO: "Gemini 2.0 Pro",
    TokenizerModel.GEMINI_20_PRO_EXP: "Gemini 2.0 Pro Exp",
    TokenizerModel.GEMINI_20_PRO_EXP_0205: "Gemini 2.0 Pro Exp 02-05",
    TokenizerModel.GEMINI_20_FLASH_THINKING_EXP: "Gemini 2.0 Flash Thinking Exp",
    TokenizerModel.GPT_35_TURBO: "GPT-3.5 Turbo",
    TokenizerModel.GPT_4: "GPT-4",
    TokenizerModel.GPT_4_TURBO: "GPT-4 Turbo",
    TokenizerModel.CLAUDE_3_SONNET: "Claude 3 Sonnet",
    TokenizerModel.CLAUDE_3_OPUS: "Claude 3 Opus",
}


@dataclass(frozen=True)
class FileEntry:
    """A file accepted by the walker."""
    path: Path
    rel_path: str
    display_path: str
    size: int


@dataclass(frozen=True)
class TokenCountResult:
    """Outcome of counting one file: a count, or an error."""
    count: int = 0
    error: Optional[ErrorKind] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, error: ErrorKind, message: str) -> "TokenCountResult":
        return cls(error=error, message=message)


@dataclass(frozen=True)
class CostEstimate:
    input_tokens: int
    input_rate: float
    input_cost: float
    output_tokens: int
    output_rate: float
    output_cost: float

    @property
    def total_cost(self) -> float:
        return self.input_cost + self.output_cost


@dataclass(frozen=True)
class AggregateSummary:
    """Totals folded from per-file results in display-path order."""
    total_tokens: int
    files: Tuple[Tuple[str, TokenCountResult], ...] = ()
    counted_files: int = 0
    error_count: int = 0
    cost: Optional[CostEstimate] = None
    duration_ms: int = 0


@dataclass(frozen=True)
class Document:
    """One file's content, ready to hand to a renderer."""
    display_path: str
    content: bytes
    line_count: int

    @property
    def text(self) -> str:
        return self.content.decode("utf-8")


@dataclass(frozen=True)
class Notice:
    """A non-fatal issue reported on the warnings channel."""
    path: str
    kind: WarningKind
    message: str = field(default="")


def printable_path(path: Union[str, Path]) -> str:
    """
    Undecodable bytes in a file name come back from the OS as lone
    surrogates, which no UTF-8 stream can write. They are shown as U+FFFD.
    """
    return os.fsencode(path).decode("utf-8", "replace")
