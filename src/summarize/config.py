# src/summarize/config.py
import os
from dataclasses import dataclass
from typing import FrozenSet, Iterable, Tuple

from summarize.errors import ConfigError
from summarize.models import ModelFamily, TokenizerModel

VCS_DIRS = frozenset({".git", ".svn", ".hg"})

GITIGNORE_FILENAME = ".gitignore"

# tiktoken encoding used to approximate each family's tokenizer
FAMILY_ENCODINGS = {
    ModelFamily.OPENAI: "cl100k_base",
    ModelFamily.GEMINI: "cl100k_base",
    ModelFamily.ANTHROPIC: "p50k_base",
}

# (input, output) USD per 1K tokens
MODEL_RATES = {
    TokenizerModel.GEMINI_15_PRO: (0.0, 0.0),
    TokenizerModel.GEMINI_15_FLASH: (0.0, 0.0),
    TokenizerModel.GEMINI_20_FLASH: (0.0, 0.0),
    TokenizerModel.GEMINI_20_FLASH_LITE: (0.0, 0.0),
    TokenizerModel.GEMINI_20_PRO: (0.0, 0.0),
    TokenizerModel.GEMINI_20_PRO_EXP: (0.0, 0.0),
    TokenizerModel.GEMINI_20_PRO_EXP_0205: (0.0, 0.0),
    TokenizerModel.GEMINI_20_FLASH_THINKING_EXP: (0.0, 0.0),
    TokenizerModel.GPT_35_TURBO: (0.0010, 0.0020),
    TokenizerModel.GPT_4: (0.03, 0.06),
    TokenizerModel.GPT_4_TURBO: (0.01, 0.03),
    TokenizerModel.CLAUDE_3_SONNET: (0.003, 0.015),
    TokenizerModel.CLAUDE_3_OPUS: (0.015, 0.075),
}

# A typical response is assumed to be about 20% of the prompt
OUTPUT_TOKEN_RATIO = 0.2

DEFAULT_MODEL = TokenizerModel.GEMINI_15_FLASH

EXT_TO_LANG = {
    "py": "python",
    "c": "c",
    "cpp": "cpp",
    "h": "c",
    "hpp": "cpp",
    "java": "java",
    "js": "javascript",
    "ts": "typescript",
    "html": "html",
    "css": "css",
    "xml": "xml",
    "json": "json",
    "yaml": "yaml",
    "yml": "yaml",
    "sh": "bash",
    "rb": "ruby",
    "rs": "rust",
    "go": "go",
    "md": "markdown",
    "toml": "toml",
}


def normalize_extensions(raw: Iterable[str]) -> FrozenSet[str]:
    """Accepts 'py', '.py' or 'py,txt' spellings."""
    exts = set()
    for item in raw:
        for part in item.split(","):
            part = part.strip()
            if part.startswith("."):
                part = part[1:]
            if not part:
                raise ConfigError(f"Invalid extension: {item!r}")
            exts.add(part)
    return frozenset(exts)


@dataclass(frozen=True)
class FilterConfig:
    """Inclusion/exclusion options, shared read-only by walker and workers."""
    extensions: FrozenSet[str] = frozenset()
    ignore_patterns: Tuple[str, ...] = ()
    include_hidden: bool = False
    ignore_gitignore: bool = False
    include_vcs: bool = False
    ignore_files_only: bool = False

    def validate(self) -> "FilterConfig":
        for ext in self.extensions:
            if not ext or ext.startswith(".") or "/" in ext:
                raise ConfigError(f"Invalid extension: {ext!r}")
        for pattern in self.ignore_patterns:
            if not pattern.strip():
                raise ConfigError("Ignore patterns must not be blank")
        return self


@dataclass(frozen=True)
class CountConfig:
    model: TokenizerModel = DEFAULT_MODEL
    threads: int = 0
    show_cost: bool = False
    verbose: bool = False

    def validate(self) -> "CountConfig":
        if self.threads < 0:
            raise ConfigError(f"Thread count must be >= 0, got {self.threads}")
        if self.model not in MODEL_RATES:
            raise ConfigError(f"No rate configured for model {self.model.value}")
        return self


def resolve_worker_count(threads: int) -> int:
    """0 means all available cores; never less than one."""
    if threads < 0:
        raise ConfigError(f"Thread count must be >= 0, got {threads}")
    if threads == 0:
        return os.cpu_count() or 1
    return threads
