# src/summarize/errors.py
import enum


class SummarizeError(Exception):
    """Base class for every error raised by summarize."""


class ConfigError(SummarizeError):
    """Invalid or contradictory configuration. Raised before any traversal."""


class FileReadError(SummarizeError):
    """A selected file could not be opened or read."""


class DecodeError(SummarizeError):
    """File content is not valid text for the tokenizer's encoding."""


class FatalIOError(SummarizeError):
    """Non-recoverable I/O failure. Terminates the run."""


class ErrorKind(str, enum.Enum):
    READ = "read"
    DECODE = "decode"


class WarningKind(str, enum.Enum):
    # traversal warnings: the walk skips the subtree or rule file and goes on
    GITIGNORE_UNREADABLE = "gitignore-unreadable"
    SYMLINK_CYCLE = "symlink-cycle"
    DIRECTORY_UNREADABLE = "directory-unreadable"
    MISSING_PATH = "missing-path"
    # per-file errors
    FILE_READ = "file-read"
    DECODE = "decode"
