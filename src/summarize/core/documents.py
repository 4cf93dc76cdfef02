# src/summarize/core/documents.py
from typing import Callable, Iterable, Iterator, Optional

from summarize.core.accountant import read_content
from summarize.errors import FileReadError, WarningKind
from summarize.logging_config import log_notice
from summarize.models import Document, FileEntry, Notice


def collect_documents(
    entries: Iterable[FileEntry],
    sink: Optional[Callable[[Notice], None]] = None,
) -> Iterator[Document]:
    """
    Reads accepted files in discovery order for concatenation.
    Unreadable or non-UTF-8 files are reported and skipped.
    """
    sink = sink or log_notice
    for entry in entries:
        try:
            content = read_content(entry)
        except FileReadError as e:
            sink(Notice(path=entry.display_path, kind=WarningKind.FILE_READ, message=str(e)))
            continue

        try:
            text = content.decode("utf-8")
        except UnicodeDecodeError as e:
            sink(Notice(path=entry.display_path, kind=WarningKind.DECODE, message=f"not valid UTF-8: {e.reason}"))
            continue

        yield Document(display_path=entry.display_path, content=content, line_count=len(text.splitlines()))
