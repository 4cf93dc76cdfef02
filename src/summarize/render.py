# src/summarize/render.py
"""Turns collected documents into plain, Markdown or Claude XML text."""
from pathlib import PurePosixPath
from typing import Iterable, Iterator, List

from summarize.config import EXT_TO_LANG
from summarize.models import Document, OutputFormat


def add_line_numbers(content: str) -> str:
    lines = content.splitlines()
    padding = len(str(len(lines)))
    return "\n".join(f"{i:>{padding}}  {line}" for i, line in enumerate(lines, start=1))


def _body(doc: Document, line_numbers: bool) -> str:
    text = doc.text
    return add_line_numbers(text) if line_numbers else text


def render_default(doc: Document, line_numbers: bool = False) -> List[str]:
    return [doc.display_path, "---", _body(doc, line_numbers), "", "---"]


def render_markdown(doc: Document, line_numbers: bool = False) -> List[str]:
    lang = EXT_TO_LANG.get(PurePosixPath(doc.display_path).suffix[1:], "")

    # The fence must be longer than any backtick run in the content
    backticks = "```"
    while backticks in doc.text:
        backticks += "`"

    return [doc.display_path, f"{backticks}{lang}", _body(doc, line_numbers), backticks]


def render_cxml(doc: Document, index: int, line_numbers: bool = False) -> List[str]:
    return [
        f'<document index="{index}">',
        f"<source>{doc.display_path}</source>",
        "<document_content>",
        _body(doc, line_numbers),
        "</document_content>",
        "</document>",
    ]


def render_documents(
    docs: Iterable[Document],
    output_format: OutputFormat = OutputFormat.DEFAULT,
    line_numbers: bool = False,
) -> Iterator[str]:
    """Yields output lines (without trailing newlines)."""
    if output_format is OutputFormat.CXML:
        yield "<documents>"
        for index, doc in enumerate(docs, start=1):
            yield from render_cxml(doc, index, line_numbers)
        yield "</documents>"
    elif output_format is OutputFormat.MARKDOWN:
        for doc in docs:
            yield from render_markdown(doc, line_numbers)
    else:
        for doc in docs:
            yield from render_default(doc, line_numbers)
