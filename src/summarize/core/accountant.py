# src/summarize/core/accountant.py
"""
Parallel token accounting.

Files are counted on a fixed thread pool. Every worker writes only its own
result slot; nothing is aggregated until all workers have been joined, and
the fold runs in display-path order so totals and per-file output never
depend on scheduling.
"""
import errno
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, List, Optional, Tuple

from summarize.config import MODEL_RATES, OUTPUT_TOKEN_RATIO, CountConfig, resolve_worker_count
from summarize.core.tokenizer import Tokenizer, get_tokenizer
from summarize.errors import DecodeError, ErrorKind, FatalIOError, FileReadError, WarningKind
from summarize.logging_config import log_notice
from summarize.models import AggregateSummary, CostEstimate, FileEntry, Notice, TokenCountResult

logger = logging.getLogger(__name__)

# errno values that mean the device itself is gone, not just this file
FATAL_ERRNOS = frozenset({errno.EIO, errno.ENXIO, errno.ENODEV})


def read_content(entry: FileEntry) -> bytes:
    try:
        with open(entry.path, "rb") as f:
            return f.read()
    except OSError as e:
        if e.errno in FATAL_ERRNOS:
            raise FatalIOError(f"{entry.display_path}: {e}") from e
        raise FileReadError(e.strerror or str(e)) from e


def estimate_cost(total_tokens: int, rates: Tuple[float, float]) -> CostEstimate:
    """Rates are USD per 1K tokens; output is estimated from the input size."""
    input_rate, output_rate = rates
    output_tokens = round(total_tokens * OUTPUT_TOKEN_RATIO)
    return CostEstimate(
        input_tokens=total_tokens,
        input_rate=input_rate,
        input_cost=total_tokens / 1000 * input_rate,
        output_tokens=output_tokens,
        output_rate=output_rate,
        output_cost=output_tokens / 1000 * output_rate,
    )


class ParallelAccountant:
    def __init__(
        self,
        tokenizer: Tokenizer,
        workers: int = 0,
        sink: Optional[Callable[[Notice], None]] = None,
        rates: Optional[Tuple[float, float]] = None,
    ):
        self.tokenizer = tokenizer
        self.workers = resolve_worker_count(workers)
        self.sink = sink or log_notice
        self.rates = rates

    @classmethod
    def from_config(cls, config: CountConfig, sink: Optional[Callable[[Notice], None]] = None):
        config.validate()
        rates = MODEL_RATES[config.model] if config.show_cost else None
        return cls(get_tokenizer(config.model), workers=config.threads, sink=sink, rates=rates)

    def count_one(self, entry: FileEntry) -> TokenCountResult:
        """Reads and counts a single file. Only fatal I/O escapes."""
        try:
            return TokenCountResult(count=self.tokenizer.count(read_content(entry)))
        except FileReadError as e:
            return TokenCountResult.failed(ErrorKind.READ, str(e))
        except DecodeError as e:
            return TokenCountResult.failed(ErrorKind.DECODE, str(e))

    def _count_into(self, slots: List[Optional[TokenCountResult]], index: int, entry: FileEntry) -> None:
        slots[index] = self.count_one(entry)

    def run(self, entries: Iterable[FileEntry]) -> AggregateSummary:
        entries = list(entries)
        slots: List[Optional[TokenCountResult]] = [None] * len(entries)
        started = time.perf_counter()

        logger.debug("Counting %d files on %d workers", len(entries), self.workers)
        with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="summarize") as executor:
            futures = [
                executor.submit(self._count_into, slots, i, entry)
                for i, entry in enumerate(entries)
            ]
            try:
                for future in futures:
                    future.result()
            except FatalIOError:
                executor.shutdown(wait=True, cancel_futures=True)
                raise

        duration_ms = int((time.perf_counter() - started) * 1000)
        return self.fold(entries, slots, duration_ms)

    def fold(
        self,
        entries: List[FileEntry],
        results: List[TokenCountResult],
        duration_ms: int = 0,
    ) -> AggregateSummary:
        ordered = sorted(zip(entries, results), key=lambda pair: pair[0].display_path)

        total = 0
        counted = 0
        errors = 0
        for entry, result in ordered:
            if result.ok:
                total += result.count
                counted += 1
                continue
            errors += 1
            kind = WarningKind.DECODE if result.error is ErrorKind.DECODE else WarningKind.FILE_READ
            self.sink(Notice(path=entry.display_path, kind=kind, message=result.message))

        return AggregateSummary(
            total_tokens=total,
            files=tuple((entry.display_path, result) for entry, result in ordered),
            counted_files=counted,
            error_count=errors,
            cost=estimate_cost(total, self.rates) if self.rates is not None else None,
            duration_ms=duration_ms,
        )


def count_files(
    entries: Iterable[FileEntry],
    config: CountConfig,
    sink: Optional[Callable[[Notice], None]] = None,
) -> AggregateSummary:
    return ParallelAccountant.from_config(config, sink=sink).run(entries)
