# src/summarize/cli.py
import sys
import argparse
from pathlib import Path
from typing import List

from summarize.config import DEFAULT_MODEL, CountConfig, FilterConfig, normalize_extensions
from summarize.core.accountant import ParallelAccountant
from summarize.core.documents import collect_documents
from summarize.core.ignore import GitignoreIndex, find_global_excludes
from summarize.core.walker import Walker
from summarize.errors import ConfigError, FatalIOError
from summarize.logging_config import setup_logger
from summarize.models import AggregateSummary, OutputFormat, TokenizerModel, printable_path
from summarize.render import render_documents


def create_arg_parser():
    parser = argparse.ArgumentParser(
        prog="summarize",
        description="Concatenate a directory full of files into a single prompt for use with LLMs, or count its tokens.",
    )
    parser.add_argument("paths", nargs="*", help="Paths to files or directories to process")

    # Selection
    parser.add_argument("-e", "--extension", dest="extensions", action="append", default=[],
                        help="Only include files with this extension (repeatable, comma-separated allowed)")
    parser.add_argument("--include-hidden", action="store_true",
                        help="Include files and folders starting with .")
    parser.add_argument("--ignore-files-only", action="store_true",
                        help="--ignore patterns only apply to files")
    parser.add_argument("--ignore-gitignore", action="store_true",
                        help="Ignore .gitignore files and include all files")
    parser.add_argument("--include-vcs", action="store_true",
                        help="Include version control directories (.git, .svn, .hg)")
    parser.add_argument("--ignore", dest="ignore_patterns", action="append", default=[],
                        help="Glob pattern to ignore (repeatable)")

    # Concatenation output
    parser.add_argument("-o", "--output", type=str, default=None, help="Write output to a file instead of stdout")
    parser.add_argument("-f", "--format", dest="output_format", choices=[f.value for f in OutputFormat],
                        default=None, help="Output format (default: default)")
    parser.add_argument("-c", "--cxml", action="store_true", help="Output in Claude XML format")
    parser.add_argument("-m", "--markdown", action="store_true", help="Output Markdown with fenced code blocks")
    parser.add_argument("-n", "--line-numbers", action="store_true", help="Add line numbers to the output")
    parser.add_argument("-0", "--null", action="store_true", help="Use NUL as separator when reading paths from stdin")

    # Token counting
    parser.add_argument("-t", "--count-tokens", action="store_true", help="Count tokens instead of outputting content")
    parser.add_argument("--model", choices=[m.value for m in TokenizerModel], default=None,
                        help=f"Tokenization model (default: {DEFAULT_MODEL.value})")
    parser.add_argument("--verbose", action="store_true", help="Show per-file token counts")
    parser.add_argument("--show-cost", action="store_true", help="Show estimated API costs")
    parser.add_argument("--threads", type=int, default=0,
                        help="Number of threads for token counting (0 = all available cores)")
    return parser


def validate_args(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    if args.output_format and (args.cxml or args.markdown):
        parser.error("--format cannot be combined with --cxml or --markdown")
    if args.cxml and args.markdown:
        parser.error("--cxml and --markdown are mutually exclusive")
    if not args.count_tokens:
        for flag, value in (("--model", args.model), ("--verbose", args.verbose), ("--show-cost", args.show_cost)):
            if value:
                parser.error(f"{flag} requires --count-tokens")


def read_paths_from_stdin(use_null_separator: bool) -> List[str]:
    """Reads extra paths piped on stdin. Nothing is read from a terminal."""
    if sys.stdin is None or sys.stdin.isatty():
        return []
    data = sys.stdin.read()
    parts = data.split("\0") if use_null_separator else data.split()
    return [p for p in parts if p]


def resolve_output_format(args: argparse.Namespace) -> OutputFormat:
    if args.cxml:
        return OutputFormat.CXML
    if args.markdown:
        return OutputFormat.MARKDOWN
    return OutputFormat(args.output_format or OutputFormat.DEFAULT.value)


def print_token_report(summary: AggregateSummary, config: CountConfig) -> None:
    if config.verbose:
        width = max([len("File"), len("TOTAL")] + [len(path) for path, _ in summary.files])
        print(f"{'File':<{width}} | {'Tokens'}")
        print("-" * (width + 15))
        for path, result in summary.files:
            shown = f"{result.count:,}" if result.ok else f"error ({result.error.value}): {result.message}"
            print(f"{path:<{width}} | {shown}")
        print("-" * (width + 15))
        print(f"{'TOTAL':<{width}} | {summary.total_tokens:,}")
    else:
        print(f"Total tokens: {summary.total_tokens:,}")

    print(f"Files processed: {summary.counted_files}")
    if summary.error_count:
        print(f"Files with errors: {summary.error_count}")

    if summary.duration_ms > 0:
        seconds = summary.duration_ms / 1000
        rate = round(summary.total_tokens / seconds)
        if seconds < 60:
            print(f"Time taken: {seconds:.2f} seconds ({rate:,} tokens/sec)")
        else:
            minutes, remaining = divmod(seconds, 60)
            print(f"Time taken: {minutes:.0f} min {remaining:.2f} sec ({rate:,} tokens/sec)")

    if summary.cost is not None:
        cost = summary.cost
        print(f"\nEstimated cost ({config.model.display_name}):")
        print(f"  Input: ${cost.input_cost:.4f} ({cost.input_tokens:,} tokens @ ${cost.input_rate:.4f}/1K tokens)")
        print(f"  Output: ${cost.output_cost:.4f} (est. {cost.output_tokens:,} tokens @ ${cost.output_rate:.4f}/1K tokens)*")
        print(f"  Total: ${cost.total_cost:.4f}")
        print("\n* Output tokens are estimated at 20% of input tokens")


def main():
    try:
        # 1. Setup
        setup_logger()
        parser = create_arg_parser()
        args = parser.parse_args()
        validate_args(parser, args)

        paths = list(args.paths) + read_paths_from_stdin(args.null)
        if not paths:
            paths = ["."]

        filter_config = FilterConfig(
            extensions=normalize_extensions(args.extensions),
            ignore_patterns=tuple(args.ignore_patterns),
            include_hidden=args.include_hidden,
            ignore_gitignore=args.ignore_gitignore,
            include_vcs=args.include_vcs,
            ignore_files_only=args.ignore_files_only,
        ).validate()

        gitignore = GitignoreIndex.from_config(
            filter_config, global_excludes=None if args.ignore_gitignore else find_global_excludes()
        )
        walker = Walker(filter_config, gitignore=gitignore)

        # 2. Token counting mode
        if args.count_tokens:
            count_config = CountConfig(
                model=TokenizerModel(args.model) if args.model else DEFAULT_MODEL,
                threads=args.threads,
                show_cost=args.show_cost,
                verbose=args.verbose,
            )
            accountant = ParallelAccountant.from_config(count_config)
            workers = f"{args.threads} threads" if args.threads else "all available CPU cores"
            print(f"Counting tokens for {count_config.model.display_name} using {workers}", file=sys.stderr)
            summary = accountant.run(walker.walk(paths))
            print_token_report(summary, count_config)
            return

        # 3. Concatenation mode
        entries = walker.walk(paths)
        if args.output:
            # Never feed the output file back into itself
            output_path = Path(args.output).resolve()
            entries = (e for e in entries if e.path.resolve() != output_path)

        lines = render_documents(
            collect_documents(entries),
            resolve_output_format(args),
            line_numbers=args.line_numbers,
        )
        if args.output:
            output_file = Path(args.output)
            try:
                with open(output_file, "w", encoding="utf-8") as f:
                    for line in lines:
                        f.write(line + "\n")
            except OSError as e:
                raise FatalIOError(f"Error writing {output_file}: {e}") from e
            print(f"Concatenated content written to {printable_path(output_file)}", file=sys.stderr)
        else:
            try:
                for line in lines:
                    sys.stdout.write(line + "\n")
            except BrokenPipeError as e:
                raise FatalIOError(f"Error writing to stdout: {e}") from e

    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    except FatalIOError as e:
        print(f"Fatal I/O error: {e}", file=sys.stderr)
        sys.exit(2)

    except KeyboardInterrupt:
        print("\nCancelled.", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
