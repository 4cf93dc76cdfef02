# src/summarize/core/rules.py
"""
Per-entry include/exclude decision.

Each filtering concern is its own predicate; `PathFilterRule.evaluate`
combines them in a fixed order and the first exclusion wins:

1. version-control directory (unless include_vcs)
2. hidden entry (unless include_hidden)
3. --ignore glob on name or relative path (files only with ignore_files_only)
4. extension allow-list (files only)

Nothing here touches the filesystem.
"""
import enum
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Iterable

import pathspec

from summarize.config import VCS_DIRS, FilterConfig
from summarize.errors import ConfigError


class Decision(enum.Enum):
    INCLUDE = "include"
    EXCLUDE = "exclude"


@dataclass(frozen=True)
class EntryInfo:
    """What the rules need to know about an entry."""
    name: str
    rel_path: str
    is_dir: bool
    # Paths named on the command line skip the directory-level rules
    explicit: bool = False

    @property
    def is_hidden(self) -> bool:
        return self.name.startswith(".")

    @property
    def is_vcs_dir(self) -> bool:
        return self.is_dir and self.name in VCS_DIRS

    @property
    def extension(self) -> str:
        return PurePosixPath(self.name).suffix[1:]


def compile_patterns(patterns: Iterable[str]) -> pathspec.PathSpec:
    try:
        return pathspec.PathSpec.from_lines("gitwildmatch", list(patterns))
    except Exception as e:
        raise ConfigError(f"Invalid ignore pattern: {e}") from e


class PathFilterRule:
    def __init__(self, config: FilterConfig):
        self.config = config
        # Patterns with an inner slash are matched against the relative path,
        # the rest against the entry name only
        path_patterns = [p for p in config.ignore_patterns if "/" in p.rstrip("/")]
        name_patterns = [p for p in config.ignore_patterns if p not in path_patterns]
        self._name_spec = compile_patterns(name_patterns)
        self._path_spec = compile_patterns(path_patterns)

    def excludes_vcs(self, entry: EntryInfo) -> bool:
        return entry.is_vcs_dir and not entry.explicit and not self.config.include_vcs

    def excludes_hidden(self, entry: EntryInfo) -> bool:
        return entry.is_hidden and not entry.explicit and not self.config.include_hidden

    def excludes_pattern(self, entry: EntryInfo) -> bool:
        if not self.config.ignore_patterns:
            return False
        if entry.is_dir and self.config.ignore_files_only:
            return False
        names = [entry.name]
        paths = [entry.rel_path]
        if entry.is_dir:
            names.append(entry.name + "/")
            paths.append(entry.rel_path + "/")
        return (
            any(self._name_spec.match_file(n) for n in names)
            or any(self._path_spec.match_file(p) for p in paths)
        )

    def excludes_extension(self, entry: EntryInfo) -> bool:
        if entry.is_dir or not self.config.extensions:
            return False
        return entry.extension not in self.config.extensions

    def evaluate(self, entry: EntryInfo) -> Decision:
        checks = (
            self.excludes_vcs,
            self.excludes_hidden,
            self.excludes_pattern,
            self.excludes_extension,
        )
        for check in checks:
            if check(entry):
                return Decision.EXCLUDE
        return Decision.INCLUDE

    def includes(self, entry: EntryInfo) -> bool:
        return self.evaluate(entry) is Decision.INCLUDE
