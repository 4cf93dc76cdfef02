# src/summarize/core/ignore.py
"""
.gitignore handling.

Rule files are loaded lazily, one per directory the walker enters, and are
never parsed twice. A walk root inside a git repository also picks up the
rule files of its ancestors up to the repository top, where
`.git/info/exclude` and the global excludes file apply. A path is checked
against the loaded rules of every directory from the top of its scope down,
shallowest first, so the nearest .gitignore has the last word. Within that
sequence the last matching pattern wins and `!pattern` re-includes.

Keys are absolute paths.
"""
import os
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from pathspec.patterns import GitWildMatchPattern

from summarize.config import GITIGNORE_FILENAME
from summarize.errors import WarningKind
from summarize.logging_config import log_notice
from summarize.models import Notice, printable_path

# (compiled pattern, negated)
Rule = Tuple[GitWildMatchPattern, bool]

NoticeSink = Callable[[Notice], None]


def parse_gitignore(lines: List[str]) -> List[Rule]:
    """
    Compiles gitignore lines. Blank lines and comments yield no rule.
    Raises ValueError on a malformed pattern.
    """
    rules: List[Rule] = []
    for line in lines:
        pattern = GitWildMatchPattern(line.rstrip("\r\n"))
        if pattern.include is None:
            continue
        rules.append((pattern, not pattern.include))
    return rules


def is_path_ignored(rel_path: str, rules: List[Rule], is_directory: bool = False) -> Optional[bool]:
    """
    Applies rules to a path relative to the rules' directory.

    Returns True (ignored), False (re-included by a negation) or None when
    no rule matched, so callers can layer several rule sets.
    """
    candidates = [rel_path]
    if is_directory:
        candidates.append(rel_path + "/")

    verdict = None
    for pattern, negated in rules:
        if any(pattern.match_file(c) is not None for c in candidates):
            verdict = not negated
    return verdict


class GitignoreIndex:
    def __init__(
        self,
        enabled: bool = True,
        sink: Optional[NoticeSink] = None,
        global_excludes: Optional[Path] = None,
    ):
        self.enabled = enabled
        self.sink = sink or log_notice
        self.global_excludes = global_excludes
        self._rules: Dict[Path, List[Rule]] = {}
        # .git/info/exclude and global excludes, kept per scope top
        self._excludes: Dict[Path, List[Rule]] = {}

    @classmethod
    def from_config(cls, config, sink: Optional[NoticeSink] = None, global_excludes: Optional[Path] = None):
        return cls(enabled=not config.ignore_gitignore, sink=sink, global_excludes=global_excludes)

    def __contains__(self, directory: Path) -> bool:
        return directory in self._rules

    def rules_for(self, directory: Path) -> List[Rule]:
        return self._excludes.get(directory, []) + self._rules.get(directory, [])

    def load(self, directory: Path, is_root: bool = False) -> None:
        """Reads `directory`'s rule file(s) once. No-op when disabled."""
        if not self.enabled:
            return

        if is_root and directory not in self._excludes:
            excludes: List[Rule] = []
            if self.global_excludes is not None:
                excludes.extend(self._read_rules(self.global_excludes))
            excludes.extend(self._read_rules(directory / ".git" / "info" / "exclude"))
            self._excludes[directory] = excludes

        if directory not in self._rules:
            self._rules[directory] = self._read_rules(directory / GITIGNORE_FILENAME)

    def enter_root(self, root: Path) -> Path:
        """
        Loads the rule files above the walk root `root` (absolute) and
        returns the top of its scope: the nearest directory holding `.git`,
        or the root itself outside a repository. The root's own rules are
        left for the walker to load once the root is listed.
        """
        if not self.enabled:
            return root

        top = find_repo_top(root) or root
        ancestors = [d for d in root.parents if len(d.parts) >= len(top.parts)]
        for directory in reversed(ancestors):
            self.load(directory, is_root=directory == top)
        return top

    def _read_rules(self, rule_file: Path) -> List[Rule]:
        try:
            with open(rule_file, "r", encoding="utf-8") as f:
                return parse_gitignore(f.read().splitlines())
        except (FileNotFoundError, NotADirectoryError):
            return []
        except (OSError, UnicodeDecodeError, ValueError) as e:
            self._warn(rule_file, f"ignoring rule file: {e}")
            return []

    def _warn(self, path: Path, message: str) -> None:
        self.sink(Notice(path=printable_path(path), kind=WarningKind.GITIGNORE_UNREADABLE, message=message))

    def is_ignored(self, path: Path, is_directory: bool = False, top: Optional[Path] = None) -> bool:
        """
        Rule files above `top` are not consulted, so a root's result never
        depends on what other roots loaded.
        """
        if not self.enabled or not self._rules:
            return False

        depth = len(top.parts) if top is not None else 0
        ignored = False
        # parents are nearest-first; evaluate the shallowest scope first
        for directory in reversed(path.parents):
            if len(directory.parts) < depth:
                continue
            rules = self._rules.get(directory, [])
            if top is None or directory == top:
                rules = self._excludes.get(directory, []) + rules
            if not rules:
                continue
            rel_path = path.relative_to(directory).as_posix()
            verdict = is_path_ignored(rel_path, rules, is_directory)
            if verdict is not None:
                ignored = verdict
        return ignored


def find_global_excludes() -> Optional[Path]:
    """Git's default global excludes file, if the user has one."""
    config_home = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    candidate = Path(config_home) / "git" / "ignore"
    return candidate if candidate.is_file() else None


def find_repo_top(directory: Path) -> Optional[Path]:
    """Nearest of `directory` and its ancestors that holds a `.git` entry."""
    for candidate in (directory, *directory.parents):
        if os.path.exists(candidate / ".git"):
            return candidate
    return None
