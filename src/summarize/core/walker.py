# src/summarize/core/walker.py
import os
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional, Set, Union

from summarize.config import FilterConfig
from summarize.core.ignore import GitignoreIndex
from summarize.core.rules import EntryInfo, PathFilterRule
from summarize.errors import WarningKind
from summarize.logging_config import log_notice
from summarize.models import FileEntry, Notice, printable_path


class Walker:
    def __init__(
        self,
        config: FilterConfig,
        gitignore: Optional[GitignoreIndex] = None,
        sink: Optional[Callable[[Notice], None]] = None,
    ):
        self.config = config
        self.sink = sink or log_notice
        self.rule = PathFilterRule(config)
        if gitignore is None:
            gitignore = GitignoreIndex.from_config(config, sink=self.sink)
        self.gitignore = gitignore

    def walk(self, roots: Iterable[Union[str, Path]]) -> Iterator[FileEntry]:
        """
        Yields accepted files depth-first, root by root, in the order the
        roots were given. Children are visited in sorted name order.
        """
        for root in roots:
            yield from self._walk_root(Path(root))

    def _walk_root(self, root: Path) -> Iterator[FileEntry]:
        if root.is_file():
            # A file named explicitly skips the directory rules and .gitignore
            info = EntryInfo(name=root.name, rel_path=explicit_rel_path(root), is_dir=False, explicit=True)
            if self.rule.includes(info):
                yield self._make_entry(root, root.name, root.as_posix())
            return

        if not root.is_dir():
            self._warn(root, WarningKind.MISSING_PATH, "no such file or directory")
            return

        # .gitignore lookups use absolute paths; entries keep the root as given
        base = Path(os.path.abspath(root))
        top = self.gitignore.enter_root(base)
        yield from self._walk_dir(root, base, top, "", {os.path.realpath(root)})

    def _walk_dir(self, root: Path, base: Path, top: Path, rel_dir: str, active: Set[str]) -> Iterator[FileEntry]:
        """
        `active` holds the resolved paths of the directories currently being
        visited, used to break symlink cycles.
        """
        directory = root / rel_dir if rel_dir else root
        try:
            with os.scandir(directory) as it:
                children = sorted(it, key=lambda e: e.name)
        except OSError as e:
            self._warn(directory, WarningKind.DIRECTORY_UNREADABLE, str(e))
            return

        absolute = base / rel_dir if rel_dir else base
        self.gitignore.load(absolute, is_root=absolute == top)

        for child in children:
            rel_path = f"{rel_dir}/{child.name}" if rel_dir else child.name
            try:
                is_dir = child.is_dir()
            except OSError:
                is_dir = False

            # --- 1. Rules and .gitignore, pruning before any descent ---
            if not self.rule.includes(EntryInfo(child.name, rel_path, is_dir)):
                continue
            if self.gitignore.is_ignored(absolute / child.name, is_directory=is_dir, top=top):
                continue

            # --- 2. Descend or yield ---
            path = directory / child.name
            if is_dir:
                target = os.path.realpath(path)
                if target in active:
                    self._warn(path, WarningKind.SYMLINK_CYCLE, f"links back to {printable_path(target)}")
                    continue
                active.add(target)
                try:
                    yield from self._walk_dir(root, base, top, rel_path, active)
                finally:
                    active.discard(target)
            elif child.is_file():
                yield self._make_entry(path, rel_path, (root / rel_path).as_posix())

    def _make_entry(self, path: Path, rel_path: str, display_path: str) -> FileEntry:
        try:
            size = path.stat().st_size
        except OSError:
            # unreadable files are reported when their content is read
            size = 0
        return FileEntry(path=path, rel_path=rel_path, display_path=printable_path(display_path), size=size)

    def _warn(self, path: Path, kind: WarningKind, message: str) -> None:
        self.sink(Notice(path=printable_path(path), kind=kind, message=message))


def explicit_rel_path(root: Path) -> str:
    """
    Path an explicitly named file is matched against: relative to the
    working directory when it lives below it, as given otherwise.
    """
    try:
        return Path(os.path.abspath(root)).relative_to(Path.cwd()).as_posix()
    except ValueError:
        return root.as_posix()


def walk_paths(
    roots: Iterable[Union[str, Path]],
    config: FilterConfig,
    sink: Optional[Callable[[Notice], None]] = None,
) -> Iterator[FileEntry]:
    return Walker(config, sink=sink).walk(roots)
