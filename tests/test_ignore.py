# tests/test_ignore.py
import sys
import pytest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from summarize.core.ignore import GitignoreIndex, is_path_ignored, parse_gitignore
from summarize.errors import WarningKind


@pytest.fixture
def notices():
    return []


@pytest.fixture
def index(notices):
    return GitignoreIndex(sink=notices.append)


# --- Test 1: Parsing ---

def test_parse_skips_comments_and_blanks():
    rules = parse_gitignore(["# comment", "", "   ", "*.log", "!keep.log"])
    assert len(rules) == 2
    assert [negated for _, negated in rules] == [False, True]


def test_is_path_ignored_last_match_wins():
    rules = parse_gitignore(["logs/", "*.tmp", "!logs/important.txt"])

    assert is_path_ignored("logs/debug.log", rules) is True
    assert is_path_ignored("temp.tmp", rules) is True
    assert is_path_ignored("src/main.py", rules) is None
    assert is_path_ignored("logs/important.txt", rules) is False


def test_is_path_ignored_directory_patterns():
    rules = parse_gitignore(["venv/"])
    assert is_path_ignored("venv", rules, is_directory=True) is True
    assert is_path_ignored("venv", rules, is_directory=False) is None
    assert is_path_ignored("venv/lib/python3.9", rules) is True


# --- Test 2: Scoped lookups ---

def test_rules_apply_relative_to_their_directory(tmp_path, index):
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / ".gitignore").write_text("/local.txt\n", encoding="utf-8")

    index.load(tmp_path, is_root=True)
    index.load(tmp_path / "sub")

    assert index.is_ignored(tmp_path / "sub" / "local.txt") is True
    assert index.is_ignored(tmp_path / "local.txt") is False
    assert index.is_ignored(tmp_path / "sub" / "deeper" / "local.txt") is False


def test_child_negation_reincludes_parent_exclusion(tmp_path, index):
    (tmp_path / ".gitignore").write_text("*.log\n", encoding="utf-8")
    (tmp_path / "child").mkdir()
    (tmp_path / "child" / ".gitignore").write_text("!keep.log\n", encoding="utf-8")

    index.load(tmp_path, is_root=True)
    index.load(tmp_path / "child")

    assert index.is_ignored(tmp_path / "child" / "drop.log") is True
    assert index.is_ignored(tmp_path / "child" / "keep.log") is False
    assert index.is_ignored(tmp_path / "keep.log") is True


def test_child_rules_can_exclude_again(tmp_path, index):
    (tmp_path / ".gitignore").write_text("*.log\n!*.keep.log\n", encoding="utf-8")
    (tmp_path / "child").mkdir()
    (tmp_path / "child" / ".gitignore").write_text("*.log\n", encoding="utf-8")

    index.load(tmp_path, is_root=True)
    index.load(tmp_path / "child")

    assert index.is_ignored(tmp_path / "a.keep.log") is False
    assert index.is_ignored(tmp_path / "child" / "a.keep.log") is True


def test_info_exclude_loaded_at_root(tmp_path, index):
    info = tmp_path / ".git" / "info"
    info.mkdir(parents=True)
    (info / "exclude").write_text("secret.txt\n", encoding="utf-8")

    index.load(tmp_path, is_root=True)
    assert index.is_ignored(tmp_path / "secret.txt") is True


def test_global_excludes_evaluated_first(tmp_path, notices):
    global_file = tmp_path / "global_ignore"
    global_file.write_text("*.bak\n*.swp\n", encoding="utf-8")
    root = tmp_path / "repo"
    root.mkdir()
    (root / ".gitignore").write_text("!keep.bak\n", encoding="utf-8")

    index = GitignoreIndex(sink=notices.append, global_excludes=global_file)
    index.load(root, is_root=True)

    assert index.is_ignored(root / "x.swp") is True
    assert index.is_ignored(root / "keep.bak") is False


def test_each_directory_loaded_once(tmp_path, index):
    gitignore = tmp_path / ".gitignore"
    gitignore.write_text("*.log\n", encoding="utf-8")
    index.load(tmp_path, is_root=True)

    gitignore.write_text("*.txt\n", encoding="utf-8")
    index.load(tmp_path, is_root=True)

    assert tmp_path in index
    assert index.is_ignored(tmp_path / "a.log") is True
    assert index.is_ignored(tmp_path / "a.txt") is False


# --- Test 3: Disabled and failure modes ---

def test_disabled_index_never_reads(tmp_path, notices):
    (tmp_path / ".gitignore").write_text("*\n", encoding="utf-8")
    index = GitignoreIndex(enabled=False, sink=notices.append)

    index.load(tmp_path, is_root=True)

    assert tmp_path not in index
    assert index.is_ignored(tmp_path / "anything.py") is False


def test_malformed_gitignore_is_soft_failure(tmp_path, index, notices):
    (tmp_path / ".gitignore").write_bytes(b"*.log\n\xff\xfe broken\n")

    index.load(tmp_path, is_root=True)

    assert index.rules_for(tmp_path) == []
    assert index.is_ignored(tmp_path / "a.log") is False
    assert len(notices) == 1
    assert notices[0].kind is WarningKind.GITIGNORE_UNREADABLE


def test_invalid_pattern_is_soft_failure(tmp_path, index, notices):
    (tmp_path / ".gitignore").write_text("*.log\n!\n", encoding="utf-8")

    index.load(tmp_path, is_root=True)

    assert index.rules_for(tmp_path) == []
    assert notices and notices[0].kind is WarningKind.GITIGNORE_UNREADABLE


# --- Test 4: Repository scope ---

def test_enter_root_loads_ancestors_up_to_repo_top(tmp_path, index):
    (tmp_path / ".gitignore").write_text("*.py\n", encoding="utf-8")
    repo = tmp_path / "repo"
    (repo / ".git").mkdir(parents=True)
    (repo / ".gitignore").write_text("*.log\n", encoding="utf-8")
    (repo / "a" / "b").mkdir(parents=True)

    top = index.enter_root(repo / "a" / "b")

    assert top == repo
    assert repo in index
    assert repo / "a" in index
    # the root itself is left for the walker
    assert repo / "a" / "b" not in index
    assert tmp_path not in index
    assert index.is_ignored(repo / "a" / "b" / "x.log", top=top) is True


def test_enter_root_outside_repo_is_its_own_top(tmp_path, index):
    project = tmp_path / "project"
    project.mkdir()

    assert index.enter_root(project) == project
    assert tmp_path not in index


def test_rules_above_top_are_not_applied(tmp_path, index):
    (tmp_path / ".gitignore").write_text("*.py\n", encoding="utf-8")
    (tmp_path / "sub").mkdir()
    index.load(tmp_path, is_root=True)
    index.load(tmp_path / "sub", is_root=True)

    assert index.is_ignored(tmp_path / "sub" / "m.py") is True
    assert index.is_ignored(tmp_path / "sub" / "m.py", top=tmp_path / "sub") is False


def test_excludes_apply_only_at_their_top(tmp_path, notices):
    global_file = tmp_path / "global_ignore"
    global_file.write_text("/only-at-top.txt\n", encoding="utf-8")
    root = tmp_path / "root"
    (root / "sub").mkdir(parents=True)

    index = GitignoreIndex(sink=notices.append, global_excludes=global_file)
    index.load(root / "sub", is_root=True)
    index.load(root, is_root=True)

    assert index.is_ignored(root / "only-at-top.txt", top=root) is True
    assert index.is_ignored(root / "sub" / "only-at-top.txt", top=root) is False
    assert index.is_ignored(root / "sub" / "only-at-top.txt", top=root / "sub") is True


def test_disabled_index_enter_root_is_noop(tmp_path, notices):
    (tmp_path / ".git").mkdir()
    index = GitignoreIndex(enabled=False, sink=notices.append)

    assert index.enter_root(tmp_path / "x") == tmp_path / "x"
    assert tmp_path not in index
