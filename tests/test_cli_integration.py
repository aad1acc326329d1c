from __future__ import annotations

import json
import os
import subprocess
from pathlib import Path

import pytest

from gitfame.cli import EXIT_CONFIG_ERROR, EXIT_GIT_ERROR, main
from gitfame.config import FameOptions
from gitfame.git import GitCommandError, list_files
from gitfame.run import attribute_file, compute_stats


def _run(cmd: list[str], *, cwd: Path, env: dict[str, str] | None = None) -> str:
    proc = subprocess.run(cmd, cwd=str(cwd), env=env, check=True, capture_output=True, text=True)
    return proc.stdout


def _commit(repo: Path, files: dict[str, str], *, author: str, committer: str = "Committer", message: str = "change") -> None:
    for name, content in files.items():
        p = repo / name
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(content, encoding="utf-8")
        _run(["git", "add", name], cwd=repo)
    env = os.environ.copy()
    env["GIT_AUTHOR_NAME"] = author
    env["GIT_AUTHOR_EMAIL"] = f"{author.lower()}@example.com"
    env["GIT_COMMITTER_NAME"] = committer
    env["GIT_COMMITTER_EMAIL"] = f"{committer.lower()}@example.com"
    env["GIT_AUTHOR_DATE"] = "2025-01-01T00:00:00Z"
    env["GIT_COMMITTER_DATE"] = "2025-01-01T00:00:00Z"
    _run(["git", "commit", "-q", "--no-gpg-sign", "-m", message], cwd=repo, env=env)


def _init_repo(repo: Path) -> None:
    repo.mkdir(parents=True, exist_ok=True)
    _run(["git", "init", "-q"], cwd=repo)
    _run(["git", "config", "user.name", "Test User"], cwd=repo)
    _run(["git", "config", "user.email", "test@example.com"], cwd=repo)


@pytest.fixture()
def alice_bob_repo(tmp_path: Path) -> Path:
    repo = tmp_path / "repo"
    _init_repo(repo)
    _commit(repo, {"a.txt": "one\ntwo\nthree\n"}, author="Alice")
    _commit(repo, {"b.txt": ""}, author="Bob")
    return repo


@pytest.fixture()
def team_repo(tmp_path: Path) -> Path:
    repo = tmp_path / "team"
    _init_repo(repo)
    _commit(repo, {"main.go": "package main\n\nfunc main() {}\n", "README.md": "# team\n"}, author="Alice")
    _commit(repo, {"main.go": "package main\n\nfunc main() {}\n\nfunc helper() {}\n", "pkg/util.go": "package pkg\n"}, author="Bob")
    _commit(repo, {"tool.py": "print('hi')\nprint('bye')\n", "README.md": "# team\n\nnotes\n"}, author="Carol", committer="Dave")
    return repo


def test_alice_bob_scenario(alice_bob_repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["--repository", str(alice_bob_repo), "--format", "json"])
    captured = capsys.readouterr()
    assert code == 0, captured.err
    assert json.loads(captured.out) == [
        {"name": "Alice", "lines": 3, "commits": 1, "files": 1},
        {"name": "Bob", "lines": 0, "commits": 1, "files": 1},
    ]


def test_tabular_default(alice_bob_repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--repository", str(alice_bob_repo)]) == 0
    assert capsys.readouterr().out == (
        "Name  Lines Commits Files\n"
        "Alice 3     1       1\n"
        "Bob   0     1       1\n"
    )


def test_strategies_per_file(alice_bob_repo: Path) -> None:
    assert list_files(alice_bob_repo, "HEAD") == ["a.txt", "b.txt"]
    a = attribute_file(alice_bob_repo, "HEAD", "a.txt", use_committer=False)
    b = attribute_file(alice_bob_repo, "HEAD", "b.txt", use_committer=False)
    assert a.strategy == "blame"
    assert [e.lines for e in a.events] == [3]
    assert b.strategy == "log"
    assert [author for _, author in b.claims] == ["Bob"]


def test_team_stats(team_repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--repository", str(team_repo), "--format", "json-lines", "--order-by", "commits"]) == 0
    rows = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
    assert rows == [
        {"name": "Alice", "lines": 4, "commits": 1, "files": 2},
        {"name": "Carol", "lines": 4, "commits": 1, "files": 2},
        {"name": "Bob", "lines": 3, "commits": 1, "files": 2},
    ]


def test_use_committer(team_repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--repository", str(team_repo), "--format", "csv", "--use-committer", "--restrict-to", "*.py"]) == 0
    assert capsys.readouterr().out == "Name,Lines,Commits,Files\nDave,2,1,1\n"


def test_filters_end_to_end(team_repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--repository", str(team_repo), "--format", "csv", "--languages", "go"]) == 0
    assert capsys.readouterr().out == "Name,Lines,Commits,Files\nBob,3,1,2\nAlice,3,1,1\n"

    assert main(["--repository", str(team_repo), "--format", "csv", "--languages", "klingon"]) == 0
    unknown = capsys.readouterr().out
    assert main(["--repository", str(team_repo), "--format", "csv"]) == 0
    assert unknown == capsys.readouterr().out

    assert main(["--repository", str(team_repo), "--format", "csv", "--exclude", "pkg/*,*.md,*.py"]) == 0
    assert capsys.readouterr().out == "Name,Lines,Commits,Files\nAlice,3,1,1\nBob,2,1,1\n"


def test_parallel_matches_sequential(team_repo: Path) -> None:
    sequential = compute_stats(FameOptions(repository=team_repo, jobs=1))
    for _ in range(3):
        assert compute_stats(FameOptions(repository=team_repo, jobs=4)) == sequential


def test_unknown_order_fails_before_git(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["--repository", str(tmp_path / "does-not-exist"), "--order-by", "age"])
    captured = capsys.readouterr()
    assert code == EXIT_CONFIG_ERROR
    assert captured.out == ""
    assert "age" in captured.err


def test_unknown_format(alice_bob_repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--repository", str(alice_bob_repo), "--format", "yaml"]) == EXIT_CONFIG_ERROR
    assert capsys.readouterr().out == ""


def test_bad_revision_is_git_error(alice_bob_repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--repository", str(alice_bob_repo), "--revision", "no-such-rev"]) == EXIT_GIT_ERROR
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "ls-tree" in captured.err


def test_not_a_repository(tmp_path: Path) -> None:
    with pytest.raises(GitCommandError):
        list_files(tmp_path, "HEAD")


def test_carriage_returns_stay_inside_one_line(tmp_path: Path) -> None:
    repo = tmp_path / "cr"
    _init_repo(repo)
    _run(["git", "config", "core.autocrlf", "false"], cwd=repo)
    (repo / "mixed.txt").write_bytes(b"\tone\r\ttwo\r\tthree\n")
    _run(["git", "add", "mixed.txt"], cwd=repo)
    _commit(repo, {}, author="Alice")
    stats = compute_stats(FameOptions(repository=repo, jobs=1))
    assert [(st.name, st.lines, st.commits, st.files) for st in stats] == [("Alice", 1, 1, 1)]
