from __future__ import annotations

import subprocess
from pathlib import Path


class GitCommandError(RuntimeError):
    def __init__(self, args: list[str], code: int, stderr: str) -> None:
        detail = stderr.strip()[:500]
        msg = f"`git {' '.join(args)}` exited {code}"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


def run_git(args: list[str], cwd: Path, timeout_s: int = 300) -> tuple[int, str, str]:
    try:
        proc = subprocess.run(
            ["git", *args],
            cwd=str(cwd),
            capture_output=True,
            timeout=timeout_s,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        raise GitCommandError(args, -1, f"failed to run git: {e}") from e
    # Decoded without newline translation: a CR inside blamed content stays in its line.
    return proc.returncode, proc.stdout.decode("utf-8", "replace"), proc.stderr.decode("utf-8", "replace")


def _checked(args: list[str], cwd: Path, timeout_s: int = 300) -> str:
    code, out, err = run_git(args, cwd=cwd, timeout_s=timeout_s)
    if code != 0:
        raise GitCommandError(args, code, err)
    return out


def list_files(repo: Path, revision: str) -> list[str]:
    out = _checked(["ls-tree", "-r", "-z", "--name-only", revision], cwd=repo)
    return [p for p in out.split("\0") if p]


def blame_porcelain(repo: Path, revision: str, path: str) -> str:
    return _checked(["blame", "--porcelain", revision, "--", path], cwd=repo)


def last_commit_log(repo: Path, revision: str, path: str) -> str:
    return _checked(["log", "-n", "1", "--format=commit %H%nAuthor: %an <%ae>", revision, "--", path], cwd=repo)
