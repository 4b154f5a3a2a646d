from __future__ import annotations

import os
import subprocess
import threading
from pathlib import Path
from typing import Iterator, Optional, Protocol

from .errors import RepositoryOpenError, TraversalError
from .models import CommitRecord

# %x1f (unit separator) cannot appear in an email or a hash.
_LOG_FORMAT = "%H%x1f%ae%x1f%at"


def run_git(args: list[str], cwd: Path, timeout_s: int = 300, env: dict[str, str] | None = None) -> tuple[int, str, str]:
    proc = subprocess.run(
        ["git", *args],
        cwd=str(cwd),
        capture_output=True,
        text=True,
        timeout=timeout_s,
        env=env,
    )
    return proc.returncode, proc.stdout, proc.stderr


class Repository(Protocol):
    """What the aggregator needs from a repository."""

    path: str

    def resolve(self, ref: str) -> Optional[str]:
        """Commit id `ref` points at, or None if the ref does not exist."""
        ...

    def remote_heads(self) -> list[tuple[str, str]]:
        """(remote HEAD symref, branch ref it points at) for every remote that has one."""
        ...

    def iter_commits(self, head: str) -> Iterator[CommitRecord]:
        ...


class GitRepository:
    """A repository on disk, read through the `git` executable."""

    def __init__(self, path: Path) -> None:
        self.path = str(path)
        self._root = path
        env = os.environ.copy()
        # Only `path` itself may be a repository, never one of its parents.
        env["GIT_CEILING_DIRECTORIES"] = str(path.resolve().parent)
        self._env = env

    @classmethod
    def open(cls, path: Path) -> GitRepository:
        if not path.is_dir():
            raise RepositoryOpenError(str(path), "not a directory")
        repo = cls(path)
        try:
            code, _, err = repo._git(["rev-parse", "--git-dir"])
        except (OSError, subprocess.SubprocessError) as e:
            raise RepositoryOpenError(str(path), f"failed to run git: {e}") from e
        if code != 0:
            raise RepositoryOpenError(str(path), err.strip() or "not a git repository")
        return repo

    def _git(self, args: list[str]) -> tuple[int, str, str]:
        return run_git(args, cwd=self._root, env=self._env)

    def resolve(self, ref: str) -> Optional[str]:
        code, out, _ = self._git(["rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"])
        if code != 0:
            return None
        sha = out.strip()
        return sha or None

    def remote_heads(self) -> list[tuple[str, str]]:
        code, out, _ = self._git(["for-each-ref", "--format=%(refname)%09%(symref)", "refs/remotes"])
        if code != 0:
            return []
        heads: list[tuple[str, str]] = []
        for line in out.splitlines():
            try:
                refname, symref = line.split("\t", 1)
            except ValueError:
                continue
            if refname.endswith("/HEAD") and symref.strip():
                heads.append((refname, symref.strip()))
        return heads

    def iter_commits(self, head: str) -> Iterator[CommitRecord]:
        cmd = ["git", "log", f"--format={_LOG_FORMAT}", head, "--"]
        try:
            proc = subprocess.Popen(
                cmd,
                cwd=str(self._root),
                env=self._env,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            raise TraversalError(self.path, f"failed to start git log: {e}") from e

        stderr_chunks: list[str] = []
        stderr_chars = 0
        max_stderr_chars = 50_000

        def drain_stderr() -> None:
            nonlocal stderr_chars
            if proc.stderr is None:
                return
            while True:
                chunk = proc.stderr.read(8192)
                if not chunk:
                    return
                if stderr_chars >= max_stderr_chars:
                    continue
                take = chunk[: max_stderr_chars - stderr_chars]
                stderr_chunks.append(take)
                stderr_chars += len(take)

        stderr_thread = threading.Thread(target=drain_stderr, daemon=True)
        stderr_thread.start()

        finished = False
        try:
            assert proc.stdout is not None
            for raw_line in proc.stdout:
                line = raw_line.rstrip("\n")
                if not line:
                    continue
                parts = line.split("\x1f")
                if len(parts) != 3:
                    raise TraversalError(self.path, f"unexpected git log line: {line[:200]!r}")
                sha, email, when = parts
                try:
                    ts = int(when)
                except ValueError as e:
                    raise TraversalError(self.path, f"bad author time for {sha}: {when!r}") from e
                yield CommitRecord(sha=sha, author_email=email, author_timestamp=ts)
            finished = True
        finally:
            if not finished and proc.poll() is None:
                proc.kill()
            code = proc.wait()
            stderr_thread.join(timeout=5)
            if proc.stdout is not None:
                proc.stdout.close()
            if proc.stderr is not None:
                proc.stderr.close()

        if code != 0:
            stderr = "".join(stderr_chunks).strip()
            raise TraversalError(self.path, f"git log exited {code}: {stderr[:500]}")
