"""Git operations for agentcmt."""

from __future__ import annotations

import re
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Protocol

from .config import Config, get_active_config
from .exceptions import GitError
from .style import (
    STYLE_HISTORY_DEPTH,
    ProjectStyle,
    analyze_project_style,
    load_project_guidelines,
)

RECENT_COMMITS_COUNT = 5
SCOPE_HISTORY_DEPTH = 200
_SCOPE_RE = re.compile(r"^\w+\(([^)]+)\)")


@dataclass
class StagedChangesContext:
    diff: str
    files: list[str] = field(default_factory=list)
    branch: str = ""
    recent_commits: list[str] = field(default_factory=list)


class ChangeSource(Protocol):
    """What the pipeline needs from version control."""

    def is_repository(self) -> bool: ...

    def get_staged_changes_context(self) -> StagedChangesContext: ...

    def get_existing_scopes(self) -> list[str]: ...

    def get_project_guidelines(self) -> Optional[str]: ...

    def get_project_style(self) -> ProjectStyle: ...


def find_git_repo_root(start_path: Optional[Path] = None) -> Optional[Path]:
    """Return the top-level Git repository directory for ``start_path``.

    Attempts ``git rev-parse --show-toplevel`` first so worktrees and
    submodules are handled correctly. Falls back to walking parent
    directories looking for a ``.git`` directory or file.
    """

    path = Path(start_path or Path.cwd()).expanduser().resolve(strict=False)
    if path.is_file():
        path = path.parent

    try:
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            cwd=path,
            capture_output=True,
            text=True,
            check=True,
        )
        top = result.stdout.strip()
        if top:
            return Path(top)
    except (subprocess.CalledProcessError, FileNotFoundError):
        pass

    for candidate in (path, *path.parents):
        if (candidate / ".git").exists():
            return candidate

    return None


class GitRepo:
    """Handles Git repository operations."""

    def __init__(
        self,
        repo_path: Optional[str] = None,
        config: Optional[Config] = None,
    ) -> None:
        self._config = config or get_active_config()
        self.repo_path = Path(repo_path or self._config.git_repo_path)

    def is_repository(self) -> bool:
        """Check if ``repo_path`` is inside a Git work tree."""
        try:
            self._run_git_command(["rev-parse", "--git-dir"])
            return True
        except GitError:
            return False

    def _run_git_command(self, args: list[str]) -> str:
        """Run a Git command and return its output."""
        try:
            result = subprocess.run(
                ["git"] + args,
                cwd=self.repo_path,
                capture_output=True,
                text=True,
                check=True,
            )
            return result.stdout.strip()
        except subprocess.CalledProcessError as e:
            cmd = " ".join(args)
            raise GitError(f"Git command failed: {cmd}\n{e.stderr}") from e
        except FileNotFoundError as exc:
            raise GitError("Git command not found. Please install Git.") from exc
        except NotADirectoryError as exc:
            raise GitError(f"Not a directory: {self.repo_path}") from exc

    def get_staged_diff(self) -> str:
        """Get the diff of staged changes."""
        return self._run_git_command(["diff", "--cached", "--no-color"])

    def get_staged_files(self) -> list[str]:
        output = self._run_git_command(["diff", "--cached", "--name-only"])
        return [line for line in output.split("\n") if line.strip()]

    def get_current_branch(self) -> str:
        try:
            return self._run_git_command(["rev-parse", "--abbrev-ref", "HEAD"])
        except GitError:
            # Unborn branch: no commits yet, HEAD is symbolic only.
            return self._run_git_command(["symbolic-ref", "--short", "HEAD"])

    def get_recent_commits(self, count: int = RECENT_COMMITS_COUNT) -> list[str]:
        """Get recent commit subjects, newest first."""
        try:
            output = self._run_git_command(["log", f"-{count}", "--pretty=%s"])
        except GitError:
            return []
        return output.split("\n") if output else []

    def get_staged_changes_context(self) -> StagedChangesContext:
        return StagedChangesContext(
            diff=self.get_staged_diff(),
            files=self.get_staged_files(),
            branch=self.get_current_branch(),
            recent_commits=self.get_recent_commits(),
        )

    def get_existing_scopes(self) -> list[str]:
        """Scopes used by ``type(scope):`` subjects in recent history."""
        scopes: list[str] = []
        for subject in self.get_recent_commits(SCOPE_HISTORY_DEPTH):
            match = _SCOPE_RE.match(subject)
            if match and match.group(1) not in scopes:
                scopes.append(match.group(1))
        return scopes

    def commit(self, message: str) -> None:
        """Create a commit with the given message."""
        self._run_git_command(["commit", "-m", message])

    def get_commit_messages(self, count: int = STYLE_HISTORY_DEPTH) -> list[str]:
        """Full commit messages (subject and body), newest first."""
        try:
            output = self._run_git_command(["log", f"-{count}", "--pretty=%B%x00"])
        except GitError:
            return []
        return [m.strip() for m in output.split("\x00") if m.strip()]

    def get_project_guidelines(self) -> Optional[str]:
        """Commit guidelines checked into the repository, if any."""
        return load_project_guidelines(self.repo_path)

    def get_project_style(self) -> ProjectStyle:
        return analyze_project_style(self.get_commit_messages())
