"""Git introspection against local clones kept in the cache directory.

Each repository is cloned once (``--no-checkout``) under
``<cache_dir>/repos/<host>/<owner>/<name>`` and re-fetched when the
clone is older than the git file TTL.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import threading
import time
from datetime import timedelta
from pathlib import Path

from taghash.shared.constants import Cache, GitConfig, ResolverPhase
from taghash.shared.context import OperationContext
from taghash.shared.errors import ErrorCode, ErrorContext, IntrospectionError
from taghash.shared.models import Repository

logger = logging.getLogger(__name__)


class GitDescribeExecutor:
    """Run ``rev-parse``, ``rev-list`` and ``describe`` on cached clones.

    Attributes:
        repos_dir: Root directory of the clones
        file_ttl: Age after which a clone is fetched again
        executable: git executable
    """

    def __init__(
        self,
        cache_dir: Path | str,
        file_ttl: timedelta,
        executable: str = GitConfig.DEFAULT_EXECUTABLE,
        clone_url_template: str = GitConfig.CLONE_URL_TEMPLATE,
    ) -> None:
        self.repos_dir = Path(cache_dir) / Cache.REPOS_DIR_NAME
        self.file_ttl = file_ttl
        self.executable = executable
        self.clone_url_template = clone_url_template
        self._lock = threading.Lock()

    def repo_dir(self, repo: Repository) -> Path:
        return self.repos_dir / repo.host / repo.owner / repo.name

    def clone_url(self, repo: Repository) -> str:
        return self.clone_url_template.format(host=repo.host, owner=repo.owner, name=repo.name)

    def rev_parse(self, repo: Repository, ref: str, context: OperationContext) -> str:
        return self._query(repo, ["rev-parse", ref], context, "rev_parse")

    def rev_list_first(self, repo: Repository, ref: str, context: OperationContext) -> str:
        return self._query(repo, ["rev-list", "-n", "1", ref], context, "rev_list")

    def describe(
        self,
        repo: Repository,
        rev: str,
        context: OperationContext,
        *,
        abbrev0: bool = False,
    ) -> str:
        args = ["describe", "--tags"]
        if abbrev0:
            args.append("--abbrev=0")
        args.append(rev)
        return self._query(repo, args, context, "describe")

    def ensure_clone(self, repo: Repository, context: OperationContext) -> Path:
        """Clone the repository, or fetch it when the clone is stale.

        Returns:
            Clone directory

        Raises:
            IntrospectionError: If clone or fetch fails
        """
        with self._lock:
            repo_dir = self.repo_dir(repo)
            stamp = repo_dir / ".git" / GitConfig.FETCH_STAMP_FILE

            if not (repo_dir / ".git").is_dir():
                if repo_dir.exists():
                    # leftover of an interrupted clone
                    shutil.rmtree(repo_dir)
                repo_dir.parent.mkdir(parents=True, exist_ok=True)
                logger.info("Cloning %s into %s", self.clone_url(repo), repo_dir)
                self._run(
                    ["clone", "--no-checkout", "--quiet", self.clone_url(repo), str(repo_dir)],
                    None,
                    context,
                    repo,
                    "clone",
                )
                stamp.touch()
            elif self._is_stale(stamp):
                logger.info("Fetching tags for %s", repo.repo_id)
                self._run(
                    ["fetch", "--tags", "--force", "--prune", "--quiet", "origin"],
                    repo_dir,
                    context,
                    repo,
                    "fetch",
                )
                stamp.touch()

            return repo_dir

    def _is_stale(self, stamp: Path) -> bool:
        try:
            age = time.time() - stamp.stat().st_mtime
        except FileNotFoundError:
            return True
        return age > self.file_ttl.total_seconds()

    def _query(
        self,
        repo: Repository,
        args: list[str],
        context: OperationContext,
        operation: str,
    ) -> str:
        """Run a single-line git query inside the repository's clone."""
        if args[-1].startswith("-"):
            raise self._error(
                f"refusing option-like revision {args[-1]!r}",
                repo,
                operation,
                ErrorCode.GIT_INVALID_OUTPUT,
            )

        repo_dir = self.ensure_clone(repo, context)
        output = self._run(args, repo_dir, context, repo, operation).strip()
        if not output or "\n" in output:
            raise self._error(
                f"unexpected output from git {args[0]}: {output!r}",
                repo,
                operation,
                ErrorCode.GIT_INVALID_OUTPUT,
            )

        logger.debug("git %s -> %s", " ".join(args), output)
        return output

    def _run(
        self,
        args: list[str],
        cwd: Path | None,
        context: OperationContext,
        repo: Repository,
        operation: str,
    ) -> str:
        """Run git, killing it if the context is cancelled or expires.

        Raises:
            IntrospectionError: If git is missing or exits non-zero
            OperationCancelledError: If the context is cancelled
        """
        context.check(operation, repo.repo_id)
        command = [self.executable, *args]

        try:
            process = subprocess.Popen(
                command,
                cwd=cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                stdin=subprocess.DEVNULL,
                text=True,
                encoding="utf-8",
            )
        except FileNotFoundError as e:
            raise self._error(
                f"git executable not found: {self.executable}",
                repo,
                operation,
                ErrorCode.GIT_NOT_FOUND,
                e,
            ) from e

        while True:
            try:
                stdout, stderr = process.communicate(timeout=GitConfig.POLL_INTERVAL_SECONDS)
                break
            except subprocess.TimeoutExpired:
                if context.is_cancelled() or context.is_expired():
                    process.kill()
                    process.communicate()
                    logger.debug("Killed git %s: context aborted", args[0])
                    context.check(operation, repo.repo_id)

        if process.returncode != 0:
            raise self._error(
                f"git {args[0]} failed (exit {process.returncode}): {stderr.strip()}",
                repo,
                operation,
                ErrorCode.GIT_COMMAND_FAILED,
            )
        return stdout

    def _error(
        self,
        message: str,
        repo: Repository,
        operation: str,
        code: ErrorCode,
        original_error: Exception | None = None,
    ) -> IntrospectionError:
        return IntrospectionError(
            code,
            message,
            ErrorContext(
                operation=operation,
                repository=repo.repo_id,
                phase=ResolverPhase.GIT_FALLBACK,
            ),
            original_error,
        )


def current_repository(
    cwd: Path | str | None = None,
    executable: str = GitConfig.DEFAULT_EXECUTABLE,
) -> Repository:
    """Repository of the ``origin`` remote of the working directory.

    Raises:
        IntrospectionError: If there is no git repository or no origin remote
        InvalidInputError: If the remote URL is not a GitHub repository URL
    """
    try:
        result = subprocess.run(
            [executable, "remote", "get-url", "origin"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError as e:
        raise IntrospectionError(
            ErrorCode.GIT_NOT_FOUND,
            f"git executable not found: {executable}",
            ErrorContext(operation="current_repository"),
            e,
        ) from e

    if result.returncode != 0:
        raise IntrospectionError(
            ErrorCode.GIT_COMMAND_FAILED,
            "could not determine the repository from the origin remote; use --repo",
            ErrorContext(
                operation="current_repository",
                additional_data={"stderr": result.stderr.strip()},
            ),
        )

    return Repository.from_remote_url(result.stdout.strip())
