import git
import logging
from pathlib import Path
from typing import Literal

from .exceptions import GitError

# Initialize module-level logger
logger = logging.getLogger(__name__)


class DiffExtractor:
    @staticmethod
    def extract_diff(repo: git.Repo, diff_type: Literal["staged", "last_commit"]) -> str:
        """
        Returns the unified diff for staged changes or for HEAD.
        """
        try:
            if diff_type == "staged":
                # Works before the first commit too (diffs against the empty tree)
                return repo.git.diff("--cached")
            elif diff_type == "last_commit":
                if not repo.head.is_valid():
                    return ""
                # --format= drops the commit header and keeps only the patch
                return repo.git.show("HEAD", "--format=", "--patch")
            else:
                raise ValueError(f"Invalid diff_type '{diff_type}'")
        except git.exc.GitCommandError as e:
            logger.error(f"Error extracting {diff_type} diff: {e}", exc_info=True)
            raise GitError(f"Could not read {diff_type} diff: {e}") from e


class GitRepositoryContext:
    def __init__(self, repo_path: str):
        self.repo_path = repo_path
        self._repo: git.Repo | None = None

    def __enter__(self) -> git.Repo:
        try:
            self._repo = git.Repo(self.repo_path, search_parent_directories=True)
            return self._repo
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError):
            raise GitError(f"'{self.repo_path}' is not a valid Git repository.")

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._repo:
            self._repo.close()


def get_staged_diff(repo_path: str = ".") -> str:
    """Diff of the changes currently in the index (git diff --cached)."""
    with GitRepositoryContext(repo_path) as repo:
        logger.info("Fetching staged changes...")
        return DiffExtractor.extract_diff(repo, "staged")


def get_last_commit_diff(repo_path: str = ".") -> str:
    """Patch introduced by HEAD, empty when the repository has no commits."""
    with GitRepositoryContext(repo_path) as repo:
        logger.info("Fetching last commit diff...")
        return DiffExtractor.extract_diff(repo, "last_commit")


def read_diff_file(path: str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.error(f"Failed to read diff file '{path}': {e}")
        raise GitError(f"Could not read diff file '{path}': {e}") from e


def apply_commit(repo_path: str, message: str, amend: bool = False) -> str:
    """
    Creates a commit from the index with ``message`` (or amends HEAD).
    Returns the new HEAD sha.
    """
    args = ["--amend"] if amend else []
    with GitRepositoryContext(repo_path) as repo:
        try:
            repo.git.commit(*args, "-m", message)
        except git.exc.GitCommandError as e:
            logger.error(f"git commit failed: {e}", exc_info=True)
            raise GitError(f"git commit failed: {e.stderr.strip() if e.stderr else e}") from e
        sha = repo.head.commit.hexsha
        logger.info(f"{'Amended' if amend else 'Created'} commit {sha[:7]}")
        return sha
