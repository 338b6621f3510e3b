"""Small tools for inspecting Git branches.

# Branch divergence

The `branch-commits` command answers the question "how far apart are these
two branches?". It finds the commit where the branches split (their *shared
commit*) and reports how many commits have been made on each branch since
then:

           5 commits (refs/heads/topic)
          /
    f777ecc
          \\
           12 commits (refs/heads/master)

The shared commit is found by walking the second branch backward from its tip
and stopping at the first commit that is also reachable from the first
branch. This is an approximation of `git merge-base`: on histories containing
merge commits, the first such commit is not necessarily the best common
ancestor. To bound the cost of the walk, the search gives up once it reaches
commits older than a cutoff (8 weeks by default).
"""
import contextlib
import os
from typing import Iterator, Optional

import pygit2
from pygit2.enums import RepositoryOpenFlag

OidStr = str
"""Represents an object ID in the Git repository.

We don't use `pygit2.Oid` directly, so that the planning logic can be fed
commits which don't come from a repository on disk. Comparisons are always
made on the full hex string; abbreviated IDs are for display only.
"""

DEFAULT_MAIN_BRANCH = "refs/heads/master"
DEFAULT_CUTOFF_WEEKS = 8


class GitToolsError(Exception):
    """Base class for errors reported to the user as a one-line message."""


class UnknownRefError(GitToolsError):
    def __init__(self, ref: str) -> None:
        self.ref = ref

    def __str__(self) -> str:
        return f"unknown ref: {self.ref}"


class RepositoryNotFoundError(GitToolsError):
    def __init__(self, path: str) -> None:
        self.path = path

    def __str__(self) -> str:
        return f"could not find .git directory: {self.path}"


class ArgumentError(GitToolsError):
    """Missing or malformed command-line input."""


def find_git_dir(start_path: Optional[str] = None) -> str:
    """Find the `.git` directory, searching upward from a starting directory.

    Args:
      start_path: The directory to start searching from. Defaults to the
        current working directory.

    Returns:
      The path to the repository's `.git` directory.

    Raises:
      RepositoryNotFoundError: If no repository could be found.
    """
    if start_path is None:
        start_path = os.getcwd()
    repo_path = pygit2.discover_repository(start_path)
    if repo_path is None:
        raise RepositoryNotFoundError(start_path)
    return repo_path


@contextlib.contextmanager
def open_repo(git_dir: Optional[str] = None) -> Iterator[pygit2.Repository]:
    """Context manager to open a repository and release it afterwards.

    The repository's file handles are freed when the context manager exits,
    whether or not an exception was raised.

    Args:
      git_dir: The `.git` directory (or work tree) of the repository. If not
        provided, the repository is discovered from the current directory.

    Yields:
      The repository object.

    Raises:
      RepositoryNotFoundError: If the path is not a Git repository.
    """
    if git_dir is None:
        git_dir = find_git_dir()
    try:
        repo = pygit2.Repository(git_dir, RepositoryOpenFlag.NO_SEARCH)
    except (KeyError, pygit2.GitError) as e:
        raise RepositoryNotFoundError(git_dir) from e

    try:
        yield repo
    finally:
        repo.free()


def get_main_branch_name(repo: pygit2.Repository) -> str:
    """Get the name of the main branch for the repository.

    This is used as the default first ref to compare against.

    Args:
      repo: The Git repository.

    Returns:
      The configured `gittools.mainBranch`, or `refs/heads/master`.
    """
    try:
        return repo.config["gittools.mainBranch"]
    except KeyError:
        return DEFAULT_MAIN_BRANCH


def get_cutoff_weeks(repo: pygit2.Repository) -> int:
    """Get the default search cutoff for the repository, in weeks.

    Args:
      repo: The Git repository.

    Returns:
      The configured `gittools.cutoffWeeks`, or 8.

    Raises:
      ArgumentError: If the configured value is not a positive integer.
    """
    try:
        value = repo.config.get_int("gittools.cutoffWeeks")
    except KeyError:
        return DEFAULT_CUTOFF_WEEKS
    except pygit2.GitError as e:
        raise ArgumentError(f"invalid gittools.cutoffWeeks: {e}") from e
    if value <= 0:
        raise ArgumentError(f"invalid gittools.cutoffWeeks: {value}")
    return value
