"""Read commit history out of a repository.

The divergence planner only needs two things from the repository: turning a
ref name into a commit, and listing the commits reachable from that commit.
Those are expressed as the `CommitHistorySource` interface, so that the
planner can be run against an in-memory history as well as a real one.
"""
import logging
from dataclasses import dataclass
from typing import Iterator, Tuple

import pygit2
from pygit2.enums import SortMode
from typing_extensions import Protocol

from . import OidStr, UnknownRefError


@dataclass(frozen=True, eq=True)
class Commit:
    """The parts of a commit needed to plan a divergence."""

    oid: OidStr
    """The full hex object ID of the commit."""

    commit_time: int
    """Committer timestamp, in seconds since the epoch."""

    parents: Tuple[OidStr, ...] = ()


class CommitHistorySource(Protocol):
    """Interface for looking up refs and walking history."""

    def resolve(self, ref: str) -> OidStr:  # pragma: no cover
        """Resolve a ref name to the commit it points to.

        Args:
          ref: The name of the ref, e.g. `refs/heads/master` or `master`.

        Returns:
          The OID of the tip commit.

        Raises:
          UnknownRefError: If the name doesn't resolve to a commit.
        """
        ...

    def walk(self, oid: OidStr) -> Iterator[Commit]:  # pragma: no cover
        """Iterate the commits reachable from the given commit, newest first.

        Every reachable commit is yielded exactly once, including the starting
        commit itself.

        Args:
          oid: The commit to start from.

        Returns:
          An iterator over the reachable commits. It is consumed lazily, so
          that callers can stop early without visiting the whole history.
        """
        ...


class RepoHistorySource:
    """`CommitHistorySource` backed by a Git repository on disk."""

    def __init__(self, repo: pygit2.Repository) -> None:
        self._repo = repo

    def resolve(self, ref: str) -> OidStr:
        # Accepts both full names and the short forms Git would accept on the
        # command-line (`master`, `origin/master`, tags).
        try:
            reference = self._repo.lookup_reference_dwim(ref)
            commit = reference.peel(pygit2.Commit)
        except (KeyError, ValueError) as e:
            raise UnknownRefError(ref) from e
        logging.debug(f"Resolved {ref} to {commit.id}")
        return str(commit.id)

    def walk(self, oid: OidStr) -> Iterator[Commit]:
        start_oid = pygit2.Oid(hex=oid)
        for commit in self._repo.walk(start_oid, SortMode.TOPOLOGICAL | SortMode.TIME):
            yield Commit(
                oid=str(commit.id),
                commit_time=commit.commit_time,
                parents=tuple(str(parent_id) for parent_id in commit.parent_ids),
            )
