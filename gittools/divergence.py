"""Find where two branches split and how far each has moved since.

The shared commit is found with a forward scan rather than a true merge-base
computation: all commits reachable from the first branch are collected, then
the second branch is walked from its tip until a commit from that collection
is found. On a history without merges this is the merge-base. With merges,
the first commit found may not be the best common ancestor; this is a known
limitation of the tool.

The walk of the second branch stops at the first commit older than a cutoff,
so that comparing unrelated or long-diverged branches doesn't traverse the
entire history. In that case, no shared commit is reported, even if one
exists further back.
"""
import datetime
import logging
import time
from dataclasses import dataclass
from typing import List, Optional, Set, TextIO, Union

from . import OidStr, get_cutoff_weeks, get_main_branch_name, open_repo
from .formatting import (
    make_glyphs,
    render_branch_summary,
    render_cutoff_reached,
    render_no_shared_commit,
    render_short_summary,
)
from .history import Commit, CommitHistorySource, RepoHistorySource

DEFAULT_CUTOFF = datetime.timedelta(weeks=8)


@dataclass(frozen=True, eq=True)
class Divergence:
    """The commit shared by two branches and the commits made since."""

    shared_oid: OidStr

    count1: int
    """The number of commits on the first branch after `shared_oid`."""

    count2: int
    """The number of commits on the second branch after `shared_oid`."""


@dataclass(frozen=True, eq=True)
class NoSharedCommit:
    """No shared commit was found for two branches."""

    cutoff_commit: Optional[Commit] = None
    """The commit at which the search hit the cutoff time.

    `None` if the whole history of the second branch was searched.
    """


DivergenceResult = Union[Divergence, NoSharedCommit]


def count_commits_before(commits: List[Commit], oid: OidStr) -> int:
    """Count the commits in `commits` up to, but not including, `oid`."""
    count = 0
    for commit in commits:
        if commit.oid == oid:
            break
        count += 1
    return count


class DivergencePlanner:
    """Find the shared commit of two branches.

    Args:
      history: Where to read commits from.
      cutoff: How far back to search the second branch for a shared commit.
      now: The current time, in seconds since the epoch. Defaults to the
        time at which `plan` is called.
    """

    def __init__(
        self,
        history: CommitHistorySource,
        cutoff: datetime.timedelta = DEFAULT_CUTOFF,
        now: Optional[int] = None,
    ) -> None:
        self._history = history
        self._cutoff = cutoff
        self._now = now

    def plan(self, ref1: str, ref2: str) -> DivergenceResult:
        """Compare two branches.

        Args:
          ref1: The first branch. Its entire history is read.
          ref2: The second branch. Its history is read until a commit of
            `ref1` or the cutoff time is reached.

        Returns:
          A `Divergence` if a shared commit was found, otherwise
          `NoSharedCommit`.

        Raises:
          UnknownRefError: If either ref doesn't exist. Neither branch is
            traversed in that case.
        """
        # Both refs must resolve before either branch is walked.
        tip1 = self._history.resolve(ref1)
        tip2 = self._history.resolve(ref2)

        commits_on_branch1 = list(self._history.walk(tip1))
        oids_on_branch1: Set[OidStr] = {commit.oid for commit in commits_on_branch1}
        logging.debug(f"Found {len(commits_on_branch1)} commits on {ref1}")

        now = self._now if self._now is not None else int(time.time())
        cutoff_time = now - int(self._cutoff.total_seconds())

        shared_oid: Optional[OidStr] = None
        commits_on_branch2: List[Commit] = []
        for commit in self._history.walk(tip2):
            if commit.oid in oids_on_branch1:
                shared_oid = commit.oid
                break
            if commit.commit_time < cutoff_time:
                logging.debug(
                    f"Commit {commit.oid} on {ref2} is older than the cutoff, giving up"
                )
                return NoSharedCommit(cutoff_commit=commit)
            commits_on_branch2.append(commit)

        if shared_oid is None:
            return NoSharedCommit()

        logging.debug(f"Shared commit of {ref1} and {ref2} is {shared_oid}")
        return Divergence(
            shared_oid=shared_oid,
            count1=count_commits_before(commits_on_branch1, shared_oid),
            count2=len(commits_on_branch2),
        )


@dataclass(frozen=True)
class BranchCommitsConfig:
    """Options for the `branch-commits` command."""

    ref2: str

    ref1: Optional[str] = None
    """Defaults to the repository's main branch."""

    git_dir: Optional[str] = None
    """Discovered from the current directory if not set."""

    cutoff_weeks: Optional[int] = None
    """Defaults to the repository's configured cutoff, or 8 weeks."""

    short_output: bool = False


def branch_commits(*, out: TextIO, config: BranchCommitsConfig) -> int:
    """Display the shared commit of two refs and the commits made on each since.

    Args:
      out: The output stream to write to.
      config: The command options.

    Returns:
      Exit code (0 denotes successful exit).
    """
    with open_repo(config.git_dir) as repo:
        ref1 = config.ref1 if config.ref1 is not None else get_main_branch_name(repo)
        cutoff_weeks = (
            config.cutoff_weeks
            if config.cutoff_weeks is not None
            else get_cutoff_weeks(repo)
        )
        planner = DivergencePlanner(
            history=RepoHistorySource(repo),
            cutoff=datetime.timedelta(weeks=cutoff_weeks),
        )
        result = planner.plan(ref1=ref1, ref2=config.ref2)

    if isinstance(result, NoSharedCommit):
        if result.cutoff_commit is not None:
            out.write(render_cutoff_reached(result.cutoff_commit.commit_time))
        out.write(render_no_shared_commit(ref1=ref1, ref2=config.ref2))
    elif config.short_output:
        out.write(
            render_short_summary(
                shared_oid=result.shared_oid, count1=result.count1, count2=result.count2
            )
        )
    else:
        out.write(
            render_branch_summary(
                glyphs=make_glyphs(out),
                shared_oid=result.shared_oid,
                ref1=ref1,
                count1=result.count1,
                ref2=config.ref2,
                count2=result.count2,
            )
        )
    return 0
