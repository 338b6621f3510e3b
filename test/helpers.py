import difflib
import os
import subprocess
import sys
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from gittools import OidStr, UnknownRefError
from gittools.history import Commit

DUMMY_NAME = "Testy McTestface"
DUMMY_EMAIL = "test@example.com"
DUMMY_DATE = "Wed 29 Oct 12:34:56 2020 PDT"

# Large enough that no commit made with `DUMMY_DATE` is past the cutoff.
NO_CUTOFF_WEEKS = 10000


class Git:
    def __init__(self, path: Path, git_executable: str) -> None:
        self.path = path
        self.git_executable = git_executable

    def init_repo(self, make_initial_commit: bool = True) -> None:
        self.run("init")
        # Independent of the `init.defaultBranch` setting.
        self.run("symbolic-ref", ["HEAD", "refs/heads/master"])
        self.run("config", ["user.name", DUMMY_NAME])
        self.run("config", ["user.email", DUMMY_EMAIL])

        # Silence some log-spam.
        self.run("config", ["advice.detachedHead", "false"])

        if make_initial_commit:
            self.commit_file(name="initial", time=0)

    def run(
        self,
        command: str,
        args: Optional[List[str]] = None,
        time: int = 0,
        check: bool = True,
    ) -> str:
        if args is None:
            args = []
        args = [self.git_executable, command, *args]

        # Required for determinism, as these values will be baked into the commit
        # hash.
        date = f"{DUMMY_DATE} -{time:02d}00"
        env = {
            "GIT_AUTHOR_DATE": date,
            "GIT_COMMITTER_DATE": date,
            "GIT_EDITOR": "true",
            "PATH": os.environ.get("PATH", os.defpath),
        }

        result = subprocess.run(
            args,
            cwd=str(self.path),
            stdout=subprocess.PIPE,
            env=env,
            check=check,
        )
        return result.stdout.decode()

    def commit_file(self, name: str, time: int, contents: Optional[str] = None) -> None:
        path = self.path / f"{name}.txt"
        with open(path, "w") as f:
            if contents is None:
                f.write(f"{name} contents\n")
            else:
                f.write(contents)
                f.write("\n")
        self.run("add", ["."])
        self.run("commit", ["-m", f"create {name}.txt"], time=time)

    def detach_head(self) -> None:
        self.run("checkout", ["--detach", "HEAD"])

    def rev_parse(self, rev: str) -> OidStr:
        return self.run("rev-parse", [rev]).strip()


class FakeHistorySource:
    """In-memory commit history.

    Each branch maps to its commits, newest first, in the order they should be
    walked.
    """

    def __init__(self, branches: Dict[str, List[Commit]]) -> None:
        self._branches = branches
        self.walked: List[OidStr] = []

    def resolve(self, ref: str) -> OidStr:
        try:
            return self._branches[ref][0].oid
        except KeyError as e:
            raise UnknownRefError(ref) from e

    def walk(self, oid: OidStr) -> Iterator[Commit]:
        self.walked.append(oid)
        for commits in self._branches.values():
            if commits[0].oid == oid:
                yield from commits
                return
        raise KeyError(oid)


def _rstrip_lines(lines: str) -> List[str]:
    return [line.rstrip() + "\n" for line in lines.splitlines()]


def compare(actual: str, expected: str) -> None:
    actual_lines = _rstrip_lines(actual)
    expected_lines = _rstrip_lines(expected)

    sys.stdout.writelines(
        difflib.context_diff(
            expected_lines, actual_lines, fromfile="Expected", tofile="Actual", n=999
        )
    )
    assert actual == expected
