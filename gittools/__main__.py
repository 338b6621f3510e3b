"""Main entry-point."""
import argparse
import logging
import sys
from typing import Callable, Dict, List, NamedTuple, NoReturn, Sequence, TextIO

from . import ArgumentError, GitToolsError
from .divergence import BranchCommitsConfig, branch_commits


class _ArgumentParser(argparse.ArgumentParser):
    """Argument parser which raises instead of exiting on bad input."""

    def error(self, message: str) -> NoReturn:
        raise ArgumentError(message)


def _positive_int(value: str) -> int:
    try:
        result = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}") from None
    if result <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {value}")
    return result


def _add_branch_commits_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--ref1",
        type=str,
        help="First ref (default: the gittools.mainBranch config, or refs/heads/master).",
    )
    parser.add_argument("--ref2", type=str, help="Second ref (required).")
    parser.add_argument(
        "-d",
        "--dir",
        dest="git_dir",
        type=str,
        help=".git directory (searched for from the current directory if not set).",
    )
    parser.add_argument(
        "-c",
        "--cutoff",
        dest="cutoff_weeks",
        type=_positive_int,
        metavar="WEEKS",
        help="Cutoff for the commit search, in weeks (default: 8).",
    )
    parser.add_argument(
        "-s",
        "--short",
        dest="short_output",
        action="store_true",
        help="Short output: <commit>+<count1>+<count2>.",
    )


def _run_branch_commits(args: argparse.Namespace, out: TextIO) -> int:
    if args.ref2 is None:
        raise ArgumentError("Value for --ref2 is missing")
    config = BranchCommitsConfig(
        ref1=args.ref1,
        ref2=args.ref2,
        git_dir=args.git_dir,
        cutoff_weeks=args.cutoff_weeks,
        short_output=args.short_output,
    )
    return branch_commits(out=out, config=config)


class Command(NamedTuple):
    help: str
    add_arguments: Callable[[argparse.ArgumentParser], None]
    run: Callable[[argparse.Namespace, TextIO], int]
    aliases: Sequence[str] = ()


COMMANDS: Dict[str, Command] = {
    "branch-commits": Command(
        help="Display the common commit and the resulting number of commits for two given refs.",
        add_arguments=_add_branch_commits_arguments,
        run=_run_branch_commits,
        aliases=["BranchCommits"],
    ),
}


def _make_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(prog="gittools", add_help=False)
    parser.add_argument(
        "-h", "--help", action="store_true", help="show this help message and exit"
    )
    subparsers = parser.add_subparsers(dest="subcommand")
    for name, command in COMMANDS.items():
        command_parser = subparsers.add_parser(
            name, aliases=list(command.aliases), help=command.help, add_help=False
        )
        # Separate destination from the top-level `--help`, since the
        # sub-parser's defaults would overwrite it.
        command_parser.add_argument(
            "-h",
            "--help",
            dest="command_help",
            action="store_true",
            help="show this help message and exit",
        )
        command_parser.add_argument(
            "-v", "--verbose", action="store_true", help="Log debugging information."
        )
        command.add_arguments(command_parser)
        command_parser.set_defaults(command=command, command_parser=command_parser)
    return parser


def main(argv: List[str], *, out: TextIO, err: TextIO) -> int:
    """Run the provided sub-command.

    Args:
      argv: List of command-line arguments (e.g. from `sys.argv`).
      out: Output stream to write to (may be a TTY).
      err: Error stream to write to.

    Returns:
      Exit code (0 denotes successful exit).
    """
    parser = _make_parser()
    try:
        args = parser.parse_args(argv)
    except ArgumentError as e:
        err.write(f"{parser.prog}: error: {e}\n")
        return 1

    command = getattr(args, "command", None)
    if args.help:
        parser.print_help(file=out)
        return 0
    elif command is None:
        parser.print_usage(file=out)
        return 1
    elif args.command_help:
        args.command_parser.print_help(file=out)
        return 0

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    try:
        return command.run(args, out)
    except GitToolsError as e:
        err.write(f"{parser.prog}: error: {e}\n")
        return 1


def entry_point() -> None:
    sys.exit(main(sys.argv[1:], out=sys.stdout, err=sys.stderr))


def branch_commits_entry_point() -> None:
    sys.exit(main(["branch-commits", *sys.argv[1:]], out=sys.stdout, err=sys.stderr))


if __name__ == "__main__":
    entry_point()
