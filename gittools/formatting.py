"""Formatting and output helpers.

We try to handle both textual output and interactive output (output to a
"TTY"). In the case of interactive output, we render with prettier non-ASCII
characters and with colors, using shell-specific escape codes.
"""
import datetime
from typing import TextIO

import colorama
from typing_extensions import Protocol

from . import OidStr

ABBREVIATED_OID_LENGTH = 7


class Glyphs(Protocol):
    """Interface for glyphs to use for rendering the branch summary."""

    branch_up: str
    branch_down: str

    def color_fg(self, color: colorama.Fore, message: str) -> str:  # pragma: no cover
        """Render the foreground (text) color for the given message.

        Args:
          color: The color to render the foreground as.
          message: The message to render.

        Returns:
          An updated message that potentially includes escape codes to render
          the color.
        """
        ...


class TextGlyphs:
    """Glyphs used for output to a text file or non-TTY."""

    branch_up = "/"
    branch_down = "\\"

    def color_fg(self, color: colorama.Fore, message: str) -> str:
        return message


class PrettyGlyphs:
    """Glyphs used for output to a TTY."""

    branch_up = "╱"
    branch_down = "╲"

    def __init__(self) -> None:
        colorama.init()

    def color_fg(self, color: colorama.Fore, message: str) -> str:
        return color + message + colorama.Fore.RESET


def make_glyphs(out: TextIO) -> Glyphs:
    """Make the `Glyphs` object appropriate for the provided output stream.

    Args:
      out: The output stream being written to.

    Returns:
      The `Glyphs` object.
    """
    if out.isatty():
        return PrettyGlyphs()
    else:
        return TextGlyphs()


def pluralize(amount: int, singular: str, plural: str) -> str:
    """Pluralize a quantity, as appropriate.

    Args:
      amount: The quantity to pluralize.
      singular: The string to return if singular.
      plural: The string to return if plural.

    Returns:
      The appropriately-pluralized amount as a string.
    """
    if amount == 1:
        return f"{amount} {singular}"
    else:
        return f"{amount} {plural}"


def abbreviate_oid(oid: OidStr) -> str:
    """Abbreviate an OID for display. Never compare abbreviated OIDs."""
    return oid[:ABBREVIATED_OID_LENGTH]


def render_branch_summary(
    glyphs: Glyphs,
    shared_oid: OidStr,
    ref1: str,
    count1: int,
    ref2: str,
    count2: int,
) -> str:
    """Render the divergence of two branches as a small tree.

    The first branch is drawn above the shared commit and the second below
    it, e.g.:

               2 commits (refs/heads/master)
              /
        f777ecc
              \\
               1 commit (refs/heads/topic)

    Args:
      glyphs: The glyphs to use.
      shared_oid: The commit shared by both branches.
      ref1: The name of the first branch.
      count1: The number of commits on the first branch since `shared_oid`.
      ref2: The name of the second branch.
      count2: The number of commits on the second branch since `shared_oid`.

    Returns:
      The rendered summary, ending with a newline.
    """
    indent = " " * (ABBREVIATED_OID_LENGTH - 1)
    oid_text = glyphs.color_fg(
        color=colorama.Fore.YELLOW, message=abbreviate_oid(shared_oid)
    )
    return "".join(
        [
            f"{indent} {pluralize(count1, 'commit', 'commits')} ({ref1})\n",
            f"{indent}{glyphs.branch_up}\n",
            f"{oid_text}\n",
            f"{indent}{glyphs.branch_down}\n",
            f"{indent} {pluralize(count2, 'commit', 'commits')} ({ref2})\n",
        ]
    )


def render_short_summary(shared_oid: OidStr, count1: int, count2: int) -> str:
    """Render the divergence in the compact `<oid>+<count1>+<count2>` form."""
    return f"{abbreviate_oid(shared_oid)}+{count1}+{count2}\n"


def render_no_shared_commit(ref1: str, ref2: str) -> str:
    return f"no shared commit between {ref1} and {ref2}\n"


def render_cutoff_reached(commit_time: int) -> str:
    timestamp = datetime.datetime.fromtimestamp(commit_time, tz=datetime.timezone.utc)
    return f"search reached cutoff time, last commit: {timestamp.isoformat()}\n"
