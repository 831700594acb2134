"""Tab completion for the shell.

What gets completed depends on the word under the cursor:

- the first word completes to a command name;
- after ``su`` or ``deluser`` it completes to a registered username;
- after a path command, or whenever it starts with ``/``, it completes
  to a child of the directory typed so far.

Path candidates come from ``FileSystem.walk`` as the shell's current
user, so directories that user cannot read offer nothing.
"""

from __future__ import annotations

import readline
from typing import TYPE_CHECKING

from py_permfs.errors import FileSystemError
from py_permfs.fs.nodes import NodeKind

if TYPE_CHECKING:
    from py_permfs.shell import Shell

# Commands whose arguments are file system paths.
_PATH_COMMANDS: frozenset[str] = frozenset(
    ["ls", "cat", "rm", "mkdir", "touch", "write", "mv", "cp", "chmod", "stat"]
)

# Commands whose first argument is a username.
_USER_COMMANDS: frozenset[str] = frozenset(["su", "deluser"])


class Completer:
    """Context-aware tab completer for the shell."""

    def __init__(self, shell: Shell) -> None:
        """Create a completer attached to a shell instance."""
        self._shell = shell

    def complete(self, text: str, state: int) -> str | None:
        """Return the *state*-th candidate for *text*, or None when exhausted."""
        line = readline.get_line_buffer()
        candidates = self.completions(text, line)
        if state < len(candidates):
            return candidates[state]
        return None

    def completions(self, text: str, line: str) -> list[str]:
        """Return completion candidates based on context.

        Args:
            text: The partial word under the cursor.
            line: The full input line so far.

        Returns:
            Sorted list of matching candidates.

        """
        words = line.lstrip().split()

        # Still on the first word: complete a command name
        if not words or (len(words) == 1 and not line.endswith(" ")):
            return [cmd for cmd in self._shell.command_names if cmd.startswith(text)]

        cmd = words[0]
        if cmd in _USER_COMMANDS:
            names = [u.name for u in self._shell.filesystem.users.list_users()]
            return [name for name in names if name.startswith(text)]
        if text.startswith("/") or cmd in _PATH_COMMANDS:
            return self._complete_paths(text)
        return []

    def _complete_paths(self, text: str) -> list[str]:
        """Complete paths the current user is allowed to list.

        Directories get a trailing ``/`` suffix.
        """
        if "/" not in text:
            return []

        # Split "/foo/ba" into dir="/foo" prefix="ba"
        last_slash = text.rfind("/")
        directory = text[: last_slash + 1] or "/"
        prefix = text[last_slash + 1 :]

        fs = self._shell.filesystem
        try:
            listing = next(fs.walk(directory, self._shell.current_user))
        except FileSystemError:
            return []

        candidates: list[str] = []
        for entry in listing.entries:
            if entry.name.startswith(prefix):
                full = f"{directory.rstrip('/')}/{entry.name}"
                if entry.kind is NodeKind.DIRECTORY:
                    full += "/"
                candidates.append(full)
        return sorted(candidates)
