"""Command interpreter over one ``FileSystem``.

``execute("cp -r /src /dst")`` splits the line on whitespace, looks
the first word up in a table of ``_cmd_*`` handlers and returns the
handler's text.  Nothing is printed here; the REPL and the web app
decide how to show it.

Commands run as the *current user*: root at start, changed by ``su``
and reset to root if that user is deleted.  A ``FileSystemError`` from
the operation layer comes back as ``Error: <message>``.  Any other
exception is a bug and propagates.
"""

from collections.abc import Callable
from typing import TypeAlias

from py_permfs.errors import FileSystemError
from py_permfs.fs.filesystem import FileSystem, ReadCursor
from py_permfs.fs.paths import child_path
from py_permfs.users import User

# A handler takes the arguments after the command name.
_Handler: TypeAlias = Callable[[list[str]], str]

_RECURSIVE_FLAG = "-r"
_APPEND_FLAG = "-a"
_HOME_ROOT = "/home"

# Commands whose handler gets the text after the name unsplit.
_RAW_TEXT_COMMANDS: frozenset[str] = frozenset(["write"])


def _take_flag(args: list[str], flag: str) -> tuple[bool, list[str]]:
    """Remove every occurrence of *flag* from *args*.

    Returns:
        Whether the flag was present, and the remaining arguments.

    """
    rest = [arg for arg in args if arg != flag]
    return len(rest) != len(args), rest


class Shell:
    """Command interpreter bound to one file system."""

    EXIT_SENTINEL = "__EXIT__"

    def __init__(self, *, filesystem: FileSystem | None = None) -> None:
        """Create a shell, logged in as the root user.

        Args:
            filesystem: The file system to operate on (a fresh one by default).

        """
        self._fs = filesystem if filesystem is not None else FileSystem()
        self._user = self._fs.users.root.name

        # name -> handler
        self._commands: dict[str, _Handler] = {
            "help": self._cmd_help,
            "ls": self._cmd_ls,
            "mkdir": self._cmd_mkdir,
            "touch": self._cmd_touch,
            "write": self._cmd_write,
            "cat": self._cmd_cat,
            "rm": self._cmd_rm,
            "mv": self._cmd_mv,
            "cp": self._cmd_cp,
            "chmod": self._cmd_chmod,
            "stat": self._cmd_stat,
            "adduser": self._cmd_adduser,
            "deluser": self._cmd_deluser,
            "users": self._cmd_users,
            "su": self._cmd_su,
            "whoami": self._cmd_whoami,
            "log": self._cmd_log,
            "exit": self._cmd_exit,
        }

    @property
    def filesystem(self) -> FileSystem:
        """Return the file system this shell operates on."""
        return self._fs

    @property
    def current_user(self) -> str:
        """Return the name of the user commands run as."""
        return self._user

    @property
    def command_names(self) -> list[str]:
        """Return the sorted names of all commands."""
        return sorted(self._commands)

    def execute(self, command: str) -> str:
        """Parse and execute a shell command.

        Args:
            command: The raw command string (e.g. "ls -r /home").

        Returns:
            The command output, an error message, or ``EXIT_SENTINEL``.

        """
        parts = command.strip().split(maxsplit=1)
        if not parts:
            return ""
        name = parts[0]
        text = parts[1] if len(parts) > 1 else ""
        handler = self._commands.get(name)
        if handler is None:
            return f"Unknown command: {name}"
        args = [text] if name in _RAW_TEXT_COMMANDS else text.split()
        try:
            return handler(args)
        except FileSystemError as e:
            return f"Error: {e}"

    # -- Commands ------------------------------------------------------------

    def _cmd_help(self, _args: list[str]) -> str:
        """List available commands."""
        return "Available commands: " + ", ".join(self.command_names)

    def _cmd_ls(self, args: list[str]) -> str:
        """List a directory, optionally recursively."""
        recursive, rest = _take_flag(args, _RECURSIVE_FLAG)
        path = rest[0] if rest else "/"
        return self._fs.ls(path, self._user, recursive=recursive).rstrip("\n")

    def _cmd_mkdir(self, args: list[str]) -> str:
        """Create a directory and any missing parents."""
        if not args:
            return "Usage: mkdir <path>"
        self._fs.mkdir(args[0], self._user)
        return ""

    def _cmd_touch(self, args: list[str]) -> str:
        """Create an empty file."""
        if not args:
            return "Usage: touch <path>"
        self._fs.touch(args[0], self._user)
        return ""

    def _cmd_write(self, args: list[str]) -> str:
        """Write (or append with -a) content to a file.

        ``args`` holds the raw text after ``write``.  Only a leading
        ``-a`` is a flag; everything after the path is stored as typed.
        """
        words = args[0].split(maxsplit=1)
        append = bool(words) and words[0] == _APPEND_FLAG
        if append:
            words = words[1].split(maxsplit=1) if len(words) > 1 else []
        if len(words) < 2:  # noqa: PLR2004
            return "Usage: write [-a] <path> <content...>"
        path, content = words
        written = self._fs.write(path, self._user, content.encode(), append=append)
        return f"{written} bytes written"

    def _cmd_cat(self, args: list[str]) -> str:
        """Print a file's contents."""
        if not args:
            return "Usage: cat <path>"
        cursor = ReadCursor()
        buffer = bytearray(self._fs.config.block_size)
        chunks: list[bytes] = []
        while count := self._fs.read(args[0], self._user, buffer, cursor):
            chunks.append(bytes(buffer[:count]))
        return b"".join(chunks).decode(errors="replace")

    def _cmd_rm(self, args: list[str]) -> str:
        """Remove a file or directory (-r for non-empty directories)."""
        recursive, rest = _take_flag(args, _RECURSIVE_FLAG)
        if not rest:
            return "Usage: rm [-r] <path>"
        self._fs.rm(rest[0], self._user, recursive=recursive)
        return ""

    def _cmd_mv(self, args: list[str]) -> str:
        """Move or rename a node."""
        if len(args) < 2:  # noqa: PLR2004
            return "Usage: mv <old> <new>"
        self._fs.mv(args[0], args[1], self._user)
        return ""

    def _cmd_cp(self, args: list[str]) -> str:
        """Copy a node into an existing directory."""
        recursive, rest = _take_flag(args, _RECURSIVE_FLAG)
        if len(rest) < 2:  # noqa: PLR2004
            return "Usage: cp [-r] <src> <dst-dir>"
        self._fs.cp(rest[0], rest[1], self._user, recursive=recursive)
        return ""

    def _cmd_chmod(self, args: list[str]) -> str:
        """Grant a user a capability string on a node."""
        if len(args) < 3:  # noqa: PLR2004
            return "Usage: chmod <path> <user> <rwx>"
        path, target, capabilities = args[:3]
        self._fs.chmod(path, self._user, target, capabilities)
        return ""

    def _cmd_stat(self, args: list[str]) -> str:
        """Show metadata for a node."""
        if not args:
            return "Usage: stat <path>"
        info = self._fs.stat(args[0], self._user)
        return "\n".join(
            [
                f"  Name: {info.name}",
                f"  Type: {info.kind}",
                f"  Owner: {info.owner}",
                f"  Access: {info.capabilities}",
                f"  Size: {info.size}",
                f"  Children: {info.child_count}",
            ]
        )

    def _cmd_adduser(self, args: list[str]) -> str:
        """Register a user: ``adduser <name> <rwx> [home]``."""
        if len(args) < 2:  # noqa: PLR2004
            return "Usage: adduser <name> <rwx> [home]"
        name, permission = args[0], args[1]
        home = args[2] if len(args) > 2 else child_path(_HOME_ROOT, name)  # noqa: PLR2004
        self._fs.add_user(User(name=name, permission=permission, home=home))
        return f"User '{name}' created (home={home})"

    def _cmd_deluser(self, args: list[str]) -> str:
        """Unregister a user."""
        if not args:
            return "Usage: deluser <name>"
        self._fs.remove_user(args[0])
        if args[0] == self._user:
            self._user = self._fs.users.root.name
        return f"User '{args[0]}' removed"

    def _cmd_users(self, _args: list[str]) -> str:
        """List registered users."""
        lines = ["NAME       ACCESS HOME"]
        lines.extend(
            f"{u.name:<10} {u.permission:<6} {u.home}" for u in self._fs.users.list_users()
        )
        return "\n".join(lines)

    def _cmd_su(self, args: list[str]) -> str:
        """Switch the current user."""
        if not args:
            return "Usage: su <name>"
        if args[0] not in self._fs.users:
            return f"Error: User not found: {args[0]}"
        self._user = args[0]
        return f"Switched to {self._user}"

    def _cmd_whoami(self, _args: list[str]) -> str:
        """Show the current user."""
        return self._user

    def _cmd_log(self, args: list[str]) -> str:
        """Show the audit log, or only its newest *n* records."""
        logger = self._fs.logger
        if not args:
            return "\n".join(str(entry) for entry in logger)
        if not args[0].isdigit():
            return "Usage: log [count]"
        return "\n".join(str(entry) for entry in logger.tail(int(args[0])))

    def _cmd_exit(self, _args: list[str]) -> str:
        """Leave the shell."""
        return self.EXIT_SENTINEL
