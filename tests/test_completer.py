"""Tests for the tab-completion engine.

Completion logic is pure — it analyses the input line and returns
candidate strings, so it is testable without readline.
"""

from unittest.mock import patch

from py_permfs.completer import Completer
from py_permfs.shell import Shell


def _completer() -> tuple[Shell, Completer]:
    """Create a shell with a small tree and its completer."""
    shell = Shell()
    shell.execute("mkdir /docs")
    shell.execute("touch /data.txt")
    shell.execute("adduser alice rwx")
    return shell, Completer(shell)


class TestCommandCompletion:
    """Verify completion of command names."""

    def test_empty_line_returns_all_commands(self) -> None:
        """Pressing Tab on a blank line should list every command."""
        shell, completer = _completer()
        assert completer.completions("", "") == shell.command_names

    def test_partial_match(self) -> None:
        """A prefix should return only matching commands."""
        _shell, completer = _completer()
        assert completer.completions("ch", "ch") == ["chmod"]

    def test_no_match(self) -> None:
        """An unknown prefix should return nothing."""
        _shell, completer = _completer()
        assert completer.completions("zzz", "zzz") == []


class TestArgumentCompletion:
    """Verify path and user completion."""

    def test_path_completion(self) -> None:
        """Paths should complete with a trailing slash on directories."""
        _shell, completer = _completer()
        assert completer.completions("/d", "ls /d") == ["/data.txt", "/docs/"]

    def test_path_completion_respects_permissions(self) -> None:
        """A user who cannot list a directory gets no candidates."""
        shell, completer = _completer()
        shell.execute("su alice")
        assert completer.completions("/d", "ls /d") == []

    def test_user_completion(self) -> None:
        """su should complete registered usernames."""
        _shell, completer = _completer()
        assert completer.completions("a", "su a") == ["alice"]

    def test_non_path_argument(self) -> None:
        """Arguments of other commands should not complete."""
        _shell, completer = _completer()
        assert completer.completions("x", "whoami x") == []


class TestReadlineCallback:
    """Verify the readline state protocol."""

    def test_complete_iterates_candidates(self) -> None:
        """complete() should return candidates by index, then None."""
        _shell, completer = _completer()
        with patch("py_permfs.completer.readline.get_line_buffer", return_value="mk"):
            assert completer.complete("mk", 0) == "mkdir"
            assert completer.complete("mk", 1) is None
