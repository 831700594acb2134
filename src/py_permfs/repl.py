"""Terminal front end: ``py-permfs [config.json]``.

Each line typed at the prompt goes to ``Shell.execute`` and whatever
it returns is printed.  The prompt names the user commands run as, so
``su`` is visible at a glance.  Tab completion comes from
``Completer``.  The session ends on ``exit``, Ctrl+D or Ctrl+C.

``build_prompt`` and ``create_shell`` are pure and unit-tested; ``run``
owns the terminal.
"""

import readline
import sys
from pathlib import Path

from py_permfs.completer import Completer
from py_permfs.config import FileSystemConfig, load_config
from py_permfs.fs.filesystem import FileSystem
from py_permfs.shell import Shell

BANNER = "PyPermFS v0.1.0: type 'help' for commands, 'exit' to quit."


def build_prompt(shell: Shell) -> str:
    """Build the prompt string showing the current user.

    Returns:
        A prompt string like ``root@permfs $ ``.

    """
    return f"{shell.current_user}@permfs $ "


def create_shell(config_path: Path | None = None) -> Shell:
    """Create a shell over a fresh file system.

    Args:
        config_path: Optional JSON config file (see ``load_config``).

    """
    config = load_config(config_path) if config_path is not None else FileSystemConfig()
    return Shell(filesystem=FileSystem(config=config))


def run() -> None:
    """Run the interactive REPL.

    An optional first command-line argument names a JSON config file.
    Ctrl+D and Ctrl+C both exit cleanly.
    """
    config_path = Path(sys.argv[1]) if len(sys.argv) > 1 else None
    shell = create_shell(config_path)

    completer = Completer(shell)
    readline.set_completer(completer.complete)
    readline.set_completer_delims(" \t")
    readline.parse_and_bind("tab: complete")

    print(BANNER)  # noqa: T201
    try:
        while True:
            try:
                command = input(build_prompt(shell))
            except EOFError:
                # Ctrl+D
                print()  # noqa: T201
                break

            result = shell.execute(command)
            if result == Shell.EXIT_SENTINEL:
                break
            if result:
                print(result)  # noqa: T201

    except KeyboardInterrupt:
        print("\nInterrupted.")  # noqa: T201
