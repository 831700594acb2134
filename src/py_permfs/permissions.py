"""Capabilities and per-node access rules.

Each node carries a ``Permissions`` record:

- **owner** — the username that created the node.
- **default** — the owner's capability string, e.g. ``"rw-"``.
- **overrides** — a per-user map of capability strings that replace
  the default for that user on this node only.

A capability string is positional, like one triplet of ``ls -l``::

    r w x      read, write, execute all granted
    r - -      read only
    - - -      nothing

Resolution order for ``allows(username, capability)``:

1. If *username* has an override on this node, use it (even for the
   owner — an override can take rights away).
2. Otherwise, if *username* is the owner, use the default string.
3. Otherwise deny.

Unlike Unix there are no "other" bits and no superuser bypass: root
has access to a node only because it owns it or holds an override.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import StrEnum

from py_permfs.errors import InvalidOperationError


class Capability(StrEnum):
    """A single grantable right.  The value is its symbol."""

    READ = "r"
    WRITE = "w"
    EXECUTE = "x"


FULL_ACCESS = "rwx"
NO_ACCESS = "---"

_CAPABILITY_PATTERN = re.compile(r"[r-][w-][x-]")


def is_valid_capabilities(text: str) -> bool:
    """Return True if *text* is a well-formed 3-flag capability string."""
    return _CAPABILITY_PATTERN.fullmatch(text) is not None


def validate_capabilities(text: str) -> str:
    """Return *text* unchanged if it is a valid capability string.

    Raises:
        InvalidOperationError: If *text* is not of the form ``[r-][w-][x-]``.

    """
    if not is_valid_capabilities(text):
        msg = f"Invalid capability string: {text!r} (expected e.g. 'rwx', 'r--')"
        raise InvalidOperationError(msg)
    return text


@dataclass
class Permissions:
    """Owner, default capabilities, and per-user overrides for one node.

    Not frozen — ``overrides`` is mutated in place by ``chmod``.
    """

    owner: str
    default: str
    overrides: dict[str, str] = field(default_factory=dict)  # pyright: ignore[reportUnknownVariableType]

    def capabilities_for(self, username: str) -> str:
        """Return the capability string that applies to *username*."""
        override = self.overrides.get(username)
        if override is not None:
            return override
        if username == self.owner:
            return self.default
        return NO_ACCESS

    def allows(self, username: str, capability: Capability) -> bool:
        """Return True if *username* holds *capability* on this node."""
        return capability.value in self.capabilities_for(username)

    def set_override(self, username: str, capabilities: str) -> None:
        """Replace (not merge) the override recorded for *username*."""
        self.overrides[username] = capabilities

    def copy(self) -> Permissions:
        """Return an independent copy, overrides included."""
        return Permissions(owner=self.owner, default=self.default, overrides=dict(self.overrides))
