"""Users — the identities that filesystem operations act on behalf of.

Every operation names the user performing it.  The registry answers
two questions for the filesystem:

- **Who exists?**  Creating a node records its owner, so the acting
  user must be registered.
- **What do they get by default?**  Each user carries a capability
  string that becomes the default for files they create, plus a home
  directory on which that string is granted as an override.

The registry always contains ``root`` with full access to ``/``.  Root
can never be removed — like uid 0 in ``/etc/passwd``.
"""

from dataclasses import dataclass

from py_permfs.errors import UserError
from py_permfs.permissions import FULL_ACCESS, validate_capabilities

ROOT_USER = "root"
ROOT_HOME = "/"


@dataclass(frozen=True)
class User:
    """An identity in the system.

    Frozen dataclass gives us immutability, ``__eq__`` based on all
    fields, and ``__hash__`` for free.
    """

    name: str
    permission: str
    home: str

    def __repr__(self) -> str:
        """Return a readable representation."""
        return f"User(name={self.name!r}, permission={self.permission!r}, home={self.home!r})"


class UserRegistry:
    """Registry of users keyed by name.

    Auto-creates root on initialisation.
    """

    def __init__(self) -> None:
        """Create a registry holding only the root user."""
        self._users: dict[str, User] = {
            ROOT_USER: User(name=ROOT_USER, permission=FULL_ACCESS, home=ROOT_HOME),
        }

    @property
    def root(self) -> User:
        """Return the administrative user."""
        return self._users[ROOT_USER]

    def __contains__(self, name: object) -> bool:
        """Return True if a user called *name* is registered."""
        return name in self._users

    def __len__(self) -> int:
        """Return the number of registered users."""
        return len(self._users)

    def add(self, user: User) -> None:
        """Register *user*.

        Raises:
            UserError: If the name is already taken.
            InvalidOperationError: If the capability string is malformed.

        """
        if user.name in self._users:
            msg = f"User '{user.name}' already exists"
            raise UserError(msg)
        validate_capabilities(user.permission)
        self._users[user.name] = user

    def remove(self, name: str) -> User:
        """Unregister and return the user called *name*.

        Raises:
            UserError: If the user is unknown or is root.

        """
        if name not in self._users:
            msg = f"User not found: {name}"
            raise UserError(msg)
        if name == ROOT_USER:
            msg = f"Cannot remove the {name} user"
            raise UserError(msg)
        return self._users.pop(name)

    def get(self, name: str) -> User | None:
        """Look up a user by name.

        Returns:
            The user, or None if not found.

        """
        return self._users.get(name)

    def list_users(self) -> list[User]:
        """Return all registered users sorted by name."""
        return [self._users[name] for name in sorted(self._users)]
