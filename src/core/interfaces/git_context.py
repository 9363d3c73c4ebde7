"""Contract for reading the local git context.

Why Protocol:
- Structural contract (duck typing) without rigid inheritance.
- The identity resolver depends on this, so tests can pass a fake instead of
  a real repository.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class GitContextReader(Protocol):
    """Minimal read-only view of the current repository.

    Design rules:
    - Both calls are side-effect free.
    - Both raise `core.errors.GitContextError` instead of returning garbage.
    """

    def current_remote_url(self, remote_name: str) -> str:
        """Return the fetch URL configured for `remote_name`."""

        ...

    def current_branch(self) -> str:
        """Return the checked-out branch name."""

        ...
