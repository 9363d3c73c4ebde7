"""Contract for the repository URL -> project id table."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ProjectLookup(Protocol):
    def lookup(self, url: str) -> int | None:
        """Return the id stored for exactly `url`, or None."""

        ...
