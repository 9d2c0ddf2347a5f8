# src/gtd_sync/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The reconciliation engine depends on these Protocols instead of a concrete vault.
This keeps the storage backend swappable and lets tests run against an in-memory fake.

Paths are vault-relative, "/"-separated strings (e.g. "Daily/2024-01-01.md").
"""

from typing import Any, Awaitable, Callable, Protocol

FrontMatter = dict[str, Any]
FrontMatterEdit = Callable[[FrontMatter], None]


class VaultPort(Protocol):
    """File storage + front-matter index of a note vault."""

    def list_markdown_files(self) -> Awaitable[list[str]]: ...

    def exists(self, path: str) -> Awaitable[bool]: ...

    def read(self, path: str) -> Awaitable[str]: ...

    def modify(self, path: str, text: str) -> Awaitable[None]: ...

    def create(self, path: str, text: str) -> Awaitable[None]:
        """Create a new file. Raises FileExistsError if one is already there."""
        ...

    def delete(self, path: str) -> Awaitable[None]: ...

    def create_folder(self, path: str) -> Awaitable[None]: ...

    def get_frontmatter(self, path: str) -> Awaitable[FrontMatter]:
        """Parsed front-matter of a note ({} when the note has none)."""
        ...

    def process_frontmatter(self, path: str, fn: FrontMatterEdit) -> Awaitable[None]:
        """Apply `fn` to the note's front-matter mapping and write it back in place."""
        ...
