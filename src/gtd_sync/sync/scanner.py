# src/gtd_sync/sync/scanner.py

"""
Marker scanner.

Finds `- [ ] #TODO <text>` lines in notes and gives each one a stable id derived
from (file, line, text). Scanning has no side effects and does not deduplicate:
the same marker is found again on every pass, the Sync Store decides what is new.
"""

from __future__ import annotations

import logging
import re
from collections.abc import AsyncIterator, Iterable

from ..core.ports import VaultPort
from .sync_models import Marker

logger = logging.getLogger(__name__)

MARKER_RE = re.compile(r"^- \[ \] #TODO (.+)$")
UNCHECKED_MARKER = "- [ ] #TODO"
UNCHECKED_BOX = "- [ ]"
CHECKED_BOX = "- [x]"

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_base36(n: int) -> str:
    if n == 0:
        return "0"
    digits = []
    while n:
        n, rem = divmod(n, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def _utf16_units(s: str) -> Iterable[int]:
    data = s.encode("utf-16-le", "surrogatepass")
    for i in range(0, len(data), 2):
        yield data[i] | (data[i + 1] << 8)


def string_hash(s: str) -> int:
    """32-bit signed rolling hash (h * 31 + c) over UTF-16 code units."""
    h = 0
    for unit in _utf16_units(s):
        h = ((h << 5) - h + unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return h


def marker_id(source_file: str, line_number: int, content: str) -> str:
    """Stable id of a marker; ids already persisted in sync state depend on this exact formula."""
    return _to_base36(abs(string_hash(f"{source_file}:{line_number}:{content}")))


def in_scope(path: str, scopes: list[str]) -> bool:
    """An empty scope list, or a "" scope, means "everything"."""
    if not scopes:
        return True
    for scope in scopes:
        if scope == "":
            return True
        if path == scope or path.startswith(scope + "/"):
            return True
    return False


def filter_by_scopes(paths: Iterable[str], scopes: list[str]) -> list[str]:
    return [p for p in paths if in_scope(p, scopes)]


def split_lines(text: str) -> list[str]:
    # Only "\n": line offsets must agree with the checkbox rewrite.
    return text.split("\n")


def find_markers(source_file: str, text: str) -> list[Marker]:
    out: list[Marker] = []
    for i, line in enumerate(split_lines(text)):
        m = MARKER_RE.match(line.removesuffix("\r"))
        if not m:
            continue
        content = m.group(1)
        out.append(
            Marker(
                content=content,
                source_file=source_file,
                line_number=i,
                marker_id=marker_id(source_file, i, content),
            )
        )
    return out


async def scan_vault(vault: VaultPort, scopes: list[str]) -> AsyncIterator[Marker]:
    """
    Yield markers from every in-scope note, in note order then line order.

    A note that cannot be read is logged and skipped.
    """
    paths = filter_by_scopes(await vault.list_markdown_files(), scopes)
    for path in paths:
        try:
            text = await vault.read(path)
        except Exception:
            logger.exception("Failed to read %s while scanning for #TODO", path)
            continue
        for marker in find_markers(path, text):
            yield marker
