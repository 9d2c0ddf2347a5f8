# src/gtd_sync/vault/filesystem.py

"""
VaultPort over a plain directory of markdown notes.

Paths handed in and out are vault-relative and "/"-separated, like note paths
inside the vault app. Dot-directories (.obsidian, .trash, ...) are not notes.
"""

from __future__ import annotations

import copy
import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml

from ..core.ports import FrontMatter, FrontMatterEdit

logger = logging.getLogger(__name__)

FM_DELIMITER = "---"

# `key:` at column 0, plain or quoted
_KEY_RE = re.compile(
    r"""^(?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)'|(?P<plain>[^\s#'"\-][^:]*?))[ \t]*:(?:[ \t]|\r?$)"""
)


class _FrontMatterDumper(yaml.SafeDumper):
    """SafeDumper that writes None as an empty value (`deadline:`), not `null`."""


def _represent_none(dumper: yaml.SafeDumper, _data: None) -> yaml.Node:
    return dumper.represent_scalar("tag:yaml.org,2002:null", "")


_FrontMatterDumper.add_representer(type(None), _represent_none)


def _block_end(lines: list[str]) -> int | None:
    """Index of the closing `---` line, or None when the note has no front-matter block."""
    if not lines or lines[0].rstrip("\r") != FM_DELIMITER:
        return None
    for i in range(1, len(lines)):
        if lines[i].rstrip("\r") == FM_DELIMITER:
            return i
    return None


def split_frontmatter(text: str) -> tuple[str | None, str]:
    """Return (front-matter source, body). Source is None when the note has no block."""
    lines = text.split("\n")
    end = _block_end(lines)
    if end is None:
        return None, text
    return "\n".join(lines[1:end]), "\n".join(lines[end + 1:])


def parse_frontmatter(source: str) -> FrontMatter:
    data = yaml.safe_load(source) if source.strip() else None
    return data if isinstance(data, dict) else {}


def dump_frontmatter(fm: dict[str, Any]) -> str:
    if not fm:
        return ""
    return yaml.dump(
        fm,
        Dumper=_FrontMatterDumper,
        default_flow_style=False,
        allow_unicode=True,
        sort_keys=False,
    )


def _dump_lines(fm: dict[str, Any], eol: str) -> list[str]:
    if not fm:
        return []
    return [line + eol for line in dump_frontmatter(fm).rstrip("\n").split("\n")]


# ---- in-place front-matter edits ----


def _line_key(line: str) -> str | None:
    m = _KEY_RE.match(line)
    if m is None:
        return None
    return next(g for g in (m.group("dq"), m.group("sq"), m.group("plain")) if g is not None)


def _is_continuation(line: str) -> bool:
    # nested values, block sequences at column 0, blank lines
    return not line.strip() or line[0].isspace() or line.startswith("- ") or line.rstrip("\r") == "-"


def _key_spans(lines: list[str]) -> dict[str, tuple[int, int]] | None:
    """Top-level key -> [start, end) line span. None if a key repeats."""
    spans: dict[str, tuple[int, int]] = {}
    i = 0
    while i < len(lines):
        key = _line_key(lines[i])
        if key is None:
            i += 1
            continue
        end = i + 1
        while end < len(lines) and _is_continuation(lines[end]):
            end += 1
        while end > i + 1 and not lines[end - 1].strip():
            end -= 1
        if key in spans:
            return None
        spans[key] = (i, end)
        i = end
    return spans


def _patch_lines(lines: list[str], before: FrontMatter, after: FrontMatter, eol: str) -> list[str] | None:
    """
    Rewrite only the fields that differ between `before` and `after`.
    None when a changed field cannot be located in the source lines.
    """
    spans = _key_spans(lines)
    if spans is None:
        return None

    edits: list[tuple[int, int, list[str]]] = []
    appended: list[str] = []
    for key in [*before, *(k for k in after if k not in before)]:
        if key in before and key in after and before[key] == after[key]:
            continue
        span = spans.get(str(key))
        if span is None:
            if key in before:
                return None
            appended += _dump_lines({key: after[key]}, eol)
            continue
        start, end = span
        line_eol = "\r" if lines[start].endswith("\r") else ""
        edits.append((start, end, _dump_lines({key: after[key]}, line_eol) if key in after else []))

    out = list(lines)
    for start, end, new in sorted(edits, reverse=True):
        out[start:end] = new
    return out + appended


def edit_frontmatter(text: str, fn: FrontMatterEdit) -> str | None:
    """
    Apply fn to the parsed front-matter of `text`. Returns the new note text,
    or None when fn changed nothing.

    Lines of fields fn did not touch are kept byte-for-byte, so values YAML would
    reinterpret (`title: yes`, `title: null`) and their quoting survive the edit.
    Invalid YAML propagates as yaml.YAMLError.
    """
    lines = text.split("\n")
    end = _block_end(lines)
    source_lines = lines[1:end] if end is not None else []
    fm = parse_frontmatter("\n".join(source_lines))
    before = copy.deepcopy(fm)
    fn(fm)
    if fm == before:
        return None

    if end is None:
        body = text if not text or text.startswith("\n") else "\n" + text
        return f"{FM_DELIMITER}\n{dump_frontmatter(fm)}{FM_DELIMITER}\n{body}"

    eol = "\r" if lines[0].endswith("\r") else ""
    patched = _patch_lines(source_lines, before, fm, eol)
    if patched is None:
        logger.debug("Front-matter fields not located line by line; rewriting the block")
        patched = _dump_lines(fm, eol)
    return "\n".join([lines[0], *patched, *lines[end:]])


class FileSystemVault:
    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).expanduser().resolve()

    def _abs(self, path: str) -> Path:
        target = (self.root / path).resolve()
        if target != self.root and self.root not in target.parents:
            raise ValueError(f"Path escapes the vault: {path!r}")
        return target

    def _rel(self, path: Path) -> str:
        return path.relative_to(self.root).as_posix()

    async def list_markdown_files(self) -> list[str]:
        out: list[str] = []
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
            for name in sorted(filenames):
                if name.endswith(".md"):
                    out.append(self._rel(Path(dirpath) / name))
        return out

    async def exists(self, path: str) -> bool:
        return self._abs(path).exists()

    async def read(self, path: str) -> str:
        with open(self._abs(path), encoding="utf-8", newline="") as f:
            return f.read()

    async def modify(self, path: str, text: str) -> None:
        target = self._abs(path)
        if not target.is_file():
            raise FileNotFoundError(path)
        tmp = target.with_name(f".{target.name}.tmp")
        with open(tmp, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        os.replace(tmp, target)

    async def create(self, path: str, text: str) -> None:
        target = self._abs(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        # "x" mode: refuse to clobber an existing note
        with open(target, "x", encoding="utf-8", newline="") as f:
            f.write(text)
        logger.debug("Note created -> %s", path)

    async def delete(self, path: str) -> None:
        self._abs(path).unlink()
        logger.debug("Note deleted -> %s", path)

    async def create_folder(self, path: str) -> None:
        self._abs(path).mkdir(parents=True, exist_ok=True)

    async def get_frontmatter(self, path: str) -> FrontMatter:
        source, _body = split_frontmatter(await self.read(path))
        if source is None:
            return {}
        try:
            return parse_frontmatter(source)
        except yaml.YAMLError:
            logger.warning("Unparsable front-matter in %s", path)
            return {}

    async def process_frontmatter(self, path: str, fn: FrontMatterEdit) -> None:
        """Edit the front-matter in place via fn; only changed fields are rewritten."""
        text = edit_frontmatter(await self.read(path), fn)
        if text is not None:
            await self.modify(path, text)
