# tests/test_task_template.py

from __future__ import annotations

from datetime import datetime

from gtd_sync.sync.scanner import marker_id
from gtd_sync.sync.sync_models import Marker
from gtd_sync.sync.task_template import (
    format_task_id,
    render_task,
    sanitize_file_name,
    task_file_name,
)
from gtd_sync.vault.filesystem import parse_frontmatter, split_frontmatter

NOW = datetime(2024, 3, 5, 7, 4, 9)


def test_task_id_has_minute_precision() -> None:
    assert format_task_id(NOW) == "202403050704"


def test_sanitize_strips_illegal_chars_and_collapses_whitespace() -> None:
    assert sanitize_file_name('a<b>c:d"e/f\\g|h?i*j') == "abcdefghij"
    assert sanitize_file_name("call   mom \t tonight") == "call_mom_tonight"


def test_sanitize_truncates_to_50() -> None:
    assert len(sanitize_file_name("x" * 80)) == 50


def test_task_file_name() -> None:
    assert task_file_name("202403050704", "buy milk") == "202403050704_buy_milk.md"


def test_render_task_front_matter_parses() -> None:
    marker = Marker(
        content="buy milk",
        source_file="Daily/2024-01-01.md",
        line_number=3,
        marker_id=marker_id("Daily/2024-01-01.md", 3, "buy milk"),
    )
    text = render_task("202403050704", marker, NOW)

    source, body = split_frontmatter(text)
    assert source is not None
    fm = parse_frontmatter(source)

    assert str(fm["ID"]) == "202403050704"
    assert fm["created"] == "2024-03-05 07:04"
    assert fm["title"] == "buy milk"
    assert fm["task status"] == "not_yet"
    assert fm["task kind"] is None
    assert fm["scheduled date"] is None
    assert fm["created_from"] == "todo"
    assert fm["source_file"] == "[[Daily/2024-01-01.md]]"
    assert fm["source_line"] == 3
    assert str(fm["todo_id"]) == marker.marker_id

    assert "- Created at: 2024-03-05 07:04:09" in body
    assert body.rstrip().endswith("buy milk")


def test_render_task_keeps_key_order() -> None:
    marker = Marker(content="t", source_file="n.md", line_number=0, marker_id="abc")
    keys = [line.split(":", 1)[0] for line in render_task("1", marker, NOW).split("\n")[1:14]]
    assert keys == [
        "ID",
        "created",
        "title",
        "aliases",
        "deadline",
        "scheduled date",
        "project",
        "task kind",
        "task status",
        "created_from",
        "source_file",
        "source_line",
        "todo_id",
    ]
