#!/usr/bin/env python3
"""
Tests for parsers/store_file.py.

Covers:
- parse_line: full records, defaults, degraded lines, malformed payloads
- format_line: omitted defaults, key order
- parse_content: line endings, repeated ids
- read_file / write_file: missing files, sorting, round-trip, encoding edges
"""

import json
from pathlib import Path

import pytest

from tasktrack.errors import MalformedRecordError, StoreIOError
from tasktrack.models.task import IdSource, Task
from tasktrack.parsers.store_file import (
    format_content,
    format_line,
    parse_content,
    parse_line,
    read_file,
    write_file,
)
from tasktrack.utils.ids import derive_task_id


def _payload(line: str) -> dict:
    return json.loads(line.split("|", 1)[1])


# ---------------------------------------------------------------------------
# parse_line
# ---------------------------------------------------------------------------

class TestParseLine:
    def test_full_record(self):
        line = ('Buy milk | {"id": "abc123", "parent_id": "def456", "show_full_id": true, '
                '"timestamp": 12.5, "tags": ["home", "errand"], "completed": true}')
        task = parse_line(line)
        assert task.id == "abc123"
        assert task.description == "Buy milk"
        assert task.parent_id == "def456"
        assert task.id_source is IdSource.USER
        assert task.timestamp == 12.5
        assert task.tags == ["home", "errand"]
        assert task.completed is True

    def test_missing_fields_default(self):
        task = parse_line('Buy milk | {"id": "abc123"}')
        assert task.parent_id is None
        assert task.tags == []
        assert task.id_source is IdSource.DERIVED
        assert task.timestamp == 0.0
        assert task.completed is False

    def test_description_is_stripped(self):
        task = parse_line('   Buy milk    | {"id": "a"}')
        assert task.description == "Buy milk"

    def test_splits_on_first_separator_only(self):
        task = parse_line('Buy milk | {"id": "a", "tags": ["x|y"]}')
        assert task.tags == ["x|y"]

    def test_duplicate_tags_collapse(self):
        task = parse_line('x | {"id": "a", "tags": ["home", "home"]}')
        assert task.tags == ["home"]

    def test_unknown_keys_ignored(self):
        task = parse_line('x | {"id": "a", "desc": "ignored", "priority": 3}')
        assert task.description == "x"

    def test_bare_description(self):
        task = parse_line("Buy milk")
        assert task.description == "Buy milk"
        assert task.timestamp == 0.0
        assert task.id == derive_task_id("Buy milk", 0.0)
        assert task.id_source is IdSource.DERIVED

    def test_empty_payload_is_bare(self):
        task = parse_line("Buy milk |   ")
        assert task.id == derive_task_id("Buy milk", 0.0)

    def test_bad_json(self):
        with pytest.raises(MalformedRecordError) as exc:
            parse_line('Buy milk | {"id": ', line_number=7)
        assert exc.value.line_number == 7
        assert "line 7" in str(exc.value)

    def test_missing_id(self):
        with pytest.raises(MalformedRecordError):
            parse_line('Buy milk | {"timestamp": 1.0}')

    def test_not_an_object(self):
        with pytest.raises(MalformedRecordError):
            parse_line('Buy milk | ["abc"]')


# ---------------------------------------------------------------------------
# format_line
# ---------------------------------------------------------------------------

class TestFormatLine:
    def test_minimal(self):
        line = format_line(Task(id="abc", description="Buy milk", timestamp=3.5))
        assert line.startswith("Buy milk | ")
        assert _payload(line) == {"id": "abc", "timestamp": 3.5}

    def test_defaults_omitted(self):
        payload = _payload(format_line(Task(id="abc", description="x")))
        assert payload == {"id": "abc"}

    def test_all_fields(self):
        task = Task(id="abc", description="x", id_source=IdSource.USER, parent_id="p",
                    timestamp=1.5, tags=["a"], completed=True)
        payload = _payload(format_line(task))
        assert list(payload) == ["id", "parent_id", "show_full_id", "timestamp", "tags", "completed"]
        assert payload["show_full_id"] is True

    def test_description_not_in_payload(self):
        payload = _payload(format_line(Task(id="abc", description="secret words")))
        assert "secret words" not in json.dumps(payload)

    def test_parses_back(self):
        task = Task(id="abc", description="Buy milk", parent_id="p", timestamp=1700000000.123456,
                    tags=["home"], completed=True)
        assert parse_line(format_line(task)) == task


# ---------------------------------------------------------------------------
# Whole files
# ---------------------------------------------------------------------------

class TestContent:
    def test_skips_blank_lines(self):
        tasks = parse_content('a | {"id": "1"}\n\n   \nb | {"id": "2"}\n')
        assert [t.id for t in tasks] == ["1", "2"]

    def test_error_reports_line_number(self):
        with pytest.raises(MalformedRecordError) as exc:
            parse_content('a | {"id": "1"}\n\nb | nope\n')
        assert exc.value.line_number == 3

    def test_format_sorts_by_id(self):
        content = format_content([
            Task(id="c", description="third"),
            Task(id="a", description="first"),
            Task(id="b", description="second"),
        ])
        assert [line.split(" |")[0] for line in content.splitlines()] == ["first", "second", "third"]
        assert content.endswith("\n")

    def test_empty(self):
        assert parse_content("") == []
        assert format_content([]) == ""

    def test_unicode_separators_inside_json(self):
        content = 'a | {"id": "x\u0085y", "tags": ["a\u2028b", "c\u2029d"]}\n'
        tasks = parse_content(content)
        assert len(tasks) == 1
        assert tasks[0].id == "x\u0085y"
        assert tasks[0].tags == ["a\u2028b", "c\u2029d"]

    def test_crlf_line_endings(self):
        tasks = parse_content('a | {"id": "1"}\r\nb | {"id": "2"}\r\n')
        assert [t.id for t in tasks] == ["1", "2"]
        assert tasks[0].description == "a"

    def test_repeated_bare_lines_keep_distinct_ids(self):
        tasks = parse_content("buy milk\nbuy milk\n")
        assert [t.description for t in tasks] == ["buy milk", "buy milk"]
        assert tasks[0].id == derive_task_id("buy milk", 0.0)
        assert tasks[1].id == derive_task_id("buy milk", 2.0)
        assert tasks[1].timestamp == 0.0

    def test_bare_line_yields_to_full_record(self):
        derived = derive_task_id("buy milk", 0.0)
        tasks = parse_content(f'buy milk\nbuy milk | {{"id": "{derived}", "tags": ["x"]}}\n')
        assert tasks[1].id == derived
        assert tasks[1].tags == ["x"]
        assert tasks[0].id != derived

    def test_repeated_full_record_id(self):
        with pytest.raises(MalformedRecordError) as exc:
            parse_content('a | {"id": "1"}\nb | {"id": "1"}\n')
        assert exc.value.line_number == 2


class TestFiles:
    def test_missing_file_is_empty(self, tmp_path):
        assert read_file(tmp_path / "nope.tasks") == []

    def test_write_then_read(self, tmp_path):
        path = tmp_path / "sub" / "dir" / ".tasks"
        tasks = [
            Task(id="b2", description="child", parent_id="a1", timestamp=2.0),
            Task(id="a1", description="parent", timestamp=1.0, tags=["x"]),
        ]
        write_file(path, tasks)
        loaded = read_file(path)
        assert [t.id for t in loaded] == ["a1", "b2"]
        assert {t.id: t for t in loaded} == {t.id: t for t in tasks}

    def test_write_truncates(self, tmp_path):
        path = tmp_path / ".tasks"
        write_file(path, [Task(id="a", description="a"), Task(id="b", description="b")])
        write_file(path, [Task(id="c", description="c")])
        assert len(path.read_text(encoding="utf-8").splitlines()) == 1

    def test_write_failure(self, tmp_path):
        # a directory where the file should be
        path = tmp_path / ".tasks"
        path.mkdir()
        with pytest.raises(StoreIOError):
            write_file(path, [Task(id="a", description="a")])

    def test_read_failure(self, tmp_path):
        path = tmp_path / ".tasks"
        path.mkdir()
        with pytest.raises(StoreIOError):
            read_file(path)

    def test_unicode(self, tmp_path):
        path = tmp_path / ".tasks"
        write_file(path, [Task(id="a", description="café ☕", tags=["日本"])])
        assert read_file(path)[0].description == "café ☕"
        assert read_file(path)[0].tags == ["日本"]

    def test_line_separators_and_control_characters(self, tmp_path):
        path = tmp_path / ".tasks"
        tasks = [
            Task(id="x\u0085y", description="pay\x1fbill", id_source=IdSource.USER,
                 tags=["a\u2028b", "c\u2029d", "e\x0bf"]),
            Task(id="kid", description="child", parent_id="x\u0085y", timestamp=1.0),
        ]
        write_file(path, tasks)
        assert path.read_text(encoding="utf-8").count("\n") == 2
        assert {t.id: t for t in read_file(path)} == {t.id: t for t in tasks}

    def test_not_utf8(self, tmp_path):
        path = tmp_path / ".tasks"
        path.write_bytes(b'ok | {"id": "a"}\n\xff\xfe bad\n')
        with pytest.raises(StoreIOError) as exc:
            read_file(path)
        assert "UTF-8" in str(exc.value)
