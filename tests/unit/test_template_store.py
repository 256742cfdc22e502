"""Tests for thumbcraft.api.template_store — JSON template persistence."""

from __future__ import annotations

import json

import pytest

from thumbcraft.api.template_store import (
    add_template,
    delete_template,
    find_template,
    load_templates,
    save_templates,
)


@pytest.fixture
def templates_path(temp_dir):
    return temp_dir / "data" / "templates.json"


class TestLoadTemplates:
    def test_missing_file_is_empty(self, templates_path):
        assert load_templates(templates_path) == []

    def test_corrupt_file_is_empty(self, templates_path):
        templates_path.parent.mkdir(parents=True)
        templates_path.write_text("{not json", encoding="utf-8")
        assert load_templates(templates_path) == []

    def test_non_list_is_empty(self, templates_path):
        templates_path.parent.mkdir(parents=True)
        templates_path.write_text('{"id": "x"}', encoding="utf-8")
        assert load_templates(templates_path) == []

    def test_invalid_entries_dropped(self, templates_path):
        save_templates(templates_path, [{"id": "a"}, "junk", {"name": "no id"}, {"id": ""}])
        assert load_templates(templates_path) == [{"id": "a"}]


class TestAddTemplate:
    def test_entry_shape(self, templates_path):
        entry = add_template(templates_path, "Bold", {"style": "cartoon"})
        assert entry["name"] == "Bold"
        assert entry["options"] == {"style": "cartoon"}
        assert entry["id"]
        assert entry["createdAt"].endswith("+00:00")

    def test_persisted_as_json(self, templates_path):
        entry = add_template(templates_path, "Bold", {})
        stored = json.loads(templates_path.read_text(encoding="utf-8"))
        assert stored == [entry]

    def test_newest_first(self, templates_path):
        first = add_template(templates_path, "first", {})
        second = add_template(templates_path, "second", {})
        assert [t["id"] for t in load_templates(templates_path)] == [second["id"], first["id"]]

    def test_unique_ids(self, templates_path):
        ids = {add_template(templates_path, f"t{i}", {})["id"] for i in range(5)}
        assert len(ids) == 5


class TestFindAndDelete:
    def test_find(self, templates_path):
        entry = add_template(templates_path, "Find me", {})
        assert find_template(templates_path, entry["id"]) == entry
        assert find_template(templates_path, "missing") is None

    def test_delete(self, templates_path):
        keep = add_template(templates_path, "keep", {})
        drop = add_template(templates_path, "drop", {})
        assert delete_template(templates_path, drop["id"]) is True
        assert load_templates(templates_path) == [keep]

    def test_delete_missing(self, templates_path):
        add_template(templates_path, "keep", {})
        assert delete_template(templates_path, "missing") is False
        assert len(load_templates(templates_path)) == 1
