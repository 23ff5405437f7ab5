# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for YAML loader utilities."""

from pathlib import Path

import pytest

from src.core.config.yaml_loader import YAMLLoadError, deep_merge, load_yaml


class TestLoadYaml:
    """Tests for load_yaml function."""

    def test_load_vocabulary_shaped_file(self, tmp_path: Path) -> None:
        """Test loading nested mappings and lists with non-ASCII text."""
        yaml_file = tmp_path / "wellbeing.yaml"
        yaml_file.write_text(
            "moods:\n"
            "  tags: [happy, sad]\n"
            "  negative: [sad]\n"
            "risk:\n"
            "  danger_keywords:\n"
            "    - muốn chết\n",
            encoding="utf-8",
        )

        result = load_yaml(yaml_file)

        assert result["moods"] == {"tags": ["happy", "sad"], "negative": ["sad"]}
        assert result["risk"]["danger_keywords"] == ["muốn chết"]

    def test_load_empty_yaml_file_returns_empty_dict(self, tmp_path: Path) -> None:
        """Test that empty YAML files return empty dict."""
        yaml_file = tmp_path / "empty.yaml"
        yaml_file.write_text("# only a comment\n")

        assert load_yaml(yaml_file) == {}

    def test_load_yaml_with_list_root_raises_error(self, tmp_path: Path) -> None:
        """Test that YAML files with list root raise error."""
        yaml_file = tmp_path / "list.yaml"
        yaml_file.write_text("- happy\n- sad\n")

        with pytest.raises(YAMLLoadError) as exc_info:
            load_yaml(yaml_file)

        assert "YAML root must be a mapping" in str(exc_info.value)

    def test_load_nonexistent_file_raises_error(self, tmp_path: Path) -> None:
        """Test that loading non-existent file raises error."""
        with pytest.raises(YAMLLoadError) as exc_info:
            load_yaml(tmp_path / "missing.yaml")

        assert "File does not exist" in str(exc_info.value)

    def test_load_directory_instead_of_file_raises_error(self, tmp_path: Path) -> None:
        """Test that loading a directory raises error."""
        with pytest.raises(YAMLLoadError) as exc_info:
            load_yaml(tmp_path)

        assert "Path is not a file" in str(exc_info.value)

    def test_load_invalid_yaml_syntax_raises_error(self, tmp_path: Path) -> None:
        """Test that invalid YAML syntax raises error."""
        yaml_file = tmp_path / "invalid.yaml"
        yaml_file.write_text("moods:\n  tags: [happy\n")

        with pytest.raises(YAMLLoadError) as exc_info:
            load_yaml(yaml_file)

        assert "Invalid YAML syntax" in str(exc_info.value)
        assert exc_info.value.path == yaml_file


class TestDeepMerge:
    """Tests for deep_merge function."""

    def test_nested_sections_are_merged(self) -> None:
        """Test that overriding one key keeps its siblings."""
        base = {"moods": {"tags": ["happy", "sad"], "negative": ["sad"]}}
        override = {"moods": {"negative": []}}

        result = deep_merge(base, override)

        assert result == {"moods": {"tags": ["happy", "sad"], "negative": []}}

    def test_lists_are_replaced_not_concatenated(self) -> None:
        """Test that a keyword list override replaces the default list."""
        base = {"risk": {"danger_keywords": ["a", "b"]}}
        override = {"risk": {"danger_keywords": ["c"]}}

        assert deep_merge(base, override)["risk"]["danger_keywords"] == ["c"]

    def test_scalar_replaces_mapping(self) -> None:
        """Test that a non-dict override replaces a dict."""
        assert deep_merge({"risk": {"x": 1}}, {"risk": None}) == {"risk": None}

    def test_inputs_are_not_modified(self) -> None:
        """Test that neither input is mutated."""
        base = {"moods": {"tags": ["happy"]}}
        override = {"moods": {"negative": ["sad"]}}

        deep_merge(base, override)

        assert base == {"moods": {"tags": ["happy"]}}
        assert override == {"moods": {"negative": ["sad"]}}
