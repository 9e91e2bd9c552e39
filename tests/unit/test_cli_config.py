#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Tests for CLI configuration loading."""

import argparse
import json

import pytest

from bb2html.cli.config import (
    build_conversion_settings,
    discover_config_file,
    find_config_in_parents,
    load_attachments_file,
    load_config_file,
    load_config_with_priority,
    load_smilies_file,
    merge_configs,
)


@pytest.fixture
def isolated(tmp_path, monkeypatch):
    """Run in an empty directory with an empty home directory."""
    home = tmp_path / "home"
    home.mkdir()
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("BB2HTML_CONFIG", raising=False)
    monkeypatch.chdir(work)
    return work


@pytest.mark.unit
@pytest.mark.cli
class TestLoadConfigFile:
    """Test reading the supported file formats."""

    def test_toml(self, tmp_path) -> None:
        """Test a TOML file."""
        path = tmp_path / "c.toml"
        path.write_text("[parser]\nautolink = false\n", encoding="utf-8")
        assert load_config_file(path) == {"parser": {"autolink": False}}

    def test_yaml(self, tmp_path) -> None:
        """Test a YAML file."""
        path = tmp_path / "c.yaml"
        path.write_text("renderer:\n  paragraphs: false\n", encoding="utf-8")
        assert load_config_file(str(path)) == {"renderer": {"paragraphs": False}}

    def test_json(self, tmp_path) -> None:
        """Test a JSON file."""
        path = tmp_path / "c.json"
        path.write_text(json.dumps({"sanitize_smilies": True}), encoding="utf-8")
        assert load_config_file(path) == {"sanitize_smilies": True}

    def test_empty_yaml(self, tmp_path) -> None:
        """Test that an empty YAML file is an empty configuration."""
        path = tmp_path / "c.yml"
        path.write_text("", encoding="utf-8")
        assert load_config_file(path) == {}

    def test_pyproject(self, tmp_path) -> None:
        """Test the [tool.bb2html] table."""
        path = tmp_path / "pyproject.toml"
        path.write_text('[project]\nname = "x"\n\n[tool.bb2html.parser]\npreserve_empty = true\n', encoding="utf-8")
        assert load_config_file(path) == {"parser": {"preserve_empty": True}}

    def test_pyproject_without_section(self, tmp_path) -> None:
        """Test a pyproject.toml without a bb2html table."""
        path = tmp_path / "pyproject.toml"
        path.write_text('[project]\nname = "x"\n', encoding="utf-8")
        assert load_config_file(path) == {}

    def test_missing_file(self, tmp_path) -> None:
        """Test a path that does not exist."""
        with pytest.raises(argparse.ArgumentTypeError, match="does not exist"):
            load_config_file(tmp_path / "nope.toml")

    def test_directory(self, tmp_path) -> None:
        """Test a path that is a directory."""
        with pytest.raises(argparse.ArgumentTypeError, match="not a file"):
            load_config_file(tmp_path)

    def test_unsupported_extension(self, tmp_path) -> None:
        """Test an unknown file format."""
        path = tmp_path / "c.ini"
        path.write_text("[parser]\n", encoding="utf-8")
        with pytest.raises(argparse.ArgumentTypeError, match="Unsupported file format"):
            load_config_file(path)

    @pytest.mark.parametrize(
        "name, content, message",
        [("c.toml", "[parser", "Invalid TOML"), ("c.yaml", "a: [", "Invalid YAML"), ("c.json", "{", "Invalid JSON")],
    )
    def test_invalid_syntax(self, tmp_path, name: str, content: str, message: str) -> None:
        """Test that parse errors are reported with the format."""
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        with pytest.raises(argparse.ArgumentTypeError, match=message):
            load_config_file(path)

    def test_non_mapping_root(self, tmp_path) -> None:
        """Test a file whose root is a list."""
        path = tmp_path / "c.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(argparse.ArgumentTypeError, match="mapping at root level"):
            load_config_file(path)


@pytest.mark.unit
@pytest.mark.cli
class TestDiscovery:
    """Test configuration file discovery."""

    def test_found_in_parent(self, isolated) -> None:
        """Test that a file in a parent directory is found."""
        config = isolated / ".bb2html.yaml"
        config.write_text("parser: {}\n", encoding="utf-8")
        nested = isolated / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config_in_parents(nested) == config.resolve()

    def test_pyproject_without_section_is_skipped(self, isolated) -> None:
        """Test that an unrelated pyproject.toml does not stop the search."""
        (isolated / "pyproject.toml").write_text('[project]\nname = "x"\n', encoding="utf-8")
        assert find_config_in_parents(isolated) is None

    def test_pyproject_with_section(self, isolated) -> None:
        """Test that a pyproject.toml with a bb2html table is found."""
        pyproject = isolated / "pyproject.toml"
        pyproject.write_text("[tool.bb2html]\nsanitize_smilies = true\n", encoding="utf-8")
        assert find_config_in_parents(isolated) == pyproject.resolve()

    def test_dedicated_file_wins(self, isolated) -> None:
        """Test that a dedicated file beats pyproject.toml in the same directory."""
        (isolated / "pyproject.toml").write_text("[tool.bb2html]\nsanitize_smilies = true\n", encoding="utf-8")
        dedicated = isolated / ".bb2html.toml"
        dedicated.write_text("", encoding="utf-8")
        assert find_config_in_parents(isolated) == dedicated.resolve()

    def test_home_fallback(self, isolated, tmp_path) -> None:
        """Test that the home directory is checked last."""
        home_config = tmp_path / "home" / ".bb2html.json"
        home_config.write_text("{}", encoding="utf-8")
        assert discover_config_file(isolated) == home_config

    def test_nothing_found(self, isolated) -> None:
        """Test that no configuration gives None."""
        assert discover_config_file(isolated) is None


@pytest.mark.unit
@pytest.mark.cli
class TestPriority:
    """Test which configuration source wins."""

    def test_explicit_beats_env(self, isolated) -> None:
        """Test that --config is preferred over the environment."""
        explicit = isolated / "explicit.json"
        explicit.write_text('{"sanitize_smilies": true}', encoding="utf-8")
        env = isolated / "env.json"
        env.write_text('{"sanitize_smilies": false}', encoding="utf-8")
        assert load_config_with_priority(str(explicit), str(env)) == {"sanitize_smilies": True}
        assert load_config_with_priority(None, str(env)) == {"sanitize_smilies": False}

    def test_discovered(self, isolated) -> None:
        """Test that a discovered file is used without explicit paths."""
        (isolated / ".bb2html.toml").write_text("[renderer]\nlink_rel = \"\"\n", encoding="utf-8")
        assert load_config_with_priority() == {"renderer": {"link_rel": ""}}

    def test_no_config(self, isolated) -> None:
        """Test the empty result."""
        assert load_config_with_priority() == {}

    def test_merge_configs(self) -> None:
        """Test that nested tables are merged."""
        merged = merge_configs(
            {"parser": {"autolink": False}, "sanitize_smilies": False},
            {"parser": {"preserve_empty": True}, "sanitize_smilies": True},
        )
        assert merged == {"parser": {"autolink": False, "preserve_empty": True}, "sanitize_smilies": True}


@pytest.mark.unit
@pytest.mark.cli
class TestBuildConversionSettings:
    """Test turning configuration into options."""

    def test_config_values(self) -> None:
        """Test that each section reaches its options class."""
        settings = build_conversion_settings(
            {"parser": {"max-nesting-depth": 10}, "renderer": {"pretty_print": True}, "smilies": {":)": "x"}}
        )
        assert settings.parser_options.max_nesting_depth == 10
        assert settings.renderer_options.pretty_print is True
        assert settings.smilies.replace(":)") == "x"

    def test_overrides(self) -> None:
        """Test that command line values win and None values are ignored."""
        settings = build_conversion_settings(
            {"parser": {"autolink": False, "preserve_empty": True}},
            parser_overrides={"autolink": True, "preserve_empty": None},
            renderer_overrides={"paragraphs": False},
        )
        assert settings.parser_options.autolink is True
        assert settings.parser_options.preserve_empty is True
        assert settings.renderer_options.paragraphs is False

    def test_unknown_section(self) -> None:
        """Test that unknown top-level keys are rejected."""
        with pytest.raises(argparse.ArgumentTypeError, match="Unknown configuration key\\(s\\): render"):
            build_conversion_settings({"render": {}})

    def test_unknown_option(self) -> None:
        """Test that unknown option names are rejected."""
        with pytest.raises(argparse.ArgumentTypeError, match="Invalid option"):
            build_conversion_settings({"parser": {"autolinks": True}})

    def test_invalid_value(self) -> None:
        """Test that option validation errors are reported."""
        with pytest.raises(argparse.ArgumentTypeError, match="max_nesting_depth"):
            build_conversion_settings({"parser": {"max_nesting_depth": 1}})

    def test_section_must_be_table(self) -> None:
        """Test a section that is not a mapping."""
        with pytest.raises(argparse.ArgumentTypeError, match="must be a table"):
            build_conversion_settings({"renderer": ["x"]})

    def test_sanitize_must_be_bool(self) -> None:
        """Test the sanitize_smilies type check."""
        with pytest.raises(argparse.ArgumentTypeError, match="boolean"):
            build_conversion_settings({"sanitize_smilies": "yes"})

    def test_sanitize_override(self) -> None:
        """Test that sanitization applies to configured smilies."""
        settings = build_conversion_settings(
            {"smilies": {":x": "<b>x</b>"}}, sanitize_smilies=True
        )
        assert settings.smilies.replace(":x") == "x"

    def test_smilies_file_overrides_config(self, tmp_path) -> None:
        """Test that a smiley file takes precedence over the [smilies] table."""
        path = tmp_path / "smilies.toml"
        path.write_text('":)" = "file"\n', encoding="utf-8")
        settings = build_conversion_settings({"smilies": {":)": "config", ":(": "sad"}}, smilies_path=str(path))
        assert settings.smilies.replace(":) :(") == "file sad"


@pytest.mark.unit
@pytest.mark.cli
class TestDataFiles:
    """Test smiley and attachment files."""

    def test_smilies_table_key(self, tmp_path) -> None:
        """Test a file with a top-level smilies table."""
        path = tmp_path / "s.yaml"
        path.write_text("smilies:\n  ':)': smile\n", encoding="utf-8")
        assert load_smilies_file(path) == {":)": "smile"}

    def test_smilies_must_be_strings(self, tmp_path) -> None:
        """Test that non-string replacements are rejected."""
        path = tmp_path / "s.json"
        path.write_text('{":)": 1}', encoding="utf-8")
        with pytest.raises(argparse.ArgumentTypeError, match="string to a string"):
            load_smilies_file(path)

    def test_attachments_list(self, tmp_path) -> None:
        """Test a list of attachment records."""
        path = tmp_path / "a.json"
        path.write_text(json.dumps([{"id": 7, "download_url": "/a/7", "width": 1, "height": 2}]), encoding="utf-8")
        views = load_attachments_file(path)
        assert views[7].dimensions == (1, 2)

    def test_attachments_mapping(self, tmp_path) -> None:
        """Test records keyed by id."""
        path = tmp_path / "a.yaml"
        path.write_text("attachments:\n  8:\n    download_url: /a/8\n", encoding="utf-8")
        assert load_attachments_file(path)[8].download_url == "/a/8"

    def test_attachment_without_url(self, tmp_path) -> None:
        """Test that records need a download URL."""
        path = tmp_path / "a.json"
        path.write_text('[{"id": 1}]', encoding="utf-8")
        with pytest.raises(argparse.ArgumentTypeError, match="Invalid attachment record"):
            load_attachments_file(path)

    def test_attachments_wrong_root(self, tmp_path) -> None:
        """Test a file that is neither a list nor a mapping."""
        path = tmp_path / "a.json"
        path.write_text('"x"', encoding="utf-8")
        with pytest.raises(argparse.ArgumentTypeError, match="list or a mapping"):
            load_attachments_file(path)
