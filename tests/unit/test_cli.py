#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Tests for the command-line interface."""

import io
import json
import logging

import pytest

from bb2html import __version__
from bb2html.cli import create_parser, main
from bb2html.constants import EXIT_ERROR, EXIT_FILE_ERROR, EXIT_SUCCESS, EXIT_VALIDATION_ERROR


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    """Run each test in an empty directory and restore logging afterwards."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("BB2HTML_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)

    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield tmp_path
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def post(tmp_path):
    """Write a small BBCode file."""
    path = tmp_path / "post.bbcode"
    path.write_text("[b]x[/b]", encoding="utf-8")
    return path


@pytest.mark.unit
@pytest.mark.cli
class TestArguments:
    """Test argument parsing."""

    def test_defaults(self) -> None:
        """Test default values of the flags."""
        args = create_parser().parse_args(["in.bbcode"])
        assert args.format == "html"
        assert args.autolink is None
        assert args.paragraphs is None
        assert args.log_level == "WARNING"

    def test_negative_flags(self) -> None:
        """Test flags that turn options off."""
        args = create_parser().parse_args(["in.bbcode", "--no-autolink", "--no-paragraphs"])
        assert args.autolink is False
        assert args.paragraphs is False

    def test_log_level_case(self) -> None:
        """Test that log levels are accepted in any case."""
        assert create_parser().parse_args(["x", "--log-level", "debug"]).log_level == "DEBUG"

    def test_version(self, capsys) -> None:
        """Test --version."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out


@pytest.mark.unit
@pytest.mark.cli
class TestConversion:
    """Test converting files."""

    def test_stdout(self, post, capsys) -> None:
        """Test that HTML goes to stdout with a trailing newline."""
        assert main([str(post)]) == EXIT_SUCCESS
        assert capsys.readouterr().out == "<p><b>x</b></p>\n"

    def test_out_file(self, post, tmp_path, capsys) -> None:
        """Test writing to a file in a new directory."""
        target = tmp_path / "out" / "post.html"
        assert main([str(post), "--out", str(target)]) == EXIT_SUCCESS
        assert target.read_text(encoding="utf-8") == "<p><b>x</b></p>"
        assert capsys.readouterr().out == ""

    def test_stdin(self, monkeypatch, capsys) -> None:
        """Test reading from stdin."""
        monkeypatch.setattr("sys.stdin", io.StringIO("[i]y[/i]"))
        assert main(["-"]) == EXIT_SUCCESS
        assert capsys.readouterr().out == "<p><i>y</i></p>\n"

    def test_flags(self, tmp_path, capsys) -> None:
        """Test parsing and rendering flags."""
        path = tmp_path / "flags.bbcode"
        path.write_text("https://a.com [color=x]y", encoding="utf-8")
        assert main([str(path), "--no-autolink", "--no-paragraphs", "--pretty"]) == EXIT_SUCCESS
        assert capsys.readouterr().out == "https://a.com y\n"

    def test_json_format(self, post, capsys) -> None:
        """Test the element tree as JSON."""
        assert main([str(post), "--format", "json"]) == EXIT_SUCCESS
        data = json.loads(capsys.readouterr().out)
        assert data["kind"] == "document"
        assert data["children"][0]["children"][0]["kind"] == "bold"

    def test_tree_format(self, post, capsys) -> None:
        """Test the text tree view."""
        assert main([str(post), "--format", "tree"]) == EXIT_SUCCESS
        out = capsys.readouterr().out
        assert "document" in out
        assert "bold" in out
        assert "'x'" in out

    def test_rich_without_terminal(self, post, capsys) -> None:
        """Test that --rich falls back to plain output when not on a terminal."""
        assert main([str(post), "--rich"]) == EXIT_SUCCESS
        assert capsys.readouterr().out == "<p><b>x</b></p>\n"

    def test_smilies_and_attachments(self, tmp_path, capsys) -> None:
        """Test smiley and attachment files."""
        path = tmp_path / "post.bbcode"
        path.write_text(":) [attach]7[/attach]", encoding="utf-8")
        smilies = tmp_path / "smilies.json"
        smilies.write_text(json.dumps({":)": "&#x1F642;"}), encoding="utf-8")
        attachments = tmp_path / "attachments.json"
        attachments.write_text(json.dumps([{"id": 7, "download_url": "/a/7"}]), encoding="utf-8")

        code = main([str(path), "--no-paragraphs", "--smilies", str(smilies), "--attachments", str(attachments)])
        assert code == EXIT_SUCCESS
        assert capsys.readouterr().out == '&#x1F642; <a class="bbcode attachment" href="/a/7">View attachment 7</a>\n'


@pytest.mark.unit
@pytest.mark.cli
class TestConfiguration:
    """Test configuration files on the command line."""

    def test_discovered_config(self, isolated, post, capsys) -> None:
        """Test that a configuration file in the working directory is used."""
        (isolated / ".bb2html.toml").write_text("[renderer]\nparagraphs = false\n", encoding="utf-8")
        assert main([str(post)]) == EXIT_SUCCESS
        assert capsys.readouterr().out == "<b>x</b>\n"

    def test_no_config(self, isolated, post, capsys) -> None:
        """Test that --no-config ignores discovered files."""
        (isolated / ".bb2html.toml").write_text("[renderer]\nparagraphs = false\n", encoding="utf-8")
        assert main([str(post), "--no-config"]) == EXIT_SUCCESS
        assert capsys.readouterr().out == "<p><b>x</b></p>\n"

    def test_env_config(self, isolated, post, monkeypatch, capsys) -> None:
        """Test the configuration environment variable."""
        config = isolated / "elsewhere.yaml"
        config.write_text("renderer:\n  paragraphs: false\n", encoding="utf-8")
        monkeypatch.setenv("BB2HTML_CONFIG", str(config))
        assert main([str(post)]) == EXIT_SUCCESS
        assert capsys.readouterr().out == "<b>x</b>\n"

    def test_explicit_config_with_no_config(self, isolated, post, capsys) -> None:
        """Test that --config still applies together with --no-config."""
        config = isolated / "explicit.json"
        config.write_text('{"renderer": {"paragraphs": false}}', encoding="utf-8")
        assert main([str(post), "--no-config", "--config", str(config)]) == EXIT_SUCCESS
        assert capsys.readouterr().out == "<b>x</b>\n"


@pytest.mark.unit
@pytest.mark.cli
class TestExitCodes:
    """Test error handling and exit codes."""

    def test_missing_input_argument(self, capsys) -> None:
        """Test running without an input."""
        assert main([]) == EXIT_VALIDATION_ERROR
        assert "Input file is required" in capsys.readouterr().err

    def test_missing_input_file(self, tmp_path, capsys) -> None:
        """Test an input file that does not exist."""
        assert main([str(tmp_path / "nope.bbcode")]) == EXIT_FILE_ERROR
        assert "Cannot read input" in capsys.readouterr().err

    def test_invalid_config(self, isolated, post, capsys) -> None:
        """Test a configuration file with an unknown option."""
        config = isolated / "bad.toml"
        config.write_text("[parser]\nnope = 1\n", encoding="utf-8")
        assert main([str(post), "--config", str(config)]) == EXIT_VALIDATION_ERROR
        assert "Invalid option" in capsys.readouterr().err

    def test_missing_attachments_file(self, post, tmp_path, capsys) -> None:
        """Test an attachments path that does not exist."""
        assert main([str(post), "--attachments", str(tmp_path / "nope.json")]) == EXIT_VALIDATION_ERROR
        assert "Attachments file does not exist" in capsys.readouterr().err

    def test_conversion_error(self, tmp_path, capsys) -> None:
        """Test that rendering errors exit with the general error code."""
        path = tmp_path / "post.bbcode"
        path.write_text("[attach]9[/attach]", encoding="utf-8")
        config = tmp_path / "strict.toml"
        config.write_text("[renderer]\nfail_on_resource_errors = true\n", encoding="utf-8")
        assert main([str(path), "--config", str(config)]) == EXIT_ERROR
        assert "No attachment data for id 9" in capsys.readouterr().err

    def test_unwritable_output(self, post, tmp_path, capsys) -> None:
        """Test an output path that cannot be written."""
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        assert main([str(post), "--out", str(blocker / "out.html")]) == EXIT_FILE_ERROR
        assert "Cannot write output" in capsys.readouterr().err
