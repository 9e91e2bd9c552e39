#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/bb2html/cli/config.py
"""Configuration file discovery and loading for the bb2html CLI.

A configuration file holds up to four top-level entries::

    sanitize_smilies = false

    [parser]
    blank_line_paragraphs = true

    [renderer]
    link_rel = "nofollow noopener"

    [smilies]
    ":)" = '<img class="smiley" src="/smilies/smile.png" alt=":)" />'

Files may be TOML, YAML or JSON, or a ``[tool.bb2html]`` table inside
``pyproject.toml``. Every problem with a configuration file is reported
as ``argparse.ArgumentTypeError`` so the CLI can map it to one exit code.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[import-not-found,unused-ignore]
from typing import Any, Dict, Mapping, Optional

import yaml

from bb2html.options.bbcode import BBCodeParserOptions
from bb2html.options.html import HtmlRendererOptions
from bb2html.utils.attachments import AttachmentView, load_attachment_views
from bb2html.utils.smilies import SmileyTable

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "BB2HTML_CONFIG"
DEDICATED_CONFIG_FILENAMES = [".bb2html.toml", ".bb2html.yaml", ".bb2html.yml", ".bb2html.json"]
CONFIG_FILENAMES = DEDICATED_CONFIG_FILENAMES + ["pyproject.toml"]
CONFIG_SECTIONS = frozenset({"parser", "renderer", "smilies", "sanitize_smilies"})


@dataclass(frozen=True)
class ConversionSettings:
    """Resolved options for one CLI run."""

    parser_options: BBCodeParserOptions
    renderer_options: HtmlRendererOptions
    smilies: SmileyTable


def _load_pyproject_section(pyproject_path: Path) -> Dict[str, Any]:
    """Load the ``[tool.bb2html]`` table from a pyproject.toml file.

    Returns an empty dict when the table is absent.

    Raises
    ------
    argparse.ArgumentTypeError
        If the file cannot be parsed or the entry is not a table

    """
    try:
        with open(pyproject_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise argparse.ArgumentTypeError(f"Invalid TOML in pyproject.toml {pyproject_path}: {e}") from e
    except OSError as e:
        raise argparse.ArgumentTypeError(f"Error reading pyproject.toml {pyproject_path}: {e}") from e

    config = data.get("tool", {}).get("bb2html")
    if config is None:
        return {}
    if not isinstance(config, dict):
        raise argparse.ArgumentTypeError(
            f"[tool.bb2html] section in {pyproject_path} must be a table, got {type(config).__name__}"
        )
    return config


def find_config_in_parents(start_dir: Optional[Path] = None) -> Optional[Path]:
    """Find a configuration file in ``start_dir`` or any of its parents.

    Each directory is checked for ``.bb2html.toml``, ``.bb2html.yaml``,
    ``.bb2html.yml`` and ``.bb2html.json``, then for a ``pyproject.toml``
    that has a ``[tool.bb2html]`` table.

    Parameters
    ----------
    start_dir : Path, optional
        Starting directory for search, defaults to current working directory

    Returns
    -------
    Path or None
        Path to first config file found, or None if not found

    """
    current = (start_dir or Path.cwd()).resolve()

    while True:
        for filename in DEDICATED_CONFIG_FILENAMES:
            config_path = current / filename
            if config_path.is_file():
                return config_path

        pyproject_path = current / "pyproject.toml"
        if pyproject_path.is_file():
            try:
                if _load_pyproject_section(pyproject_path):
                    return pyproject_path
            except argparse.ArgumentTypeError as e:
                logger.debug("Skipping unreadable %s: %s", pyproject_path, e)

        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def discover_config_file(start_dir: Optional[Path] = None) -> Optional[Path]:
    """Discover a configuration file in the standard locations.

    Parent directories are searched first, from ``start_dir`` (or the
    current directory) up to the filesystem root. The home directory's
    dedicated config files are the fallback.

    Returns
    -------
    Path or None
        Path to discovered config file, or None if not found

    """
    config_in_parents = find_config_in_parents(start_dir)
    if config_in_parents:
        return config_in_parents

    home = Path.home()
    for filename in DEDICATED_CONFIG_FILENAMES:
        config_path = home / filename
        if config_path.is_file():
            return config_path

    return None


def _load_structured_file(path: Path) -> Any:
    """Parse a TOML, YAML or JSON file chosen by its extension."""
    ext = path.suffix.lower()
    try:
        if ext == ".toml":
            with open(path, "rb") as f:
                return tomllib.load(f)
        if ext in (".yaml", ".yml"):
            with open(path, "r", encoding="utf-8") as f:
                return yaml.safe_load(f)
        if ext == ".json":
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
    except tomllib.TOMLDecodeError as e:
        raise argparse.ArgumentTypeError(f"Invalid TOML in {path}: {e}") from e
    except yaml.YAMLError as e:
        raise argparse.ArgumentTypeError(f"Invalid YAML in {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise argparse.ArgumentTypeError(f"Invalid JSON in {path}: {e}") from e
    except OSError as e:
        raise argparse.ArgumentTypeError(f"Error reading {path}: {e}") from e
    raise argparse.ArgumentTypeError(f"Unsupported file format: {ext or path.name}. Use .toml, .yaml or .json")


def _require_file(path: Path | str, what: str) -> Path:
    path = Path(path)
    if not path.exists():
        raise argparse.ArgumentTypeError(f"{what} does not exist: {path}")
    if not path.is_file():
        raise argparse.ArgumentTypeError(f"{what} is not a file: {path}")
    return path


def load_config_file(config_path: Path | str) -> Dict[str, Any]:
    """Load configuration from a TOML, YAML, JSON or pyproject.toml file.

    Parameters
    ----------
    config_path : Path or str
        Path to the configuration file

    Returns
    -------
    dict
        Configuration dictionary loaded from file

    Raises
    ------
    argparse.ArgumentTypeError
        If the file cannot be read, parsed, or has invalid format

    Examples
    --------
    >>> config = load_config_file(".bb2html.toml")
    >>> config.get("parser", {}).get("autolink")
    False

    """
    config_path = _require_file(config_path, "Configuration file")
    if config_path.name.lower() == "pyproject.toml":
        return _load_pyproject_section(config_path)

    config = _load_structured_file(config_path)
    if config is None:
        return {}
    if not isinstance(config, dict):
        raise argparse.ArgumentTypeError(
            f"Config file {config_path} must contain a mapping at root level, got {type(config).__name__}"
        )
    return config


def merge_configs(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge two configuration dictionaries, recursing into nested tables.

    Examples
    --------
    >>> merge_configs({"parser": {"autolink": False}}, {"parser": {"preserve_empty": True}})
    {'parser': {'autolink': False, 'preserve_empty': True}}

    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value
    return result


def load_config_with_priority(
    explicit_path: Optional[str] = None, env_var_path: Optional[str] = None
) -> Dict[str, Any]:
    """Load configuration with proper priority handling.

    Priority order (highest to lowest):

    1. Explicit config file path (``--config``)
    2. Path from the ``BB2HTML_CONFIG`` environment variable
    3. Auto-discovered config file

    Returns
    -------
    dict
        Loaded configuration dictionary (empty dict if no config found)

    Raises
    ------
    argparse.ArgumentTypeError
        If a config file is specified but cannot be loaded

    """
    if explicit_path:
        return load_config_file(explicit_path)
    if env_var_path:
        return load_config_file(env_var_path)

    discovered_path = discover_config_file()
    if discovered_path:
        logger.debug("Using configuration file %s", discovered_path)
        return load_config_file(discovered_path)
    return {}


def _section(config: Mapping[str, Any], name: str) -> Dict[str, Any]:
    value = config.get(name, {})
    if not isinstance(value, dict):
        raise argparse.ArgumentTypeError(f"[{name}] must be a table, got {type(value).__name__}")
    return value


def _smiley_mapping(data: Any, origin: str) -> Dict[str, str]:
    if not isinstance(data, dict):
        raise argparse.ArgumentTypeError(f"Smilies in {origin} must be a mapping of code to markup")
    for code, replacement in data.items():
        if not isinstance(code, str) or not isinstance(replacement, str):
            raise argparse.ArgumentTypeError(f"Smiley {code!r} in {origin} must map a string to a string")
    return data


def load_smilies_file(path: Path | str) -> Dict[str, str]:
    """Load a smiley table file: a mapping of code to replacement markup.

    A top-level ``smilies`` table is also accepted, so a full config file
    can double as a smiley file.

    Raises
    ------
    argparse.ArgumentTypeError
        If the file cannot be read or is not a string-to-string mapping

    """
    path = _require_file(path, "Smilies file")
    data = _load_structured_file(path)
    if isinstance(data, dict) and isinstance(data.get("smilies"), dict):
        data = data["smilies"]
    return _smiley_mapping(data, str(path))


def load_attachments_file(path: Path | str) -> Dict[int, AttachmentView]:
    """Load attachment records for ``[attach]`` elements.

    The file holds either a list of records or a mapping of id to record.
    Each record needs ``download_url`` and may give ``filename``, ``mime``
    and ``dimensions`` (or ``width`` and ``height``).

    Raises
    ------
    argparse.ArgumentTypeError
        If the file cannot be read or a record is malformed

    """
    path = _require_file(path, "Attachments file")
    data = _load_structured_file(path)
    if isinstance(data, dict) and isinstance(data.get("attachments"), (list, dict)):
        data = data["attachments"]

    if isinstance(data, dict):
        records = []
        for key, record in data.items():
            if not isinstance(record, dict):
                raise argparse.ArgumentTypeError(f"Attachment {key!r} in {path} must be a mapping")
            records.append({"id": key, **record})
    elif isinstance(data, list):
        records = data
    else:
        raise argparse.ArgumentTypeError(f"Attachments file {path} must contain a list or a mapping")

    try:
        return load_attachment_views(records)
    except (TypeError, ValueError) as e:
        raise argparse.ArgumentTypeError(f"Invalid attachment record in {path}: {e}") from e


def build_conversion_settings(
    config: Mapping[str, Any],
    *,
    parser_overrides: Optional[Mapping[str, Any]] = None,
    renderer_overrides: Optional[Mapping[str, Any]] = None,
    smilies_path: Optional[str] = None,
    sanitize_smilies: Optional[bool] = None,
) -> ConversionSettings:
    """Combine a configuration mapping with command line overrides.

    Parameters
    ----------
    config : Mapping[str, Any]
        Loaded configuration
    parser_overrides, renderer_overrides : Mapping[str, Any], optional
        Option values from the command line. None values are ignored.
    smilies_path : str, optional
        Smiley file whose entries override the ``[smilies]`` table
    sanitize_smilies : bool, optional
        Overrides the ``sanitize_smilies`` setting when not None

    Returns
    -------
    ConversionSettings
        Parser options, renderer options and smiley table

    Raises
    ------
    argparse.ArgumentTypeError
        If the configuration has unknown keys or invalid values

    """
    unknown = sorted(set(config) - CONFIG_SECTIONS)
    if unknown:
        raise argparse.ArgumentTypeError(f"Unknown configuration key(s): {', '.join(unknown)}")

    parser_values = dict(_section(config, "parser"))
    parser_values.update({k: v for k, v in (parser_overrides or {}).items() if v is not None})
    renderer_values = dict(_section(config, "renderer"))
    renderer_values.update({k: v for k, v in (renderer_overrides or {}).items() if v is not None})

    try:
        parser_options = BBCodeParserOptions.from_mapping(parser_values)
        renderer_options = HtmlRendererOptions.from_mapping(renderer_values)
    except (TypeError, ValueError) as e:
        raise argparse.ArgumentTypeError(f"Invalid option: {e}") from e

    smilies = dict(_smiley_mapping(config.get("smilies", {}), "configuration"))
    if smilies_path:
        smilies.update(load_smilies_file(smilies_path))

    sanitize = config.get("sanitize_smilies", False) if sanitize_smilies is None else sanitize_smilies
    if not isinstance(sanitize, bool):
        raise argparse.ArgumentTypeError(f"sanitize_smilies must be a boolean, got {sanitize!r}")

    return ConversionSettings(
        parser_options=parser_options,
        renderer_options=renderer_options,
        smilies=SmileyTable(smilies, sanitize=sanitize),
    )
