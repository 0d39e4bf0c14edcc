"""Converter settings and their lookup in TOML files."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path
import tomllib

from .constants import DEFAULT_MAX_FILE_SIZE, MAX_CELL_LENGTH, TRUNCATE_SUFFIX


@dataclass
class ConverterConfig:
    """Settings for converting HTML fragments into cell content.

    Attributes:
        max_cell_length: Maximum number of characters written to a cell.
        truncate_suffix: Marker appended after truncated text.
        enable_font_cache: Whether equal font styles share one font object.
        enable_style_cache: Whether equal backgrounds share one cell style.
        enable_image_download: Whether ``<img>`` sources are downloaded and
            embedded.
        image_connect_timeout: Seconds allowed to establish an image download.
        image_read_timeout: Seconds allowed to read an image download.
        image_max_workers: Size of the download pool the image handler owns.
        parser_features: BeautifulSoup tree builder used to parse markup.
        max_file_size: Maximum size in bytes of an HTML file read by the CLI.

    Examples:
        ConverterConfig(max_cell_length=1000, enable_image_download=False)
    """

    # Cell content
    max_cell_length: int = MAX_CELL_LENGTH
    truncate_suffix: str = TRUNCATE_SUFFIX

    # Interning
    enable_font_cache: bool = True
    enable_style_cache: bool = True

    # Images
    enable_image_download: bool = True
    image_connect_timeout: float = 3.0
    image_read_timeout: float = 10.0
    image_max_workers: int = 4

    # Parsing
    parser_features: str = "lxml"

    # Limits
    max_file_size: int = DEFAULT_MAX_FILE_SIZE


_FIELD_NAMES = frozenset(field.name for field in fields(ConverterConfig))
_POSITIVE_INTEGERS = ("max_cell_length", "image_max_workers", "max_file_size")
_FLAGS = ("enable_font_cache", "enable_style_cache", "enable_image_download")
_TIMEOUTS = ("image_connect_timeout", "image_read_timeout")

# File name and the tables read from it, in lookup order
CONFIG_SOURCES: tuple[tuple[str, tuple[tuple[str, ...], ...]], ...] = (
    ("pyproject.toml", (("tool", "html2xlsx"),)),
    (".html2xlsx.toml", (("html2xlsx",), ("tool", "html2xlsx"))),
)

_MISSING = object()


class ConfigError(ValueError):
    """Raised for settings that cannot be used.

    Examples:
        raise ConfigError("`max_cell_length` must be a positive integer")
    """


def load_config(search_path: Path) -> ConverterConfig:
    """Return the settings of the closest configuration file.

    Each directory from `search_path` up to the filesystem root is checked for
    ``pyproject.toml`` (``[tool.html2xlsx]``), then for ``.html2xlsx.toml``
    (``[html2xlsx]`` or ``[tool.html2xlsx]``). The first file holding one of
    those tables wins. Files that cannot be read or are not valid TOML are
    ignored.

    Args:
        search_path: Directory where the lookup starts.

    Returns:
        ConverterConfig: Settings from the file with defaults for everything it
            leaves out, or plain defaults when no file is found.

    Raises:
        ConfigError: If the table is not a table or names unknown settings.

    Examples:
        load_config(Path("reports"))
    """
    start = search_path.resolve()
    for directory in (start, *start.parents):
        for filename, table_paths in CONFIG_SOURCES:
            config = _read_config_file(directory / filename, table_paths)
            if config is not None:
                return config
    return ConverterConfig()


def _read_config_file(
    path: Path, table_paths: tuple[tuple[str, ...], ...]
) -> ConverterConfig | None:
    if not path.is_file():
        return None
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError):
        return None

    for table_path in table_paths:
        table = _lookup(data, table_path)
        if table is not _MISSING:
            return _config_from_table(table, f"[{'.'.join(table_path)}] of {path}")
    return None


def _lookup(data: object, table_path: tuple[str, ...]) -> object:
    for key in table_path:
        if not isinstance(data, dict) or key not in data:
            return _MISSING
        data = data[key]
    return data


def _config_from_table(table: object, origin: str) -> ConverterConfig:
    if not isinstance(table, dict):
        raise ConfigError(f"Expected a table for {origin}")

    # TOML keys may use dashes
    settings = {key.replace("-", "_"): value for key, value in table.items()}
    unknown = sorted(set(settings) - _FIELD_NAMES)
    if unknown:
        names = ", ".join(f"`{name}`" for name in unknown)
        raise ConfigError(f"Unknown setting(s) {names} in {origin}")
    return ConverterConfig(**settings)


def validate_config(config: ConverterConfig) -> None:
    """Check that every setting has a usable type and value.

    Args:
        config: Settings to check.

    Raises:
        ConfigError: Naming the first offending setting.

    Examples:
        validate_config(ConverterConfig(max_cell_length=100))
    """
    for name in _POSITIVE_INTEGERS:
        value = getattr(config, name)
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ConfigError(f"`{name}` must be a positive integer, got {value!r}")

    for name in _FLAGS:
        if not isinstance(getattr(config, name), bool):
            raise ConfigError(f"`{name}` must be true or false")

    for name in _TIMEOUTS:
        value = getattr(config, name)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
            raise ConfigError(f"`{name}` must be a positive number of seconds, got {value!r}")

    if not isinstance(config.truncate_suffix, str):
        raise ConfigError("`truncate_suffix` must be a string")
    if len(config.truncate_suffix) >= config.max_cell_length:
        raise ConfigError("`truncate_suffix` must be shorter than `max_cell_length`")

    if not isinstance(config.parser_features, str) or not config.parser_features.strip():
        raise ConfigError("`parser_features` must name a BeautifulSoup tree builder")


def apply_overrides(config: ConverterConfig, **overrides: object) -> ConverterConfig:
    """Return `config` with the given settings replaced.

    Overrides whose value is None are skipped, which lets unset command line
    options pass through unchanged.

    Raises:
        TypeError: If an override does not name a `ConverterConfig` field.

    Examples:
        apply_overrides(config, max_cell_length=500, truncate_suffix=None)
    """
    changes = {name: value for name, value in overrides.items() if value is not None}
    return replace(config, **changes) if changes else config


def build_config(search_path: Path, **overrides: object) -> ConverterConfig:
    """Load the closest configuration, apply `overrides` and validate.

    Raises:
        ConfigError: If the file or the final settings are invalid.

    Examples:
        build_config(Path.cwd(), enable_image_download=False)
    """
    config = apply_overrides(load_config(search_path), **overrides)
    validate_config(config)
    return config
