"""Configuration loading and management."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path

OUTPUT_FORMATS = ("text", "json")
CONFIG_TABLE = "markdown-runs"


@dataclass
class RunsConfig:
    """Configuration for turning Markdown files into styled runs.

    Attributes:
        output_format: ``"text"`` prints the visible text, ``"json"`` prints
            every line with its style and runs.
        include_consumed: Keep lines that only carried block syntax, such as
            setext underlines and code fences.
        fenced_code: Recognise fenced code blocks before applying line rules.
        max_file_size: Maximum file size in bytes that will be processed.
        max_line_length: Maximum line length allowed during parsing.

    Examples:
        RunsConfig(output_format="json", include_consumed=True)
    """

    output_format: str = "text"
    include_consumed: bool = False
    fenced_code: bool = True

    # Limits
    max_file_size: int = 10 * 1024 * 1024
    max_line_length: int = 10_000


class ConfigError(ValueError):
    """Exception raised when configuration values are invalid.

    Examples:
        raise ConfigError("`output_format` must be one of: text, json")
    """


def load_config(search_path: Path) -> RunsConfig:
    """Load configuration from the nearest config file.

    Walks parent directories from `search_path` to the filesystem root, reading
    the ``[tool.markdown-runs]`` table from `pyproject.toml` and the
    ``[markdown-runs]`` or ``[tool.markdown-runs]`` table from
    `.markdown-runs.toml`. TOML files that cannot be read or decoded are
    skipped, and defaults are returned when nothing is found.

    Args:
        search_path: Directory used as the starting point for configuration lookup.

    Returns:
        RunsConfig: Loaded configuration with defaults applied when necessary.

    Raises:
        ConfigError: If a table is present but is not a mapping or contains
            unsupported keys.

    Examples:
        load_config(Path("docs"))
    """
    current = search_path.resolve()

    while True:
        pyproject_config = _load_from_file(
            current / "pyproject.toml", table_paths=[("tool", CONFIG_TABLE)]
        )
        if pyproject_config is not None:
            return normalize_config(pyproject_config)

        dotfile_config = _load_from_file(
            current / f".{CONFIG_TABLE}.toml",
            table_paths=[(CONFIG_TABLE,), ("tool", CONFIG_TABLE)],
        )
        if dotfile_config is not None:
            return normalize_config(dotfile_config)

        parent = current.parent
        if parent == current:
            break
        current = parent

    return RunsConfig()


_MISSING = object()


def _load_from_file(config_file: Path, table_paths: list[tuple[str, ...]]) -> RunsConfig | None:
    if not config_file.is_file():
        return None

    try:
        with open(config_file, "rb") as stream:
            data = tomllib.load(stream)
    except (OSError, tomllib.TOMLDecodeError):
        return None

    for table_path in table_paths:
        raw_config = _extract_table(data, table_path)
        if raw_config is not _MISSING:
            return _build_config_from_raw(raw_config, config_file, table_path)

    return None


def _extract_table(data: object, table_path: tuple[str, ...]) -> object:
    current = data
    for key in table_path:
        if not isinstance(current, dict) or key not in current:
            return _MISSING
        current = current[key]
    return current


def _build_config_from_raw(
    raw_config: object, config_file: Path, table_path: tuple[str, ...]
) -> RunsConfig:
    table_display = ".".join(table_path)

    if raw_config is None or raw_config == {}:
        return RunsConfig()
    if not isinstance(raw_config, dict):
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}")

    known = {field.name for field in fields(RunsConfig)}
    unknown = sorted(set(raw_config) - known)
    if unknown:
        raise ConfigError(
            f"Unsupported `[{table_display}]` settings in {config_file}: {', '.join(unknown)}"
        )
    return RunsConfig(**raw_config)


def normalize_config(config: RunsConfig) -> RunsConfig:
    """Fold case-insensitive values to their canonical spelling."""
    if isinstance(config.output_format, str):
        return replace(config, output_format=config.output_format.strip().lower())
    return config


def validate_config(config: RunsConfig) -> None:
    """Validate a `RunsConfig` instance.

    Args:
        config: Configuration to validate.

    Raises:
        ConfigError: If the output format is unsupported, a flag is not a
            boolean, or a numeric limit is not a positive integer.

    Examples:
        validate_config(RunsConfig(output_format="json"))
    """
    config = normalize_config(config)

    if config.output_format not in OUTPUT_FORMATS:
        raise ConfigError(f"`output_format` must be one of: {', '.join(OUTPUT_FORMATS)}")

    for name in ("include_consumed", "fenced_code"):
        if not isinstance(getattr(config, name), bool):
            raise ConfigError(f"`{name}` must be a boolean")

    limits = {
        "max_file_size": config.max_file_size,
        "max_line_length": config.max_line_length,
    }
    _ensure_integers(limits)
    _ensure_positive(limits)


def apply_overrides(config: RunsConfig, **overrides: object) -> RunsConfig:
    """Apply override values to a `RunsConfig`.

    Args:
        config: Base configuration to update.
        overrides: Override values keyed by configuration field name; values set to
            None are ignored.

    Returns:
        RunsConfig: New configuration with the overrides applied, or `config`
            itself when nothing changes.

    Raises:
        TypeError: If an override name is not defined on `RunsConfig`.

    Examples:
        updated = apply_overrides(config, output_format="json")
    """
    changes = {key: value for key, value in overrides.items() if value is not None}
    if not changes:
        return config
    return replace(config, **changes)


def build_config(search_path: Path, **overrides: object) -> RunsConfig:
    """Load, override, and validate configuration.

    Raises:
        ConfigError: If configuration loading or validation fails.

    Examples:
        config = build_config(Path.cwd(), output_format="json")
    """
    config = load_config(search_path)
    config = apply_overrides(config, **overrides)
    config = normalize_config(config)
    validate_config(config)
    return config


def _ensure_positive(values: dict[str, int]) -> None:
    for key, value in values.items():
        if value <= 0:
            raise ConfigError(f"`{key}` must be a positive integer")


def _ensure_integers(values: dict[str, object]) -> None:
    for key, value in values.items():
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"`{key}` must be an integer")
