from __future__ import annotations

import textwrap
import pytest
from pathlib import Path

from markdown_runs.config import (
    ConfigError,
    RunsConfig,
    apply_overrides,
    build_config,
    load_config,
    normalize_config,
    validate_config,
)


def _write_pyproject(base: Path, body: str) -> Path:
    path = base / "pyproject.toml"
    path.write_text(textwrap.dedent(body).lstrip(), encoding="utf-8")
    return path


def _write_dotfile(base: Path, body: str) -> Path:
    path = base / ".markdown-runs.toml"
    path.write_text(textwrap.dedent(body).lstrip(), encoding="utf-8")
    return path


def test_loads_config_from_pyproject(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.markdown-runs]
        output_format = "json"
        include_consumed = true
        fenced_code = false
        max_file_size = 1
        max_line_length = 2
        """,
    )

    config = load_config(tmp_path)

    assert config == RunsConfig(
        output_format="json",
        include_consumed=True,
        fenced_code=False,
        max_file_size=1,
        max_line_length=2,
    )


@pytest.mark.parametrize(
    "writer, table",
    [(_write_pyproject, "tool.markdown-runs"), (_write_dotfile, "markdown-runs")],
)
def test_load_config_normalizes_output_format(tmp_path: Path, writer, table):
    writer(
        tmp_path,
        f"""
        [{table}]
        output_format = " JSON "
        """,
    )

    assert load_config(tmp_path).output_format == "json"


def test_loads_config_from_dotfile(tmp_path: Path):
    _write_dotfile(
        tmp_path,
        """
        [markdown-runs]
        output_format = "json"
        """,
    )
    nested = tmp_path / "child"
    nested.mkdir()

    config = load_config(nested)

    assert config.output_format == "json"


def test_dotfile_accepts_tool_table(tmp_path: Path):
    _write_dotfile(
        tmp_path,
        """
        [tool.markdown-runs]
        include_consumed = true
        """,
    )

    assert load_config(tmp_path).include_consumed is True


def test_pyproject_wins_over_dotfile_in_same_directory(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.markdown-runs]
        output_format = "json"
        """,
    )
    _write_dotfile(
        tmp_path,
        """
        [markdown-runs]
        output_format = "text"
        include_consumed = true
        """,
    )

    config = load_config(tmp_path)

    assert config.output_format == "json"
    assert config.include_consumed is False


def test_pyproject_without_table_is_skipped(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [project]
        name = "docs"
        """,
    )
    _write_dotfile(
        tmp_path,
        """
        [markdown-runs]
        fenced_code = false
        """,
    )

    assert load_config(tmp_path).fenced_code is False


def test_load_config_walks_up_directories(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.markdown-runs]
        max_line_length = 80
        """,
    )
    nested = tmp_path / "a" / "b" / "c"
    nested.mkdir(parents=True)

    config = load_config(nested)

    assert config.max_line_length == 80


def test_empty_config_table_stops_inheritance(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.markdown-runs]
        output_format = "json"
        """,
    )
    child = tmp_path / "child"
    child.mkdir()
    _write_pyproject(
        child,
        """
        [tool.markdown-runs]
        """,
    )

    config = load_config(child)

    assert config == RunsConfig()


def test_load_config_returns_defaults_when_missing(tmp_path: Path):
    assert load_config(tmp_path) == RunsConfig()


def test_load_config_skips_invalid_toml(tmp_path: Path):
    invalid_dir = tmp_path / "invalid"
    invalid_dir.mkdir()
    _write_pyproject(invalid_dir, "not = {valid")
    _write_pyproject(
        tmp_path,
        """
        [tool.markdown-runs]
        include_consumed = true
        """,
    )

    nested = invalid_dir / "child"
    nested.mkdir()
    config = load_config(nested)

    assert config.include_consumed is True


def test_load_config_errors_on_unknown_keys(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.markdown-runs]
        output_format = "json"
        unexpected = true
        """,
    )

    with pytest.raises(ConfigError, match="unexpected"):
        load_config(tmp_path)


def test_load_config_errors_on_non_table(tmp_path: Path):
    _write_dotfile(tmp_path, 'markdown-runs = "json"\n')

    with pytest.raises(ConfigError, match="Invalid"):
        load_config(tmp_path)


def test_partial_config_merges_with_defaults(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.markdown-runs]
        max_file_size = 2048
        """,
    )

    config = load_config(tmp_path)

    assert config.max_file_size == 2048
    # Defaults preserved
    defaults = RunsConfig()
    assert config.output_format == defaults.output_format
    assert config.fenced_code == defaults.fenced_code


def test_normalize_config_lowercases_output_format():
    assert normalize_config(RunsConfig(output_format=" JSON ")).output_format == "json"


def test_apply_overrides_ignores_none():
    config = RunsConfig()

    assert apply_overrides(config, output_format=None, include_consumed=None) is config
    assert apply_overrides(config, include_consumed=False) == config
    assert apply_overrides(config, output_format="json").output_format == "json"


def test_apply_overrides_rejects_unknown_fields():
    with pytest.raises(TypeError):
        apply_overrides(RunsConfig(), colour="red")


def test_build_config_applies_overrides_after_file(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.markdown-runs]
        output_format = "json"
        include_consumed = true
        """,
    )

    config = build_config(tmp_path, output_format="TEXT", fenced_code=False)

    assert config == RunsConfig(
        output_format="text", include_consumed=True, fenced_code=False
    )


def test_build_config_validates(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.markdown-runs]
        max_line_length = 0
        """,
    )

    with pytest.raises(ConfigError, match="max_line_length"):
        build_config(tmp_path)


@pytest.mark.parametrize(
    "config",
    [
        RunsConfig(output_format="html"),
        RunsConfig(output_format=3),  # type: ignore[arg-type]
        RunsConfig(include_consumed="yes"),  # type: ignore[arg-type]
        RunsConfig(fenced_code=1),  # type: ignore[arg-type]
        RunsConfig(max_file_size=0),
        RunsConfig(max_line_length=-1),
    ],
)
def test_validate_config_rejects_invalid_values(config: RunsConfig):
    with pytest.raises(ConfigError):
        validate_config(config)


@pytest.mark.parametrize(
    "config",
    [
        RunsConfig(max_file_size="big"),  # type: ignore[arg-type]
        RunsConfig(max_line_length="long"),  # type: ignore[arg-type]
        RunsConfig(max_line_length=True),  # type: ignore[arg-type]
    ],
)
def test_validate_config_rejects_non_numeric_limits(config: RunsConfig):
    with pytest.raises(ConfigError, match="must be an integer"):
        validate_config(config)


def test_validate_config_accepts_uppercase_format():
    validate_config(RunsConfig(output_format="JSON"))
