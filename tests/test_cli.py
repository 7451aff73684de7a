from __future__ import annotations

import json
from pathlib import Path

import pytest
import structlog
from typer.testing import CliRunner

from waplug import __version__, cli
from tests.fakes import write_plugin


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()


def _write_config(tmp_path: Path, **extra: str) -> Path:
    config_path = tmp_path / "waplug.toml"
    lines = [
        f'database_path = "{(tmp_path / "db" / "database.json").as_posix()}"',
        'prefixes = [".", "!"]',
    ]
    lines.extend(f'{key} = "{value}"' for key, value in extra.items())
    config_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return config_path


def test_version_flag() -> None:
    result = CliRunner().invoke(cli.create_app(), ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_init_db_creates_skeleton(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path)
    runner = CliRunner()

    result = runner.invoke(cli.create_app(), ["init-db", "--config-path", str(config_path)])
    assert result.exit_code == 0
    assert "database created" in result.output
    data = json.loads((tmp_path / "db" / "database.json").read_text(encoding="utf-8"))
    assert data == {"Private": {}, "Grup": {}}

    again = runner.invoke(cli.create_app(), ["init-db", "--config-path", str(config_path)])
    assert "database exists" in again.output


def test_plugins_reports_categories(tmp_path: Path) -> None:
    root = tmp_path / "plugins"
    write_plugin(
        root,
        "tools",
        "echo",
        "command = ['echo', 'say']\ntags = 'Tools Menu'\n\nasync def run(ctx, event, parsed):\n    pass\n",
    )
    config_path = _write_config(tmp_path, plugins_dir=root.as_posix())

    result = CliRunner().invoke(
        cli.create_app(), ["plugins", "--config-path", str(config_path)]
    )

    assert result.exit_code == 0
    assert "1 plugins loaded." in result.output
    assert "Tools Menu:" in result.output
    assert "echo, say" in result.output


def test_plugins_exit_code_on_failures(tmp_path: Path) -> None:
    root = tmp_path / "plugins"
    write_plugin(root, "tools", "broken", "raise ImportError('missing dep')\n")
    config_path = _write_config(tmp_path)

    result = CliRunner().invoke(
        cli.create_app(),
        ["plugins", "--config-path", str(config_path), "--plugins-dir", str(root)],
    )

    assert result.exit_code == 1
    assert "failed to load plugin broken.py: missing dep" in result.output


def test_parse_shows_command(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path)

    result = CliRunner().invoke(
        cli.create_app(), ["parse", "!!Ping a b", "--config-path", str(config_path)]
    )

    assert result.exit_code == 0
    assert "prefix: '!'" in result.output
    assert "command: '!ping'" in result.output
    assert "args: ['a', 'b']" in result.output


def test_parse_without_prefix_fails(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path)

    result = CliRunner().invoke(
        cli.create_app(), ["parse", "hello", "--config-path", str(config_path)]
    )

    assert result.exit_code == 1
    assert "no command" in result.output


def test_invalid_config_exits_with_error(tmp_path: Path) -> None:
    config_path = tmp_path / "waplug.toml"
    config_path.write_text("prefixes = 3\n", encoding="utf-8")

    result = CliRunner().invoke(
        cli.create_app(), ["init-db", "--config-path", str(config_path)]
    )

    assert result.exit_code == 2
