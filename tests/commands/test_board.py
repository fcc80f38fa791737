"""Tests for the board command group."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from obzctl.cli import cli


def _json(runner: CliRunner, *args: str) -> dict[str, Any]:
    result = runner.invoke(cli, ["--json", *args])
    assert result.exit_code == 0, result.output
    return json.loads(result.output)


@pytest.mark.usefixtures("_isolated_workspace")
class TestBoardCommands:
    def test_create_and_show(self, cli_runner: CliRunner) -> None:
        created = _json(cli_runner, "board", "create", "Core", "--id", "core", "--rows", "1")
        assert created["op"] == "board_create"
        assert created["data"]["board"]["grid"]["rows"] == 1

        result = cli_runner.invoke(cli, ["board", "show", "core"])
        assert result.exit_code == 0
        assert "core — Core" in result.output

    def test_create_uses_config_defaults(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        (tmp_path / "obzctl.toml").write_text("[board]\ncolumns = 5\n", encoding="utf-8")
        data = _json(cli_runner, "board", "create", "Core")
        assert data["data"]["board"]["grid"]["columns"] == 5
        assert (tmp_path / ".obzctl" / "boards").is_dir()

    def test_create_rejects_zero_rows(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["board", "create", "Core", "--rows", "0"])
        assert result.exit_code == 2

    def test_show_missing_exits_1(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["board", "show", "ghost"])
        assert result.exit_code == 1
        assert 'Board "ghost" not found' in result.output

    def test_list_quiet(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ["board", "create", "B", "--id", "b"])
        cli_runner.invoke(cli, ["board", "create", "A", "--id", "a"])
        result = cli_runner.invoke(cli, ["-q", "board", "list"])
        assert result.exit_code == 0
        assert result.output.split() == ["a", "b"]

    def test_delete(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ["board", "create", "Core", "--id", "core"])
        assert cli_runner.invoke(cli, ["board", "delete", "core"]).exit_code == 0
        assert cli_runner.invoke(cli, ["board", "delete", "core"]).exit_code == 1

    def test_resize_needs_a_dimension(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ["board", "create", "Core", "--id", "core"])
        result = cli_runner.invoke(cli, ["board", "resize", "core"])
        assert result.exit_code == 2
        assert "--rows and/or --columns" in result.output

    def test_examples(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["board", "--examples"])
        assert result.exit_code == 0
        assert "obzctl board create" in result.output


@pytest.mark.usefixtures("_isolated_workspace")
class TestButtonCommands:
    @pytest.fixture(autouse=True)
    def _core(self, cli_runner: CliRunner, _isolated_workspace: None) -> None:
        result = cli_runner.invoke(
            cli, ["board", "create", "Core", "--id", "core", "--rows", "1", "--columns", "2"]
        )
        assert result.exit_code == 0, result.output

    def test_add(self, cli_runner: CliRunner) -> None:
        data = _json(
            cli_runner,
            "board", "button", "add", "core",
            "--id", "yes",
            "--label", "yes",
            "--background-color", "rgb(0, 200, 0)",
            "--load-board", "food",
            "--set", "ext_weight=2",
        )["data"]
        assert data["position"] == [0, 0]
        assert data["button"] == {
            "id": "yes",
            "label": "yes",
            "background_color": "rgb(0, 200, 0)",
            "load_board": {"id": "food"},
            "ext_weight": 2,
        }

    def test_add_invalid_color(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(
            cli, ["board", "button", "add", "core", "--border-color", "black"]
        )
        assert result.exit_code == 1
        assert "border_color" in result.output

    def test_bad_assignment(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["board", "button", "add", "core", "--set", "nope"])
        assert result.exit_code == 2
        assert "KEY=VALUE" in result.output

    def test_unplaced_warning(self, cli_runner: CliRunner) -> None:
        for button_id in ("a", "b", "c"):
            result = cli_runner.invoke(cli, ["board", "button", "add", "core", "--id", button_id])
        assert result.exit_code == 0
        assert 'WARNING: Button "c" has no grid cell' in result.output

    def test_update_and_clear(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ["board", "button", "add", "core", "--id", "a", "--action", ":home"])
        args = ["board", "button", "update", "core", "a", "--label", "y", "--clear", "action"]
        data = _json(cli_runner, *args)["data"]
        assert data["button"] == {"id": "a", "label": "y"}

    def test_update_needs_changes(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["board", "button", "update", "core", "a"])
        assert result.exit_code == 2
        assert "Nothing to change." in result.output

    def test_remove(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ["board", "button", "add", "core", "--id", "a"])
        assert cli_runner.invoke(cli, ["board", "button", "remove", "core", "a"]).exit_code == 0
        assert cli_runner.invoke(cli, ["board", "button", "remove", "core", "a"]).exit_code == 1


@pytest.mark.usefixtures("_isolated_workspace")
class TestAssetCommands:
    @pytest.fixture(autouse=True)
    def _core(self, cli_runner: CliRunner, _isolated_workspace: None) -> None:
        cli_runner.invoke(cli, ["board", "create", "Core", "--id", "core"])

    def test_image_symbol(self, cli_runner: CliRunner) -> None:
        data = _json(
            cli_runner,
            "board", "image", "add", "core",
            "--id", "cat",
            "--symbol-set", "arasaac",
            "--symbol-filename", "cat.png",
            "--width", "64",
        )["data"]
        assert data["image"] == {
            "id": "cat",
            "width": 64,
            "symbol": {"set": "arasaac", "filename": "cat.png"},
        }

    def test_image_without_source(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["board", "image", "add", "core", "--id", "x"])
        assert result.exit_code == 1

    def test_referenced_image_kept(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(
            cli, ["board", "image", "add", "core", "--id", "i", "--path", "images/i.png"]
        )
        cli_runner.invoke(cli, ["board", "button", "add", "core", "--image-id", "i"])
        result = cli_runner.invoke(cli, ["board", "image", "remove", "core", "i"])
        assert result.exit_code == 1
        assert "referenced by 1 button" in result.output

    def test_sound(self, cli_runner: CliRunner) -> None:
        added = cli_runner.invoke(
            cli,
            ["board", "sound", "add", "core", "--id", "s", "--url", "https://example.com/s.mp3"],
        )
        assert added.exit_code == 0
        assert cli_runner.invoke(cli, ["board", "sound", "remove", "core", "s"]).exit_code == 0

    def test_sound_duration_positive(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(
            cli, ["board", "sound", "add", "core", "--path", "s.mp3", "--duration", "0"]
        )
        assert result.exit_code == 2
