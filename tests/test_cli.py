from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from cli.main import app as cli_app
from cmdstack.commands import get_command_store, reset_command_store


runner = CliRunner()


@pytest.fixture(autouse=True)
def cmdstack_home(tmp_path, monkeypatch):
    monkeypatch.setenv("CMDSTACK_HOME", str(tmp_path))
    reset_command_store()
    yield tmp_path
    reset_command_store()


def test_cli_add_list_delete():
    result = runner.invoke(cli_app, ["add", "greet", "echo @{}", "--tag", "demo", "--fav"])
    assert result.exit_code == 0, result.output
    assert "Saved command" in result.output

    result = runner.invoke(cli_app, ["list", "--json"])
    assert result.exit_code == 0, result.output
    listed = json.loads(result.output)
    assert listed[0]["alias"] == "greet"
    assert listed[0]["favourite"] is True

    result = runner.invoke(cli_app, ["delete", "1"])
    assert result.exit_code == 0, result.output
    assert json.loads(runner.invoke(cli_app, ["list", "--json"]).output) == []


def test_cli_add_rejects_bad_template():
    result = runner.invoke(cli_app, ["add", "bad", "echo @{int[10,2]}"])
    assert result.exit_code == 1
    assert "InvalidRange" in result.output
    assert get_command_store().list() == []


def test_cli_list_respects_display_limit():
    for i in range(3):
        runner.invoke(cli_app, ["add", f"c{i}", f"echo {i}"])
    result = runner.invoke(cli_app, ["config", "set", "cli_display_limit", "2"])
    assert result.exit_code == 0, result.output

    listed = json.loads(runner.invoke(cli_app, ["list", "--json"]).output)
    assert len(listed) == 2

    listed = json.loads(runner.invoke(cli_app, ["list", "--json", "--limit", "5"]).output)
    assert len(listed) == 3


def test_cli_list_table_output():
    runner.invoke(cli_app, ["add", "ls", "ls -la"])
    result = runner.invoke(cli_app, ["list"])
    assert result.exit_code == 0, result.output
    assert "ls -la" in result.output


def test_cli_update_and_fav():
    runner.invoke(cli_app, ["add", "a", "echo a"])

    result = runner.invoke(cli_app, ["update", "1"])
    assert result.exit_code == 1

    result = runner.invoke(cli_app, ["update", "1", "--note", "hello"])
    assert result.exit_code == 0, result.output
    assert get_command_store().get(1).note == "hello"

    result = runner.invoke(cli_app, ["fav", "1"])
    assert result.exit_code == 0, result.output
    assert get_command_store().get(1).favourite is True

    result = runner.invoke(cli_app, ["update", "9", "--note", "x"])
    assert result.exit_code == 1


def test_cli_search():
    runner.invoke(cli_app, ["add", "docker-clean", "docker system prune"])
    runner.invoke(cli_app, ["add", "ls", "ls -la"])

    result = runner.invoke(cli_app, ["search", "--alias", "docker", "--json"])
    assert result.exit_code == 0, result.output
    assert [c["alias"] for c in json.loads(result.output)] == ["docker-clean"]

    result = runner.invoke(cli_app, ["search"])
    assert result.exit_code == 1


def test_cli_tags():
    runner.invoke(cli_app, ["add", "a", "echo a", "--tag", "git/remote"])
    result = runner.invoke(cli_app, ["tags"])
    assert result.exit_code == 0, result.output
    assert "git" in result.output
    assert "remote" in result.output


def test_cli_params():
    result = runner.invoke(cli_app, ["params", "echo @{} @{bool}"])
    assert result.exit_code == 0, result.output
    assert "echo @{1} @{bool}" in result.output
    assert "Boolean" in result.output

    result = runner.invoke(cli_app, ["params", "echo @{nope}"])
    assert result.exit_code == 1
    assert "UnknownType" in result.output


def test_cli_fill_text_with_blanks():
    result = runner.invoke(cli_app, ["fill", "--text", "echo @{} @{}", "-b", "foo", "-b", "bar"])
    assert result.exit_code == 0, result.output
    assert result.output.strip() == "echo foo bar"


def test_cli_fill_prompts_for_missing_blanks():
    result = runner.invoke(cli_app, ["fill", "--text", "echo @{int[4,4]} @{}"], input="hi\n")
    assert result.exit_code == 0, result.output
    assert result.output.strip().endswith("echo 4 hi")


def test_cli_fill_no_prompt_leaves_blanks_empty():
    result = runner.invoke(cli_app, ["fill", "--text", "x=@{};", "--no-prompt"])
    assert result.exit_code == 0, result.output
    assert result.output.strip() == "x=;"


def test_cli_fill_saved_command_marks_used():
    runner.invoke(cli_app, ["add", "n", "seq @{int[3,3]}"])
    result = runner.invoke(cli_app, ["fill", "1"])
    assert result.exit_code == 0, result.output
    assert result.output.strip() == "seq 3"
    reset_command_store()
    assert get_command_store().get(1).last_used > 0


def test_cli_fill_argument_errors():
    assert runner.invoke(cli_app, ["fill"]).exit_code == 1
    assert runner.invoke(cli_app, ["fill", "7"]).exit_code == 1
    result = runner.invoke(cli_app, ["fill", "--text", "a @{}", "-b", "1", "-b", "2"])
    assert result.exit_code == 1


def test_cli_fill_uses_configured_defaults():
    runner.invoke(cli_app, ["config", "set", "param_int_range_min", "8"])
    runner.invoke(cli_app, ["config", "set", "param_int_range_max", "8"])
    result = runner.invoke(cli_app, ["fill", "--text", "n=@{int}"])
    assert result.exit_code == 0, result.output
    assert result.output.strip() == "n=8"


def test_cli_config_show_and_set_errors():
    result = runner.invoke(cli_app, ["config", "show", "--json"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["cli_print_style"] == "All"

    result = runner.invoke(cli_app, ["config", "set", "bogus", "1"])
    assert result.exit_code == 1


def test_cli_export_import(tmp_path):
    runner.invoke(cli_app, ["add", "a", "echo a"])
    out = tmp_path / "export.json"
    result = runner.invoke(cli_app, ["export", str(out)])
    assert result.exit_code == 0, result.output
    assert out.exists()

    result = runner.invoke(cli_app, ["import", str(out)])
    assert result.exit_code == 0, result.output
    assert len(get_command_store().list()) == 2


def test_cli_fill_does_not_prompt_for_explicit_empty_blank():
    result = runner.invoke(cli_app, ["fill", "--text", "echo @{}|@{}", "-b", ""], input="x\n")
    assert result.exit_code == 0, result.output
    assert "Blank @{1}" not in result.output
    assert result.output.strip().endswith("echo |x")


def test_cli_import_rejects_malformed_entries(tmp_path):
    runner.invoke(cli_app, ["add", "a", "echo a"])
    for payload in ([1], [{"alias": "x", "command": "echo @{int[9,1]}"}]):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps(payload), encoding="utf-8")
        result = runner.invoke(cli_app, ["import", str(path)])
        assert result.exit_code == 1
        assert "Import failed" in result.output
    assert [c.alias for c in get_command_store().list()] == ["a"]
