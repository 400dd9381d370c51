"""
Tests for the crud-engine CLI commands.
"""

import json

import pytest
from click.testing import CliRunner

from crud_engine.cli.main import cli
from crud_engine.core import SchemaCatalog


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def populated_dir(models_dir, task_definition, note_definition):
    catalog = SchemaCatalog(models_dir)
    catalog.register(task_definition)
    catalog.register(note_definition)
    return models_dir


class TestValidateCommand:
    def test_valid_definition(self, runner, tmp_path, task_definition):
        path = tmp_path / "Task.json"
        path.write_text(json.dumps(task_definition), encoding="utf-8")

        result = runner.invoke(cli, ["validate", str(path)])

        assert result.exit_code == 0
        assert "is valid" in result.output

    def test_invalid_definition_verbose(self, runner, tmp_path, task_definition):
        task_definition["rbac"]["Viewer"] = []
        path = tmp_path / "Task.json"
        path.write_text(json.dumps(task_definition), encoding="utf-8")

        result = runner.invoke(cli, ["validate", str(path), "--verbose"])

        assert result.exit_code == 1
        assert "is invalid" in result.output
        assert "rbac.Viewer" in result.output

    def test_invalid_json(self, runner, tmp_path):
        path = tmp_path / "Task.json"
        path.write_text("{", encoding="utf-8")

        result = runner.invoke(cli, ["validate", str(path)])

        assert result.exit_code != 0
        assert "Invalid JSON" in result.output

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(cli, ["validate", str(tmp_path / "missing.json")])
        assert result.exit_code != 0


class TestListCommand:
    def test_lists_models(self, runner, populated_dir):
        result = runner.invoke(cli, ["list", "--models-dir", str(populated_dir)])

        assert result.exit_code == 0
        lines = result.output.strip().splitlines()
        assert lines[0].startswith("Note\tnotebook")
        assert lines[1].startswith("Task\ttasks")

    def test_empty_directory(self, runner, models_dir):
        result = runner.invoke(cli, ["list", "--models-dir", str(models_dir)])
        assert result.exit_code == 0
        assert "No models found" in result.output

    def test_missing_directory(self, runner, tmp_path):
        result = runner.invoke(cli, ["list", "--models-dir", str(tmp_path / "nope")])
        assert result.exit_code != 0
        assert "Models directory not found" in result.output


class TestShowCommand:
    def test_show_json(self, runner, populated_dir):
        result = runner.invoke(cli, ["show", "Task", "--models-dir", str(populated_dir)])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["tableName"] == "tasks"
        assert data["ownerField"] == "ownerId"

    def test_show_pretty(self, runner, populated_dir):
        result = runner.invoke(
            cli, ["show", "Task", "--models-dir", str(populated_dir), "--format", "pretty"]
        )

        assert result.exit_code == 0
        assert "Model: Task" in result.output
        assert "title: string (required)" in result.output
        assert "Admin: create, read, update, delete" in result.output

    def test_show_unknown_model(self, runner, populated_dir):
        result = runner.invoke(cli, ["show", "Ghost", "--models-dir", str(populated_dir)])
        assert result.exit_code != 0
        assert "Model Ghost not found" in result.output
