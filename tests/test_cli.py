"""Tests for the git-template command line."""
import json

from typer.testing import CliRunner

from conftest import make_template_config, write_tree
from git_template.cli import app

runner = CliRunner()


def test_help_lists_commands():
    result = runner.invoke(app, ["--help"])

    assert result.exit_code == 0
    for command in ("status", "strategy", "iterate", "compare", "validate"):
        assert command in result.stdout


class TestStatusCommand:

    def test_missing_folder(self, workspace):
        result = runner.invoke(app, ["status", "ghost", "--format", "summary"])

        assert result.exit_code == 0
        assert "ghost: Folder Not Found" in result.stdout

    def test_ready_folder_json(self, app_folder, generated_folder):
        result = runner.invoke(app, ["status", str(app_folder), "--format", "json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["development_status"] == "ready_for_template_iteration"

    def test_bad_config_file(self, workspace):
        (workspace / "git-template.yml").write_text("nonsense_key: 1\n")

        result = runner.invoke(app, ["status", "."])

        assert result.exit_code == 1
        assert "nonsense_key" in result.stdout


class TestStrategyCommand:

    def test_git_only_folder(self, workspace):
        (workspace / "plain" / ".git").mkdir(parents=True)

        result = runner.invoke(app, ["strategy", "plain", "--format", "summary"])

        assert result.exit_code == 0
        assert "Strategy: Cannot Iterate" in result.stdout

    def test_detailed_includes_validation(self, app_folder, generated_folder):
        result = runner.invoke(app, ["strategy", str(app_folder)])

        assert result.exit_code == 0
        assert "Iteration Strategy Report" in result.stdout
        assert "VALIDATION" in result.stdout


class TestIterateCommand:

    def test_creates_generated_folder(self, workspace, app_folder):
        result = runner.invoke(app, ["iterate", str(app_folder), "--format", "summary"])

        assert result.exit_code == 0
        assert "create_generated_folder completed successfully" in result.stdout
        assert (workspace / "templated" / "my-app" / ".git_template" / "template.rb").is_file()

    def test_syncs_configuration(self, workspace, app_folder):
        (workspace / "templated" / "my-app").mkdir(parents=True)

        result = runner.invoke(app, ["iterate", str(app_folder), "--format", "summary"])

        assert result.exit_code == 0
        assert "sync_configuration completed successfully" in result.stdout

    def test_repo_iteration_updates_cleanup(self, monkeypatch, app_folder, generated_folder):
        monkeypatch.setenv("GIT_TEMPLATE_APPLY_COMMAND", "true")

        result = runner.invoke(app, ["iterate", str(app_folder), "--format", "json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["success"] is True
        assert data["differences_count"] == 2
        assert data["cleanup_updated"] is True
        assert sorted(data["comparison"]["added_files"]) == ["x", "y"]
        assert (generated_folder / ".git_template" / "cleanup.rb").is_file()

    def test_blocked_strategy_exits_non_zero(self, workspace):
        (workspace / "plain" / ".git").mkdir(parents=True)

        result = runner.invoke(app, ["iterate", "plain", "--format", "summary"])

        assert result.exit_code == 1
        assert "Cannot proceed" in result.stdout

    def test_force_cannot_invent_an_action(self, workspace):
        (workspace / "plain" / ".git").mkdir(parents=True)

        result = runner.invoke(app, ["iterate", "plain", "--force", "--format", "summary"])

        assert result.exit_code == 1
        assert "No iteration action" in result.stdout

    def test_failed_iteration_exits_non_zero(self, workspace, app_folder):
        (workspace / "templated" / "my-app" / ".git_template").mkdir(parents=True)

        result = runner.invoke(app, ["iterate", str(app_folder), "--format", "summary"])

        assert result.exit_code == 1
        assert "Status: Failed" in result.stdout


class TestCompareCommand:

    def test_identical_folders(self, tmp_path):
        a = write_tree(tmp_path / "a", {"f": "1"})
        b = write_tree(tmp_path / "b", {"f": "1"})

        result = runner.invoke(app, ["compare", str(a), str(b)])

        assert result.exit_code == 0
        assert "Folders are identical" in result.stdout

    def test_script_output(self, tmp_path):
        a = write_tree(tmp_path / "a", {"f": "1"})
        b = write_tree(tmp_path / "b", {"g": "1"})

        result = runner.invoke(app, ["compare", str(a), str(b), "--script"])

        assert result.exit_code == 1
        assert "# Add file: f" in result.stdout
        assert "remove_file 'g'" in result.stdout

    def test_exclude_option(self, tmp_path):
        a = write_tree(tmp_path / "a", {"f": "1", "build/out": "x"})
        b = write_tree(tmp_path / "b", {"f": "1"})

        result = runner.invoke(app, ["compare", str(a), str(b), "--exclude", "build"])

        assert result.exit_code == 0

    def test_bracketed_file_names_are_printed_literally(self, tmp_path):
        a = write_tree(tmp_path / "a", {"[/bold]weird": "1", "[red]x": "2"})
        b = tmp_path / "b"
        b.mkdir()

        result = runner.invoke(app, ["compare", str(a), str(b)])

        assert result.exit_code == 1
        assert result.exception is None or isinstance(result.exception, SystemExit)
        assert "[/bold]weird" in result.stdout
        assert "[red]x" in result.stdout

    def test_missing_folder(self, tmp_path):
        result = runner.invoke(app, ["compare", str(tmp_path), str(tmp_path / "nope")])

        assert result.exit_code == 1
        assert "Error:" in result.stdout


class TestValidateCommand:

    def test_complete_template(self, workspace, monkeypatch):
        monkeypatch.setenv("GIT_TEMPLATE_APPLY_COMMAND", "true")
        template = make_template_config(workspace / "app")
        reference = workspace / "reference"
        reference.mkdir()

        result = runner.invoke(app, ["validate", str(template), str(reference), "--format", "summary"])

        assert result.exit_code == 0
        assert "validate_template_completeness completed successfully" in result.stdout

    def test_incomplete_template(self, workspace, monkeypatch):
        monkeypatch.setenv("GIT_TEMPLATE_APPLY_COMMAND", "true")
        template = make_template_config(workspace / "app")
        reference = write_tree(workspace / "reference", {"README": "hello"})

        result = runner.invoke(app, ["validate", str(template), str(reference), "--format", "summary"])

        assert result.exit_code == 1
        assert "Template is incomplete: 1 difference(s)" in result.stdout
