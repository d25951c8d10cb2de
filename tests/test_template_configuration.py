"""Tests for loading template configurations and appending cleanup content."""
import os

import pytest

from conftest import make_template_config, write_tree
from git_template.core.config import IterationConfig
from git_template.models.template_configuration import CLEANUP_MARKER, TemplateConfiguration


def test_missing_directory_is_invalid(tmp_path):
    configuration = TemplateConfiguration.load(tmp_path / "missing")

    assert not configuration.valid
    assert configuration.validation_errors[0].startswith(
        "Template configuration directory does not exist"
    )


def test_missing_entry_script(tmp_path):
    config_dir = tmp_path / ".git_template"
    config_dir.mkdir()

    configuration = TemplateConfiguration.load(config_dir)

    assert not configuration.valid
    assert configuration.validation_errors == ("Missing required template.rb file",)
    assert configuration.has_entry_script is False


def test_minimal_configuration_is_valid(tmp_path):
    configuration = TemplateConfiguration.load(make_template_config(tmp_path))

    assert configuration.valid
    assert configuration.lifecycle_phases == ()
    assert configuration.has_cleanup_phase is False
    assert configuration.has_module_directory is False
    assert configuration.has_files_directory is False


def test_lifecycle_phases_sorted_without_hidden_directories(tmp_path):
    config_dir = make_template_config(tmp_path)
    for name in ("setup", "configure", ".hidden", "build"):
        (config_dir / "modules" / name).mkdir(parents=True)
    (config_dir / "modules" / "README").write_text("not a phase")
    (config_dir / "files").mkdir()

    configuration = TemplateConfiguration.load(config_dir)

    assert configuration.lifecycle_phases == ("build", "configure", "setup")
    assert configuration.has_module_directory
    assert configuration.has_files_directory


def test_cleanup_content_loaded(tmp_path):
    config_dir = make_template_config(tmp_path, cleanup="remove_file 'tmp'\n")

    configuration = TemplateConfiguration.load(config_dir)

    assert configuration.has_cleanup_phase
    assert configuration.cleanup_content == "remove_file 'tmp'\n"


def test_undecodable_cleanup_script_is_loaded(tmp_path):
    config_dir = make_template_config(tmp_path)
    (config_dir / "cleanup.rb").write_bytes(b"\xff\xfe\x80 bad")

    configuration = TemplateConfiguration.load(config_dir)

    assert configuration.valid
    assert configuration.has_cleanup_phase
    assert configuration.cleanup_content.endswith(" bad")


@pytest.mark.skipif(os.geteuid() == 0, reason="root bypasses directory permissions")
def test_unreadable_modules_directory_is_a_validation_error(tmp_path):
    config_dir = make_template_config(tmp_path)
    modules = config_dir / "modules"
    (modules / "setup").mkdir(parents=True)
    modules.chmod(0)
    try:
        configuration = TemplateConfiguration.load(config_dir)
    finally:
        modules.chmod(0o755)

    assert not configuration.valid
    assert configuration.validation_errors[0].startswith("Modules directory is not readable")
    assert configuration.lifecycle_phases == ()


def test_unreadable_modules_directory_reported(tmp_path, monkeypatch):
    config_dir = make_template_config(tmp_path)
    (config_dir / "modules" / "setup").mkdir(parents=True)

    def denied(self):
        raise PermissionError(13, "Permission denied", str(self))

    monkeypatch.setattr(type(config_dir), "iterdir", denied)

    configuration = TemplateConfiguration.load(config_dir)

    assert configuration.has_module_directory
    assert configuration.validation_errors == (
        f"Modules directory is not readable: [Errno 13] Permission denied: "
        f"'{config_dir / 'modules'}'",
    )


def test_custom_entry_script_name(tmp_path):
    config_dir = write_tree(tmp_path / ".git_template", {"main.rb": "# entry"})
    config = IterationConfig(entry_script="main.rb")

    configuration = TemplateConfiguration.load(config_dir, config)

    assert configuration.valid
    assert configuration.entry_script_path == config_dir / "main.rb"


class TestAppendCleanup:
    """Appending never discards existing cleanup content."""

    def test_creates_cleanup_script(self, tmp_path):
        configuration = TemplateConfiguration.load(make_template_config(tmp_path))

        path = configuration.append_cleanup("remove_file 'junk'")

        assert path.read_text() == f"\n\n{CLEANUP_MARKER}\nremove_file 'junk'"

    def test_existing_content_is_a_prefix(self, tmp_path):
        existing = "# hand written\nremove_file 'Gemfile.lock'\n"
        configuration = TemplateConfiguration.load(make_template_config(tmp_path, cleanup=existing))

        configuration.append_cleanup("first")
        configuration.append_cleanup("second")

        content = configuration.cleanup_script_path.read_text()
        assert content.startswith(existing)
        assert content == (
            f"{existing}\n\n{CLEANUP_MARKER}\nfirst\n\n{CLEANUP_MARKER}\nsecond"
        )
