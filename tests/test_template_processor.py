"""Tests for generated-folder setup and template completeness checks."""
import pytest

from conftest import FakeApplier, make_template_config, write_tree
from git_template.core.errors import (
    FolderAnalysisError,
    InvalidPathError,
    TemplateProcessingError,
    TemplateValidationError,
)
from git_template.core.folder_analyzer import FolderAnalyzer
from git_template.models.folder_analysis import DevelopmentStatus
from git_template.services.template_processor import TemplateProcessor


def analyze(folder):
    return FolderAnalyzer().analyze_development_status(folder)


class TestCreateGeneratedFolder:

    def test_creates_templated_folder_with_configuration(self, workspace, app_folder):
        data = TemplateProcessor(applier=FakeApplier()).create_generated_folder(analyze(app_folder))

        generated = workspace / "templated" / "my-app"
        assert data["generated_folder"] == str(generated)
        assert data["iteration_type"] == "create_generated_folder"
        assert (generated / ".git_template" / "template.rb").is_file()
        assert not (generated / "x").exists()
        assert analyze(app_folder).development_status == DevelopmentStatus.READY_FOR_TEMPLATE_ITERATION

    def test_refuses_existing_folder(self, workspace, app_folder):
        (workspace / "templated" / "my-app").mkdir(parents=True)
        analysis = analyze(app_folder)

        with pytest.raises(TemplateProcessingError, match="already exists"):
            TemplateProcessor(applier=FakeApplier()).create_generated_folder(analysis)

    def test_requires_application_configuration(self, workspace):
        folder = workspace / "plain"
        (folder / ".git").mkdir(parents=True)

        with pytest.raises(FolderAnalysisError):
            TemplateProcessor(applier=FakeApplier()).create_generated_folder(analyze(folder))


class TestSyncConfiguration:

    def test_copies_configuration(self, workspace, app_folder):
        generated = workspace / "templated" / "my-app"
        generated.mkdir(parents=True)

        data = TemplateProcessor(applier=FakeApplier()).sync_configuration(analyze(app_folder))

        assert data["generated_folder"] == str(generated)
        assert (generated / ".git_template" / "template.rb").is_file()

    def test_requires_generated_folder(self, app_folder):
        with pytest.raises(FolderAnalysisError):
            TemplateProcessor(applier=FakeApplier()).sync_configuration(analyze(app_folder))

    def test_does_not_overwrite_existing_configuration(self, app_folder, generated_folder):
        with pytest.raises(TemplateProcessingError):
            TemplateProcessor(applier=FakeApplier()).sync_configuration(analyze(app_folder))


class TestValidateTemplateCompleteness:

    def test_complete_template(self, tmp_path):
        template = make_template_config(tmp_path / "app")
        reference = write_tree(tmp_path / "reference", {"a": "1", "b/c": "2"})

        outcome = TemplateProcessor(
            applier=FakeApplier({"a": "1", "b/c": "2"})
        ).validate_template_completeness(template, reference)

        assert outcome["complete"] is True
        assert outcome["differences_count"] == 0

    def test_incomplete_template(self, tmp_path):
        template = make_template_config(tmp_path / "app")
        reference = write_tree(tmp_path / "reference", {"a": "1", "b": "2"})

        outcome = TemplateProcessor(
            applier=FakeApplier({"a": "changed"})
        ).validate_template_completeness(template, reference)

        assert outcome["complete"] is False
        assert outcome["differences_count"] == 2
        assert {d["file"] for d in outcome["differences"]} == {"a", "b"}

    def test_reference_configuration_is_ignored(self, tmp_path):
        template = make_template_config(tmp_path / "app")
        reference = tmp_path / "app"
        write_tree(reference, {"a": "1"})

        outcome = TemplateProcessor(
            applier=FakeApplier({"a": "1"})
        ).validate_template_completeness(template, reference)

        assert outcome["complete"] is True

    def test_apply_failure(self, tmp_path):
        template = make_template_config(tmp_path / "app")
        reference = write_tree(tmp_path / "reference", {"a": "1"})

        outcome = TemplateProcessor(
            applier=FakeApplier(success=False)
        ).validate_template_completeness(template, reference)

        assert outcome["complete"] is False
        assert outcome["error"] == "Template application failed"

    def test_invalid_template(self, tmp_path):
        template = tmp_path / "empty_template"
        template.mkdir()
        reference = write_tree(tmp_path / "reference", {"a": "1"})

        with pytest.raises(TemplateValidationError):
            TemplateProcessor(applier=FakeApplier()).validate_template_completeness(template, reference)

    def test_missing_reference(self, tmp_path):
        template = make_template_config(tmp_path / "app")

        with pytest.raises(InvalidPathError):
            TemplateProcessor(applier=FakeApplier()).validate_template_completeness(
                template, tmp_path / "missing"
            )

    def test_inputs_are_not_modified(self, tmp_path):
        template = make_template_config(tmp_path / "app")
        reference = write_tree(tmp_path / "reference", {"a": "1"})

        TemplateProcessor(applier=FakeApplier({"junk": "x"})).validate_template_completeness(
            template, reference
        )

        assert sorted(p.name for p in reference.iterdir()) == ["a"]
        assert sorted(p.name for p in template.iterdir()) == ["template.rb"]
