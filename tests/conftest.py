"""Shared test fixtures for git-template tests."""
from pathlib import Path

import pytest

from git_template.core.config import IterationConfig
from git_template.services.template_applier import ApplyResult, TemplateApplier


def write_tree(root: Path, files: dict) -> Path:
    """Create ``files`` (relative path -> text) under ``root``."""
    root.mkdir(parents=True, exist_ok=True)
    for rel_path, content in files.items():
        path = root / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return root


def make_template_config(folder: Path, cleanup: str = None) -> Path:
    """Give ``folder`` a minimal valid .git_template directory."""
    config_dir = folder / ".git_template"
    write_tree(config_dir, {"template.rb": "# template entry\n"})
    if cleanup is not None:
        (config_dir / "cleanup.rb").write_text(cleanup)
    return config_dir


class FakeApplier(TemplateApplier):
    """Writes a fixed set of files instead of running a template engine."""

    def __init__(self, files: dict = None, success: bool = True, error: Exception = None):
        self.files = dict(files or {})
        self.success = success
        self.error = error
        self.calls = []

    def apply(self, template_config_path, target_path):
        self.calls.append((Path(template_config_path), Path(target_path)))
        if self.error is not None:
            raise self.error
        write_tree(Path(target_path), self.files)
        return ApplyResult(success=self.success, output="applied\n")


@pytest.fixture
def config():
    """Default runtime configuration."""
    return IterationConfig()


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """Temporary working directory; templated/ is resolved against it."""
    monkeypatch.chdir(tmp_path)
    for name in ("GIT_TEMPLATE_CONFIG", "GIT_TEMPLATE_APPLY_COMMAND",
                 "GIT_TEMPLATE_GENERATED_ROOT", "GIT_TEMPLATE_VERBOSE", "GIT_TEMPLATE_DEBUG"):
        monkeypatch.delenv(name, raising=False)
    return tmp_path


@pytest.fixture
def app_folder(workspace):
    """Git-controlled application folder with a template configuration."""
    folder = write_tree(workspace / "my-app", {"x": "1", "y": "2"})
    (folder / ".git").mkdir()
    make_template_config(folder)
    return folder


@pytest.fixture
def generated_folder(workspace, app_folder):
    """templated/my-app with its own template configuration."""
    folder = workspace / "templated" / "my-app"
    folder.mkdir(parents=True)
    make_template_config(folder)
    return folder
