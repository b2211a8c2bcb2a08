"""Pytest configuration and shared fixtures."""
import os
import sys

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from kubecraft.output import OutputManager, Verbosity, set_output  # noqa: E402
from kubecraft.register import TemplateRegistry  # noqa: E402
from kubecraft.template import Template  # noqa: E402


@pytest.fixture
def manifests_dir(tmp_path):
    """Point rendering at a temporary manifests directory."""
    Template.set_manifests_dir(tmp_path)
    yield tmp_path
    Template.set_manifests_dir(None)


@pytest.fixture(autouse=True)
def reset_global_state(monkeypatch):
    """Keep the registry, output manager and environment isolated between tests."""
    for key in ("KUBECRAFT_RELEASE_NAME", "KUBECRAFT_NAMESPACE", "KUBECRAFT_WRITE_PREVIEWS"):
        monkeypatch.delenv(key, raising=False)
    TemplateRegistry.clear()
    set_output(OutputManager(verbosity=Verbosity.NORMAL))
    yield
    TemplateRegistry.clear()
