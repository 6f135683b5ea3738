import os
import sys
from pathlib import Path

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'packstate' and tests/ importable for 'helpers'
for p in (SRC_ROOT, TESTS_ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))


from helpers.cache_utils import reset_packstate_caches  # noqa: E402


@pytest.fixture(autouse=True)
def _isolate_packstate_env(monkeypatch):
    """Drop developer ``PACKSTATE_*`` overrides and reset caches around each test."""
    for key in list(os.environ.keys()):
        if key.startswith("PACKSTATE_"):
            monkeypatch.delenv(key, raising=False)
    reset_packstate_caches()
    yield
    reset_packstate_caches()


@pytest.fixture
def isolated_project_env(tmp_path, monkeypatch):
    """
    Isolated project for tests.

    Creates ``<tmp>/.packstate`` and ``<tmp>/Packages`` and points
    ``PACKSTATE_PROJECT_ROOT`` at the temporary directory.
    """
    (tmp_path / ".packstate" / "config").mkdir(parents=True)
    (tmp_path / "Packages").mkdir()
    monkeypatch.setenv("PACKSTATE_PROJECT_ROOT", str(tmp_path))
    monkeypatch.chdir(tmp_path)
    reset_packstate_caches()
    return tmp_path


@pytest.fixture
def packages_dir(isolated_project_env: Path) -> Path:
    return isolated_project_env / "Packages"
