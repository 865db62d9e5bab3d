"""
Pytest and unittest configuration for the DICOM MPR Viewer tests.

Adds project src/ to sys.path so tests can import from core and utils.
Run tests from project root with:
  - pytest (pyproject.toml also puts src/ on pythonpath)
  - python -m unittest discover -s tests -p "test_*.py"
"""

import sys
import os

import pytest

# Add src to path so that "from core.xxx" and "from utils.xxx" work
_project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
_src_dir = os.path.join(_project_root, "src")
if _src_dir not in sys.path:
    sys.path.insert(0, _src_dir)


@pytest.fixture(autouse=True)
def _isolated_debug_log(monkeypatch, tmp_path):
    """Keep debug logging off and away from the project tree during tests."""
    monkeypatch.delenv("MPRVIEWER_DEBUG_LOG", raising=False)
    monkeypatch.setenv("MPRVIEWER_DEBUG_LOG_DIR", str(tmp_path / "debug"))
