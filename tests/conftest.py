from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

sys.path.insert(0, str(Path(__file__).resolve().parent))

from PySide6.QtCore import QCoreApplication  # noqa: E402

from taskpulse.core import exception_logging, logging_config, paths  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def qapp():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture(autouse=True)
def app_data_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("APPDATA", str(tmp_path / "roaming"))
    monkeypatch.setattr(paths, "_DATA_DIR_OVERRIDE", None)
    paths.app_data_dir.cache_clear()
    yield paths.app_data_dir()
    exception_logging.uninstall_global_exception_logger()
    logging_config.reset_logging()
    paths.app_data_dir.cache_clear()
