"""Pytest configuration for test isolation.

Makes the workspace ``packages/`` and ``libs/db/src`` directories importable
without an install, and keeps every test hermetic: the ledger settings read
from the environment are cleared, the working directory (where the CLI looks
for ``.env``) is a per-test temporary directory, and cached SQLAlchemy engines
are disposed after each test so SQLite files can be released. Package
logging configured by a CLI test is torn down again.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

_ROOT = Path(__file__).resolve().parents[1]
sys.path[:0] = [
    p
    for p in [str(_ROOT / "packages"), str(_ROOT / "libs/db/src"), str(_ROOT)]
    if p not in sys.path
]

_LEDGER_ENV = (
    "LEDGER_DATABASE_URL",
    "DATABASE_URL",
    "LEDGER_RULES_FILE",
    "LEDGER_LOG_LEVEL",
    "LEDGER_LOG_FORMAT",
)


@pytest.fixture(autouse=True)
def _isolate_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in _LEDGER_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    yield
    from ledger_db.client import dispose_engines
    from ledger_ingest import logging_setup

    dispose_engines()
    # CLI tests configure logging against a temporary stderr
    pkg = logging.getLogger(logging_setup.PACKAGE_LOGGER)
    for h in list(pkg.handlers):
        pkg.removeHandler(h)
    pkg.setLevel(logging.NOTSET)
    pkg.propagate = True
    logging_setup._configured = False
