"""
================================================================================
PYTEST CONFIGURATION
================================================================================

Pytest configuration and shared fixtures for the entire test suite.

Global Fixtures:
    - isolated_paths: points every file path constant at a temp directory
    - test_config: default config dict, never read from disk
    - store: fresh DatabaseManager in the temp directory
    - sample_transactions: a few records with distinct dates

Test Isolation Strategy:
    Each test runs with its own temp working directory; the database,
    config, logs and exports all live there.

================================================================================
"""
import json
import logging
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Ensure project root is on sys.path so `import cli` works without install
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from transaction_vault.core.database import DatabaseManager
from transaction_vault.core.models import Category, Transaction
from transaction_vault.utils import constants
from transaction_vault.utils.config import DEFAULT_CONFIG
from transaction_vault.utils.logger import logger as vault_logger


@pytest.fixture(autouse=True)
def isolated_paths(tmp_path, monkeypatch):
    """Redirect all file locations into tmp_path."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(constants, 'BASE_DIR', tmp_path)
    monkeypatch.setattr(constants, 'OUTPUT_DIR', tmp_path / 'outputs')
    monkeypatch.setattr(constants, 'LOG_DIR', tmp_path / 'outputs' / 'logs')
    monkeypatch.setattr(constants, 'EXPORT_DIR', tmp_path / 'outputs' / 'exports')
    monkeypatch.setattr(constants, 'DB_FILE', tmp_path / 'transactions.db')
    monkeypatch.setattr(constants, 'CONFIG_FILE', tmp_path / 'configs' / 'config.json')
    yield tmp_path


@pytest.fixture
def test_config():
    return json.loads(json.dumps(DEFAULT_CONFIG))


@pytest.fixture
def store(tmp_path):
    db = DatabaseManager(tmp_path / 'transactions.db')
    yield db
    db.close()


@pytest.fixture
def other_store(tmp_path):
    db = DatabaseManager(tmp_path / 'other' / 'transactions.db')
    yield db
    db.close()


@pytest.fixture
def sample_transactions():
    base = datetime(2025, 1, 1)
    return [
        Transaction(name="Desk", date=base, amount=199.0, category=Category.EXPENSE),
        Transaction(name="Salary", date=base + timedelta(days=14), amount=4200.5,
                    category=Category.INCOME),
        Transaction(name="Café ☕", date=datetime(2024, 12, 24, 8, 30, 15, 123456),
                    amount=3.75, category=Category.EXPENSE),
        Transaction(name="Refund", date=datetime(2025, 2, 3, 12, 0, tzinfo=timezone.utc),
                    amount=0.1, category=Category.INCOME),
    ]


@pytest.fixture(autouse=True)
def reset_logger():
    """Drop handlers added by setup_logging so they don't outlive captured streams."""
    yield
    for h in list(vault_logger.handlers):
        vault_logger.removeHandler(h)
        h.close()
    vault_logger.setLevel(logging.INFO)
