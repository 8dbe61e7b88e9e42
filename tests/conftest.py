"""
SecureVault Test Configuration
==============================

[QA] Central pytest configuration with fixtures for all test types:
- Unit tests: Isolated, fast, low mining difficulty
- E2E tests: Full session stack with a real SQLite snapshot store

[FIXTURES]
- key_pair: Fresh Ed25519 session key pair
- blockchain: Ledger with difficulty 2
- vault_session: Initialized in-memory VaultSession
- isolated_db_file: Per-test temporary database

Usage:
    pytest tests/unit/          # Fast unit tests
    pytest tests/e2e/           # End-to-end tests
"""

import asyncio
import logging
import shutil
import sys
import tempfile
from pathlib import Path
from typing import AsyncGenerator, Generator

import pytest
import pytest_asyncio

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

# Low difficulty keeps mining in the millisecond range
TEST_DIFFICULTY = 2


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "e2e: End-to-end tests (full stack)")
    config.addinivalue_line("markers", "slow: Slow tests (skip with -m 'not slow')")


def pytest_collection_modifyitems(config, items):
    """Auto-mark tests based on their path."""
    for item in items:
        if "/unit/" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "/e2e/" in str(item.fspath):
            item.add_marker(pytest.mark.e2e)


# ============================================================================
# Logging Configuration
# ============================================================================

@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    """Configure logging for tests."""
    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ============================================================================
# Temporary Directory Fixtures
# ============================================================================

@pytest.fixture(scope="function")
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    temp_path = Path(tempfile.mkdtemp(prefix="securevault_test_"))
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture(scope="function")
def isolated_db_file(temp_dir: Path) -> Generator[Path, None, None]:
    """Create isolated database file for persistence tests."""
    db_path = temp_dir / "test_vault.db"
    yield db_path
    if db_path.exists():
        db_path.unlink()


# ============================================================================
# Crypto Fixtures
# ============================================================================

@pytest.fixture(scope="function")
def key_pair():
    """Fresh session key pair for each test."""
    from core.crypto import KeyPair
    return KeyPair.generate()


@pytest.fixture(scope="function")
def other_key_pair():
    """Second, unrelated key pair."""
    from core.crypto import KeyPair
    return KeyPair.generate()


# ============================================================================
# Ledger / Session Fixtures
# ============================================================================

@pytest.fixture(scope="function")
def blockchain():
    """Ledger with just the genesis block."""
    from ledger.chain import Blockchain
    return Blockchain(difficulty=TEST_DIFFICULTY)


@pytest.fixture(scope="function")
def event_bus():
    """Private event bus so tests never see each other's listeners."""
    from core.events import EventBus
    return EventBus()


@pytest_asyncio.fixture(scope="function")
async def vault_session(event_bus) -> AsyncGenerator:
    """Initialized session without a snapshot store."""
    from vault.session import VaultSession

    session = VaultSession(difficulty=TEST_DIFFICULTY, bus=event_bus)
    await session.initialize()
    yield session


@pytest_asyncio.fixture(scope="function")
async def persistent_session(isolated_db_file: Path, event_bus) -> AsyncGenerator:
    """Initialized session writing snapshots to a temporary database."""
    from core.persistence import VaultStore
    from vault.session import VaultSession

    store = VaultStore(str(isolated_db_file), backup_path=None)
    session = VaultSession(store=store, difficulty=TEST_DIFFICULTY, bus=event_bus)
    await session.initialize()
    yield session


# ============================================================================
# Test Data
# ============================================================================

@pytest.fixture(scope="function")
def smart_id_data():
    """Filled-in Smart ID template for one person."""
    return {
        "fullName": "AHMAD BIN ABDULLAH",
        "icNumber": "901231-14-5677",
        "dateOfBirth": "31/12/1990",
        "placeOfBirth": "Kuala Lumpur",
        "gender": "Male",
        "race": "Malay",
        "religion": "Islam",
        "citizenship": "Malaysian Citizen",
        "addressLine1": "No. 123, Jalan Merdeka",
        "addressLine2": "",
        "postcode": "50000",
        "city": "Kuala Lumpur",
        "state": "W.P. Kuala Lumpur",
    }


@pytest.fixture(scope="function")
def async_timeout():
    """Helper for async test timeouts."""
    async def _timeout(coro, seconds: float = 10.0):
        return await asyncio.wait_for(coro, timeout=seconds)
    return _timeout
