"""Root conftest: test environment, structlog routing and shared settings fixtures."""

from pathlib import Path

import pytest
import structlog
from dotenv import load_dotenv

from shared.logging import _serialize_enums
from shared.settings import ScorecardSettings, StorageBackend

load_dotenv(Path(__file__).resolve().parent.parent / ".env.tests")

# Route structlog through stdlib logging so caplog sees service log events.
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        _serialize_enums,
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ],
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=False,
)


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Prevent context leaking between tests."""
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()


@pytest.fixture
def file_settings(tmp_path: Path) -> ScorecardSettings:
    """Settings pointing file and SQLite storage into a per-test directory."""
    return ScorecardSettings(
        storage_backend=StorageBackend.FILE,
        storage_path=str(tmp_path / "game.json"),
        database_path=str(tmp_path / "scorecard.db"),
    )
