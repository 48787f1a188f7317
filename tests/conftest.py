"""
Pytest fixtures for the payroll test suite.

Provides:
- Structured logging configured once per session, with a per-test
  ``captured_logs`` fixture
- SQLite in-memory database sessions built through the kernel engine helpers
- A deterministic clock
- Common master-data snapshots (onshore/offshore positions, a contract
  with sale rates, projects)
"""

import json
import logging
from datetime import datetime, timezone
from decimal import Decimal
from io import StringIO
from typing import Generator

import pytest
from sqlalchemy.orm import Session

from payroll_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from payroll_kernel.domain.clock import DeterministicClock
from payroll_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from payroll_modules.payroll.models import (
    Contract,
    ContractSaleRate,
    Position,
    Project,
    WorkMode,
)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture payroll_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            aggregate(lines, resolver)
            logs = captured_logs()
            assert any(r["message"] == "payroll_aggregated" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("payroll_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def db_engine():
    """Fresh SQLite in-memory database with all payroll tables."""
    engine = init_engine_from_url("sqlite:///:memory:")
    create_tables()
    yield engine
    drop_tables()
    reset_engine()


@pytest.fixture
def session(db_engine) -> Generator[Session, None, None]:
    """Session on the in-memory database; rolled back after the test."""
    s = get_session()
    yield s
    s.rollback()
    s.close()


# =============================================================================
# Domain fixtures
# =============================================================================


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    return DeterministicClock(datetime(2024, 2, 1, 9, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def welder() -> Position:
    """Position costing 1000/day onshore and 1400/day offshore."""
    return Position(
        id="POS-WELDER",
        onshore_cost_per_day=Decimal("1000"),
        offshore_cost_per_day=Decimal("1400"),
    )


@pytest.fixture
def contract() -> Contract:
    """Contract selling the welder at 1500/day, default OT rules, no holidays."""
    return Contract(
        id="CON-1",
        sale_rates=(
            ContractSaleRate(position_id="POS-WELDER", daily_rate_ex_vat=Decimal("1500")),
        ),
    )


@pytest.fixture
def onshore_project() -> Project:
    return Project(id="PRJ-ON", work_mode=WorkMode.ONSHORE)


@pytest.fixture
def offshore_project() -> Project:
    return Project(id="PRJ-OFF", work_mode=WorkMode.OFFSHORE)
