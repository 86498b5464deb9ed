"""Pytest configuration and fixtures."""

import itertools
import tempfile
from datetime import date
from pathlib import Path
from typing import Any, Callable

import pytest
import yaml

from agency_desk.auth.passwords import PasswordHasher
from agency_desk.common.config import AppConfig, load_config
from agency_desk.domain.models import (
    Business,
    Category,
    Entry,
    RedeemType,
    ReferralCode,
    TenantContext,
    source_for_code,
)
from agency_desk.storage.database import Database

TENANT_A = "biz_a"
TENANT_B = "biz_b"


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def dev_config_path(temp_dir: Path) -> Path:
    """Create a temporary dev config file."""
    config_data = {
        "environment": "test",
        "database": {
            "path": str(temp_dir / "test.db"),
        },
        "logging": {
            "level": "DEBUG",
            "format": "console",
            "log_file": None,
        },
        "ai": {
            "enabled": True,
            "api_key": "test_key",
            "model": "gemini-2.5-flash",
            "timeout_seconds": 10,
        },
        "desk": {
            "bcrypt_rounds": 4,
            "default_rows_per_page": 25,
        },
    }
    config_path = temp_dir / "test_config.yaml"
    with open(config_path, "w") as f:
        yaml.dump(config_data, f)
    return config_path


@pytest.fixture
def config(dev_config_path: Path, monkeypatch: pytest.MonkeyPatch) -> AppConfig:
    """Load test configuration."""
    for var in ("AGENCY_DB_PATH", "GEMINI_API_KEY", "API_KEY", "AGENCY_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    return load_config(dev_config_path)


@pytest.fixture
def db(temp_dir: Path) -> Database:
    """Create a test database."""
    db_path = temp_dir / "test.db"
    database = Database(db_path)
    database.connect()
    database.migrate()
    yield database
    database.close()


@pytest.fixture
def db_with_tenants(db: Database) -> Database:
    """Test database with both test tenants registered."""
    for tenant_id, email in ((TENANT_A, "a@example.com"), (TENANT_B, "b@example.com")):
        db.create_business(
            Business(
                id=tenant_id,
                business_name=f"Business {tenant_id}",
                owner_name=f"Owner {tenant_id}",
                email=email,
            )
        )
    return db


@pytest.fixture
def hasher() -> PasswordHasher:
    """Fast bcrypt hasher (minimum cost factor)."""
    return PasswordHasher(rounds=4)


@pytest.fixture
def ctx() -> TenantContext:
    """Admin context for tenant A."""
    return TenantContext(tenant_id=TENANT_A, actor="Owner A")


@pytest.fixture
def other_ctx() -> TenantContext:
    """Admin context for tenant B."""
    return TenantContext(tenant_id=TENANT_B, actor="Owner B")


@pytest.fixture
def make_entry() -> Callable[..., Entry]:
    """Factory for stored entries with sensible defaults."""
    ids = itertools.count(1)

    def factory(**overrides: Any) -> Entry:
        code = overrides.pop("referral_code", ReferralCode.FR2K)
        values: dict[str, Any] = {
            "id": next(ids),
            "business_id": TENANT_A,
            "date": date(2024, 5, 10),
            "agent_name": "ali",
            "category": Category.RECHARGE,
            "page_name": "Gaming Slots",
            "username": "player1",
            "amount": 0.0,
            "points_load": 0,
            "platform": "Juwa",
            "source": source_for_code(code),
            "referral_code": code,
            "redeem_type": RedeemType.ALREADY_PAID,
            "payment_method": "CashApp",
            "player_history": "Null",
        }
        values.update(overrides)
        return Entry(**values)

    return factory
