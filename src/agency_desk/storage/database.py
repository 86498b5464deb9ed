"""Database connection and access layer."""

import json
import sqlite3
import uuid
from datetime import date, datetime
from pathlib import Path
from types import MappingProxyType
from typing import Any

from agency_desk.common.logging import get_logger
from agency_desk.common.time_utils import utc_now
from agency_desk.domain.models import (
    AgentRole,
    AgentStatus,
    Business,
    Category,
    Entry,
    ManagedAgent,
    RedeemType,
    ReferralCode,
    SettingList,
    Source,
    TenantSettings,
)
from agency_desk.domain.store import EntityStore
from agency_desk.storage.interfaces import AuthUser, BackendError, IBackendStore
from agency_desk.storage.schema import MIGRATIONS, SCHEMA_VERSION

logger = get_logger(__name__)

ENTRY_SEQUENCE = "entry_id"

BUSINESS_FIELDS = ("business_name", "owner_name", "email", "phone", "logo_url")


class Database(IBackendStore):
    """SQLite database connection and operations."""

    def __init__(self, db_path: str | Path):
        """Initialize database connection.

        Args:
            db_path: Path to SQLite database file.
        """
        self.db_path = Path(db_path)
        self._connection: sqlite3.Connection | None = None

    def connect(self) -> None:
        """Open database connection."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._connection = sqlite3.connect(str(self.db_path))
        self._connection.row_factory = sqlite3.Row
        self._connection.execute("PRAGMA foreign_keys = ON")
        self._connection.execute("PRAGMA journal_mode = WAL")

        logger.info("database_connected", path=str(self.db_path))

    def close(self) -> None:
        """Close database connection."""
        if self._connection:
            self._connection.close()
            self._connection = None
            logger.info("database_closed", path=str(self.db_path))

    def __enter__(self) -> "Database":
        self.connect()
        self.migrate()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    @property
    def connection(self) -> sqlite3.Connection:
        """Get active connection, raising if not connected."""
        if self._connection is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._connection

    def migrate(self) -> None:
        """Apply database migrations."""
        conn = self.connection
        cursor = conn.cursor()
        current_version = self.get_schema_version()

        for version in sorted(MIGRATIONS.keys()):
            if version > current_version:
                logger.info("applying_migration", version=version)
                cursor.executescript(MIGRATIONS[version])
                cursor.execute(
                    "INSERT INTO schema_version (version) VALUES (?)",
                    (version,),
                )
                conn.commit()
                logger.info("migration_applied", version=version)

        logger.info(
            "migrations_complete",
            from_version=current_version,
            to_version=SCHEMA_VERSION,
        )

    def get_schema_version(self) -> int:
        """Get current schema version."""
        cursor = self.connection.cursor()
        cursor.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name='schema_version'"
        )
        if cursor.fetchone() is None:
            return 0
        cursor.execute("SELECT MAX(version) FROM schema_version")
        row = cursor.fetchone()
        return row[0] if row[0] is not None else 0

    # --- Auth user operations ---

    def create_auth_user(self, email: str, password_hash: str) -> AuthUser:
        """Create sign-in credentials.

        Args:
            email: Login email, stored lowercased.
            password_hash: bcrypt hash of the password.

        Returns:
            The created user.

        Raises:
            BackendError: If the email is already registered.
        """
        user = AuthUser(id=str(uuid.uuid4()), email=email.strip().lower(), password_hash=password_hash)
        try:
            with self.connection:
                self.connection.execute(
                    """
                    INSERT INTO auth_users (id, email, password_hash, created_at)
                    VALUES (?, ?, ?, ?)
                    """,
                    (user.id, user.email, user.password_hash, user.created_at.isoformat()),
                )
        except sqlite3.IntegrityError as e:
            raise BackendError("User already registered", operation="create_auth_user") from e
        logger.info("auth_user_created", user_id=user.id)
        return user

    def get_auth_user_by_email(self, email: str) -> AuthUser | None:
        """Get credentials by email (case-insensitive)."""
        cursor = self.connection.cursor()
        cursor.execute("SELECT * FROM auth_users WHERE email = ?", (email.strip(),))
        row = cursor.fetchone()
        if row is None:
            return None
        return AuthUser(
            id=row["id"],
            email=row["email"],
            password_hash=row["password_hash"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    # --- Business operations ---

    def find_business_by_email(self, email: str) -> Business | None:
        """Get a business by its contact email (case-insensitive)."""
        cursor = self.connection.cursor()
        cursor.execute("SELECT * FROM businesses WHERE email = ?", (email.strip(),))
        row = cursor.fetchone()
        return self._row_to_business(row) if row else None

    def find_business_by_auth_user(self, auth_user_id: str) -> Business | None:
        """Get the business owned by an auth user."""
        cursor = self.connection.cursor()
        cursor.execute("SELECT * FROM businesses WHERE auth_user_id = ?", (auth_user_id,))
        row = cursor.fetchone()
        return self._row_to_business(row) if row else None

    def get_business(self, business_id: str) -> Business | None:
        """Get a business by id."""
        cursor = self.connection.cursor()
        cursor.execute("SELECT * FROM businesses WHERE id = ?", (business_id,))
        row = cursor.fetchone()
        return self._row_to_business(row) if row else None

    def create_business(self, business: Business) -> Business:
        """Insert a new business.

        Raises:
            BackendError: If the email is already used by another business.
        """
        try:
            with self.connection:
                self.connection.execute(
                    """
                    INSERT INTO businesses
                        (id, business_name, owner_name, email, phone, logo_url,
                         auth_user_id, created_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        business.id,
                        business.business_name,
                        business.owner_name,
                        business.email,
                        business.phone,
                        business.logo_url,
                        business.auth_user_id,
                        business.created_at.isoformat(),
                    ),
                )
        except sqlite3.IntegrityError as e:
            raise BackendError(
                f"Business could not be created: {e}", operation="create_business"
            ) from e
        logger.info("business_created", business_id=business.id)
        return business

    def update_business(self, business_id: str, **fields: Any) -> Business:
        """Update profile fields of a business.

        Args:
            business_id: Business to update.
            **fields: Any of business_name, owner_name, email, phone, logo_url.

        Returns:
            The updated business.

        Raises:
            ValueError: If an unknown field is given.
            BackendError: If the business does not exist.
        """
        unknown = set(fields) - set(BUSINESS_FIELDS)
        if unknown:
            raise ValueError(f"Unknown business fields: {', '.join(sorted(unknown))}")

        if fields:
            assignments = ", ".join(f"{name} = ?" for name in fields)
            try:
                with self.connection:
                    self.connection.execute(
                        f"UPDATE businesses SET {assignments} WHERE id = ?",
                        (*fields.values(), business_id),
                    )
            except sqlite3.IntegrityError as e:
                raise BackendError(
                    f"Business could not be updated: {e}", operation="update_business"
                ) from e

        business = self.get_business(business_id)
        if business is None:
            raise BackendError(f"Business {business_id} not found", operation="update_business")
        logger.info("business_updated", business_id=business_id, fields=sorted(fields))
        return business

    def _row_to_business(self, row: sqlite3.Row) -> Business:
        """Convert database row to Business object."""
        return Business(
            id=row["id"],
            business_name=row["business_name"],
            owner_name=row["owner_name"],
            email=row["email"],
            phone=row["phone"],
            logo_url=row["logo_url"],
            auth_user_id=row["auth_user_id"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    # --- Store operations ---

    def load_store(self) -> EntityStore:
        """Load every tenant's entries, agents and settings.

        Returns:
            A fresh EntityStore with the persisted entry id sequence.
        """
        cursor = self.connection.cursor()

        cursor.execute("SELECT * FROM entries ORDER BY id")
        entries = tuple(self._row_to_entry(row) for row in cursor.fetchall())

        cursor.execute("SELECT * FROM agents ORDER BY business_id, position, rowid")
        agents = tuple(self._row_to_agent(row) for row in cursor.fetchall())

        cursor.execute("SELECT * FROM tenant_settings")
        settings = {row["business_id"]: self._row_to_settings(row) for row in cursor.fetchall()}

        cursor.execute("SELECT value FROM sequences WHERE name = ?", (ENTRY_SEQUENCE,))
        row = cursor.fetchone()
        last_entry_id = row["value"] if row else 0

        logger.info(
            "store_loaded",
            entries=len(entries),
            agents=len(agents),
            tenants_with_settings=len(settings),
        )
        return EntityStore(
            entries=entries,
            agents=agents,
            settings=MappingProxyType(settings),
            last_entry_id=last_entry_id,
        )

    def save_tenant(self, store: EntityStore, tenant_id: str) -> None:
        """Persist one tenant's slice of the store in a single transaction.

        The tenant's entry and agent rows are replaced, its settings are
        upserted when the store holds any, and the entry id sequence is
        advanced to the store's high-water mark.

        Raises:
            BackendError: If the write fails. Nothing is committed.
        """
        entries = store.entries_for_tenant(tenant_id)
        agents = store.agents_for_tenant(tenant_id)

        try:
            with self.connection as conn:
                conn.execute("DELETE FROM entries WHERE business_id = ?", (tenant_id,))
                conn.executemany(
                    """
                    INSERT INTO entries
                        (id, business_id, date, agent_name, category, page_name,
                         username, amount, points_load, platform, source,
                         referral_code, redeem_type, payment_method, player_history)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    [self._entry_params(e) for e in entries],
                )

                conn.execute("DELETE FROM agents WHERE business_id = ?", (tenant_id,))
                conn.executemany(
                    """
                    INSERT INTO agents
                        (id, business_id, position, agent_name, username,
                         password_hash, role, status)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    [
                        (
                            a.id,
                            a.business_id,
                            position,
                            a.agent_name,
                            a.username,
                            a.password_hash,
                            a.role.value,
                            a.status.value,
                        )
                        for position, a in enumerate(agents)
                    ],
                )

                if tenant_id in store.settings:
                    settings = store.settings[tenant_id]
                    conn.execute(
                        """
                        INSERT INTO tenant_settings
                            (business_id, page_names, platforms, payment_methods,
                             player_histories, updated_at)
                        VALUES (?, ?, ?, ?, ?, ?)
                        ON CONFLICT(business_id) DO UPDATE SET
                            page_names = excluded.page_names,
                            platforms = excluded.platforms,
                            payment_methods = excluded.payment_methods,
                            player_histories = excluded.player_histories,
                            updated_at = excluded.updated_at
                        """,
                        (
                            tenant_id,
                            *(json.dumps(list(settings.values(key))) for key in SettingList),
                            utc_now().isoformat(),
                        ),
                    )

                conn.execute(
                    """
                    INSERT INTO sequences (name, value) VALUES (?, ?)
                    ON CONFLICT(name) DO UPDATE SET value = MAX(value, excluded.value)
                    """,
                    (ENTRY_SEQUENCE, store.last_entry_id),
                )
        except sqlite3.Error as e:
            logger.error("tenant_save_failed", tenant_id=tenant_id, error=str(e))
            raise BackendError(f"Could not save data: {e}", operation="save_tenant") from e

        logger.debug(
            "tenant_saved", tenant_id=tenant_id, entries=len(entries), agents=len(agents)
        )

    # --- Row conversion ---

    def _entry_params(self, entry: Entry) -> tuple[Any, ...]:
        return (
            entry.id,
            entry.business_id,
            entry.date.isoformat(),
            entry.agent_name,
            entry.category.value,
            entry.page_name,
            entry.username,
            entry.amount,
            entry.points_load,
            entry.platform,
            entry.source.value,
            entry.referral_code.value,
            entry.redeem_type.value,
            entry.payment_method,
            entry.player_history,
        )

    def _row_to_entry(self, row: sqlite3.Row) -> Entry:
        """Convert database row to Entry object."""
        return Entry(
            id=row["id"],
            business_id=row["business_id"],
            date=date.fromisoformat(row["date"]),
            agent_name=row["agent_name"],
            category=Category(row["category"]),
            page_name=row["page_name"],
            username=row["username"],
            amount=float(row["amount"]),
            points_load=int(row["points_load"]),
            platform=row["platform"],
            source=Source(row["source"]),
            referral_code=ReferralCode(row["referral_code"]),
            redeem_type=RedeemType(row["redeem_type"]),
            payment_method=row["payment_method"],
            player_history=row["player_history"],
        )

    def _row_to_agent(self, row: sqlite3.Row) -> ManagedAgent:
        """Convert database row to ManagedAgent object."""
        return ManagedAgent(
            id=row["id"],
            business_id=row["business_id"],
            agent_name=row["agent_name"],
            username=row["username"],
            password_hash=row["password_hash"],
            role=AgentRole(row["role"]),
            status=AgentStatus(row["status"]),
        )

    def _row_to_settings(self, row: sqlite3.Row) -> TenantSettings:
        """Convert database row to TenantSettings object."""
        return TenantSettings(
            **{key.value: tuple(json.loads(row[key.value])) for key in SettingList}
        )

    # --- Raw access ---

    def execute(self, sql: str, params: tuple[Any, ...] = ()) -> sqlite3.Cursor:
        """Execute raw SQL.

        Args:
            sql: SQL statement.
            params: Query parameters.

        Returns:
            Cursor with results.
        """
        return self.connection.execute(sql, params)
