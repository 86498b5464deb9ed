"""SQLite database schema definitions."""

SCHEMA_VERSION = 2

SCHEMA_SQL = """
-- Schema version tracking
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY,
    applied_at TEXT NOT NULL DEFAULT (datetime('now'))
);

-- Sign-in credentials for business owners
CREATE TABLE IF NOT EXISTS auth_users (
    id TEXT PRIMARY KEY,
    email TEXT UNIQUE NOT NULL COLLATE NOCASE,
    password_hash TEXT NOT NULL,
    created_at TEXT NOT NULL DEFAULT (datetime('now'))
);

-- Tenants
CREATE TABLE IF NOT EXISTS businesses (
    id TEXT PRIMARY KEY,
    business_name TEXT NOT NULL,
    owner_name TEXT NOT NULL,
    email TEXT UNIQUE NOT NULL COLLATE NOCASE,
    phone TEXT NOT NULL DEFAULT '',
    logo_url TEXT,
    auth_user_id TEXT REFERENCES auth_users(id),
    created_at TEXT NOT NULL DEFAULT (datetime('now'))
);

CREATE INDEX IF NOT EXISTS idx_businesses_auth_user ON businesses(auth_user_id);

-- Player transactions
CREATE TABLE IF NOT EXISTS entries (
    id INTEGER PRIMARY KEY,
    business_id TEXT NOT NULL REFERENCES businesses(id),
    date TEXT NOT NULL,
    agent_name TEXT NOT NULL,
    category TEXT NOT NULL,
    page_name TEXT NOT NULL,
    username TEXT NOT NULL,
    amount REAL NOT NULL DEFAULT 0.0,
    points_load INTEGER NOT NULL DEFAULT 0,
    platform TEXT NOT NULL,
    source TEXT NOT NULL,
    referral_code TEXT NOT NULL,
    redeem_type TEXT NOT NULL,
    payment_method TEXT NOT NULL DEFAULT '',
    player_history TEXT NOT NULL DEFAULT ''
);

CREATE INDEX IF NOT EXISTS idx_entries_business ON entries(business_id);
CREATE INDEX IF NOT EXISTS idx_entries_date ON entries(date);

-- Managed agents (registration order kept in position)
CREATE TABLE IF NOT EXISTS agents (
    id TEXT PRIMARY KEY,
    business_id TEXT NOT NULL REFERENCES businesses(id),
    position INTEGER NOT NULL DEFAULT 0,
    agent_name TEXT NOT NULL,
    username TEXT NOT NULL,
    password_hash TEXT NOT NULL,
    role TEXT NOT NULL DEFAULT 'Viewer',
    status TEXT NOT NULL DEFAULT 'active'
);

CREATE UNIQUE INDEX IF NOT EXISTS idx_agents_username
    ON agents(business_id, username COLLATE NOCASE);

-- Per-tenant option lists (JSON arrays)
CREATE TABLE IF NOT EXISTS tenant_settings (
    business_id TEXT PRIMARY KEY REFERENCES businesses(id),
    page_names TEXT NOT NULL DEFAULT '[]',
    platforms TEXT NOT NULL DEFAULT '[]',
    payment_methods TEXT NOT NULL DEFAULT '[]',
    player_histories TEXT NOT NULL DEFAULT '[]',
    updated_at TEXT NOT NULL DEFAULT (datetime('now'))
);

-- Monotonic id counters
CREATE TABLE IF NOT EXISTS sequences (
    name TEXT PRIMARY KEY,
    value INTEGER NOT NULL DEFAULT 0
);
"""

# Migration 2: lookup indexes for report queries run outside the desk
MIGRATION_2_REPORT_INDEXES = """
CREATE INDEX IF NOT EXISTS idx_entries_business_date ON entries(business_id, date);
CREATE INDEX IF NOT EXISTS idx_entries_referral_code ON entries(referral_code);
CREATE INDEX IF NOT EXISTS idx_agents_business ON agents(business_id, position);
"""

MIGRATIONS: dict[int, str] = {
    1: SCHEMA_SQL,
    2: MIGRATION_2_REPORT_INDEXES,
}
