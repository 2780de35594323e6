"""Rule engine tables.

Creates companies, users, badges, rules, user_badges and xp_events.
UNIQUE(user_id, badge_id) on user_badges backs idempotent badge grants.

Revision ID: 001_engine_tables
Revises: None
Create Date: 2026-10-19
"""

from collections.abc import Sequence

from alembic import op

revision: str = "001_engine_tables"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # --- Companies ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS companies (
            id VARCHAR(64) PRIMARY KEY,
            name VARCHAR(128) NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    # --- Users ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS users (
            id VARCHAR(64) PRIMARY KEY,
            company_id VARCHAR(64) NOT NULL REFERENCES companies(id) ON DELETE CASCADE,
            display_name VARCHAR(128),
            username VARCHAR(64),
            xp BIGINT NOT NULL DEFAULT 0 CHECK (xp >= 0),
            level INTEGER NOT NULL DEFAULT 1 CHECK (level >= 1),
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_users_company_xp
        ON users(company_id, xp)
    """)

    # --- Badges ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS badges (
            id VARCHAR(64) PRIMARY KEY,
            company_id VARCHAR(64) NOT NULL REFERENCES companies(id) ON DELETE CASCADE,
            name VARCHAR(128) NOT NULL,
            description TEXT,
            icon VARCHAR(256) NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    # --- Rules ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS rules (
            id VARCHAR(64) PRIMARY KEY,
            company_id VARCHAR(64) NOT NULL REFERENCES companies(id) ON DELETE CASCADE,
            name VARCHAR(128) NOT NULL,
            description TEXT,
            event_type VARCHAR(64) NOT NULL,
            xp_amount INTEGER NOT NULL CHECK (xp_amount > 0),
            badge_id VARCHAR(64) REFERENCES badges(id) ON DELETE SET NULL,
            is_active BOOLEAN NOT NULL DEFAULT true,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_rules_company_event
        ON rules(company_id, event_type, is_active)
    """)

    # --- User Badges ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_badges (
            id SERIAL PRIMARY KEY,
            user_id VARCHAR(64) NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            badge_id VARCHAR(64) NOT NULL REFERENCES badges(id) ON DELETE CASCADE,
            earned_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT user_badges_user_id_badge_id_key UNIQUE (user_id, badge_id)
        )
    """)

    # --- XP Ledger ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS xp_events (
            id SERIAL PRIMARY KEY,
            user_id VARCHAR(64) NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            rule_id VARCHAR(64) REFERENCES rules(id) ON DELETE SET NULL,
            xp_amount INTEGER NOT NULL,
            event_data JSONB NOT NULL DEFAULT '{}',
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_xp_events_user
        ON xp_events(user_id, created_at)
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS xp_events CASCADE")
    op.execute("DROP TABLE IF EXISTS user_badges CASCADE")
    op.execute("DROP TABLE IF EXISTS rules CASCADE")
    op.execute("DROP TABLE IF EXISTS badges CASCADE")
    op.execute("DROP TABLE IF EXISTS users CASCADE")
    op.execute("DROP TABLE IF EXISTS companies CASCADE")
