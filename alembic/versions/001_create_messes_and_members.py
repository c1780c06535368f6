"""001: create messes, mess_members, meal_cutoff_config

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist;")
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_update_timestamp()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = NOW();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)
    op.execute("""
        CREATE TABLE messes (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            name            VARCHAR(100)    NOT NULL,
            address         VARCHAR(200),
            created_by      VARCHAR(64)     NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW()
        );
    """)
    op.execute("""
        CREATE TABLE mess_members (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            mess_id         UUID            NOT NULL REFERENCES messes(id) ON DELETE CASCADE,
            user_id         VARCHAR(64)     NOT NULL,
            display_name    VARCHAR(100),
            role            VARCHAR(10)     NOT NULL DEFAULT 'member',
            status          VARCHAR(10)     NOT NULL DEFAULT 'active',
            join_date       DATE            NOT NULL DEFAULT CURRENT_DATE,
            leave_date      DATE,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_members_role   CHECK (role IN ('manager', 'cook', 'member')),
            CONSTRAINT ck_members_status CHECK (status IN ('active', 'inactive', 'on_leave')),
            -- one manager per mess; deferred so a single UPDATE can swap roles
            CONSTRAINT ex_members_one_manager
                EXCLUDE USING gist (mess_id WITH =) WHERE (role = 'manager')
                DEFERRABLE INITIALLY DEFERRED
        );
    """)
    op.execute("CREATE INDEX idx_members_mess_user ON mess_members (mess_id, user_id);")
    op.execute("""
        CREATE TABLE meal_cutoff_config (
            mess_id             UUID        PRIMARY KEY REFERENCES messes(id) ON DELETE CASCADE,
            breakfast_cutoff    TIME        NOT NULL DEFAULT '21:00',
            lunch_cutoff        TIME        NOT NULL DEFAULT '10:00',
            dinner_cutoff       TIME        NOT NULL DEFAULT '15:00',
            timezone            VARCHAR(64) NOT NULL DEFAULT 'Asia/Dhaka',
            updated_at          TIMESTAMPTZ NOT NULL DEFAULT NOW()
        );
    """)
    for table in ("messes", "mess_members", "meal_cutoff_config"):
        op.execute(f"""
            CREATE TRIGGER trg_{table}_updated_at
                BEFORE UPDATE ON {table}
                FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
        """)
    op.execute(
        "COMMENT ON COLUMN meal_cutoff_config.breakfast_cutoff IS "
        "'Applies to the day before the meal date';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS meal_cutoff_config CASCADE;")
    op.execute("DROP TABLE IF EXISTS mess_members CASCADE;")
    op.execute("DROP TABLE IF EXISTS messes CASCADE;")
    op.execute("DROP FUNCTION IF EXISTS fn_update_timestamp();")
