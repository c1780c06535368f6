"""002: create mess_cycles, cycle_opening_balances, month_snapshots

Revision ID: 002
Revises: 001
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE mess_cycles (
            id                      UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            mess_id                 UUID            NOT NULL REFERENCES messes(id) ON DELETE CASCADE,
            name                    VARCHAR(100)    NOT NULL,
            start_date              DATE            NOT NULL,
            end_date                DATE            NOT NULL,
            status                  VARCHAR(10)     NOT NULL DEFAULT 'open',
            final_meal_rate_cents   BIGINT,
            opening_balance_cents   BIGINT          NOT NULL DEFAULT 0,
            closed_at               TIMESTAMPTZ,
            created_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_cycles_status CHECK (status IN ('open', 'closed', 'archived')),
            CONSTRAINT ck_cycles_dates  CHECK (end_date >= start_date),
            CONSTRAINT ck_cycles_rate_frozen CHECK (
                status = 'open' OR final_meal_rate_cents IS NOT NULL
            )
        );
    """)
    op.execute("""
        CREATE UNIQUE INDEX uq_cycles_one_open_per_mess
        ON mess_cycles (mess_id)
        WHERE status = 'open';
    """)
    op.execute("CREATE INDEX idx_cycles_mess_start ON mess_cycles (mess_id, start_date DESC);")
    op.execute("""
        CREATE TRIGGER trg_mess_cycles_updated_at
            BEFORE UPDATE ON mess_cycles
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("""
        CREATE TABLE cycle_opening_balances (
            cycle_id        UUID        NOT NULL REFERENCES mess_cycles(id) ON DELETE CASCADE,
            member_id       UUID        NOT NULL REFERENCES mess_members(id) ON DELETE CASCADE,
            amount_cents    BIGINT      NOT NULL,
            created_at      TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            PRIMARY KEY (cycle_id, member_id)
        );
    """)
    op.execute("""
        CREATE TABLE month_snapshots (
            cycle_id                    UUID        NOT NULL REFERENCES mess_cycles(id) ON DELETE CASCADE,
            member_id                   UUID        NOT NULL REFERENCES mess_members(id) ON DELETE CASCADE,
            total_meals                 INTEGER     NOT NULL,
            meal_rate_cents             BIGINT      NOT NULL,
            total_meal_cost_cents       BIGINT      NOT NULL,
            total_fixed_cost_cents      BIGINT      NOT NULL,
            total_individual_cost_cents BIGINT      NOT NULL,
            total_deposits_cents        BIGINT      NOT NULL,
            opening_balance_cents       BIGINT      NOT NULL,
            closing_balance_cents       BIGINT      NOT NULL,
            created_at                  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            PRIMARY KEY (cycle_id, member_id)
        );
    """)
    op.execute("COMMENT ON TABLE month_snapshots IS 'Written once by month close, never updated';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS month_snapshots CASCADE;")
    op.execute("DROP TABLE IF EXISTS cycle_opening_balances CASCADE;")
    op.execute("DROP TABLE IF EXISTS mess_cycles CASCADE;")
