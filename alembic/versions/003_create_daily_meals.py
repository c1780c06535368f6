"""003: create daily_meals

Revision ID: 003
Revises: 002
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE daily_meals (
            id                  BIGSERIAL   PRIMARY KEY,
            mess_id             UUID        NOT NULL REFERENCES messes(id) ON DELETE CASCADE,
            cycle_id            UUID        NOT NULL REFERENCES mess_cycles(id) ON DELETE CASCADE,
            member_id           UUID        NOT NULL REFERENCES mess_members(id) ON DELETE CASCADE,
            meal_date           DATE        NOT NULL,
            breakfast           BOOLEAN     NOT NULL DEFAULT FALSE,
            lunch               BOOLEAN     NOT NULL DEFAULT FALSE,
            dinner              BOOLEAN     NOT NULL DEFAULT FALSE,
            guest_breakfast     SMALLINT    NOT NULL DEFAULT 0,
            guest_lunch         SMALLINT    NOT NULL DEFAULT 0,
            guest_dinner        SMALLINT    NOT NULL DEFAULT 0,
            created_at          TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_daily_meals_member_date UNIQUE (member_id, meal_date),
            CONSTRAINT ck_daily_meals_guests CHECK (
                guest_breakfast BETWEEN 0 AND 10
                AND guest_lunch BETWEEN 0 AND 10
                AND guest_dinner BETWEEN 0 AND 10
            )
        );
    """)
    op.execute("CREATE INDEX idx_daily_meals_cycle ON daily_meals (cycle_id);")
    op.execute("CREATE INDEX idx_daily_meals_mess_date ON daily_meals (mess_id, meal_date);")
    op.execute("""
        CREATE TRIGGER trg_daily_meals_updated_at
            BEFORE UPDATE ON daily_meals
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS daily_meals CASCADE;")
