"""005: create activity_log

Revision ID: 005
Revises: 004
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE activity_log (
            id          BIGSERIAL       PRIMARY KEY,
            mess_id     UUID            NOT NULL REFERENCES messes(id) ON DELETE CASCADE,
            actor_id    VARCHAR(64),
            action      VARCHAR(40)     NOT NULL,
            details     JSONB           NOT NULL DEFAULT '{}'::jsonb,
            created_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW()
        );
    """)
    op.execute("CREATE INDEX idx_activity_mess_time ON activity_log (mess_id, created_at DESC);")
    op.execute("COMMENT ON TABLE activity_log IS 'Append-only audit trail, written in the same transaction as the action';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS activity_log CASCADE;")
