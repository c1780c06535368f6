"""004: create bazaar_expenses, bazaar_items, transactions, fixed_costs, individual_costs

Revision ID: 004
Revises: 003
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_APPROVAL_COLUMNS = """
            approval_status     VARCHAR(10) NOT NULL DEFAULT 'pending',
            approved_by         UUID        REFERENCES mess_members(id),
            rejection_reason    VARCHAR(500),
            created_by          UUID        NOT NULL REFERENCES mess_members(id),
"""

_APPROVAL_CHECK = "CHECK (approval_status IN ('pending', 'approved', 'rejected'))"


def upgrade() -> None:
    op.execute(f"""
        CREATE TABLE bazaar_expenses (
            id                  UUID        PRIMARY KEY DEFAULT gen_random_uuid(),
            mess_id             UUID        NOT NULL REFERENCES messes(id) ON DELETE CASCADE,
            cycle_id            UUID        NOT NULL REFERENCES mess_cycles(id) ON DELETE CASCADE,
            shopper_id          UUID        NOT NULL REFERENCES mess_members(id),
            expense_date        DATE        NOT NULL,
            notes               VARCHAR(500),
            total_amount_cents  BIGINT      NOT NULL,
            {_APPROVAL_COLUMNS}
            created_at          TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_bazaar_total_gte_0 CHECK (total_amount_cents >= 0),
            CONSTRAINT ck_bazaar_approval {_APPROVAL_CHECK}
        );
    """)
    op.execute("""
        CREATE TABLE bazaar_items (
            id                  BIGSERIAL       PRIMARY KEY,
            expense_id          UUID            NOT NULL REFERENCES bazaar_expenses(id) ON DELETE CASCADE,
            item_name           VARCHAR(100)    NOT NULL,
            quantity            NUMERIC(12, 3)  NOT NULL,
            unit                VARCHAR(20)     NOT NULL DEFAULT 'kg',
            unit_price_cents    BIGINT          NOT NULL,
            total_price_cents   BIGINT          NOT NULL,
            CONSTRAINT ck_items_quantity_gt_0 CHECK (quantity > 0),
            CONSTRAINT ck_items_price_gte_0   CHECK (unit_price_cents >= 0)
        );
    """)
    op.execute(f"""
        CREATE TABLE transactions (
            id                  UUID        PRIMARY KEY DEFAULT gen_random_uuid(),
            mess_id             UUID        NOT NULL REFERENCES messes(id) ON DELETE CASCADE,
            cycle_id            UUID        NOT NULL REFERENCES mess_cycles(id) ON DELETE CASCADE,
            member_id           UUID        NOT NULL REFERENCES mess_members(id),
            amount_cents        BIGINT      NOT NULL,
            payment_method      VARCHAR(20) NOT NULL DEFAULT 'cash',
            reference_no        VARCHAR(100),
            notes               VARCHAR(500),
            {_APPROVAL_COLUMNS}
            created_at          TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_transactions_amount_gt_0 CHECK (amount_cents > 0),
            CONSTRAINT ck_transactions_method CHECK (
                payment_method IN ('cash', 'bkash', 'nagad', 'bank_transfer', 'other')
            ),
            CONSTRAINT ck_transactions_approval {_APPROVAL_CHECK}
        );
    """)
    op.execute("""
        CREATE TABLE fixed_costs (
            id              UUID        PRIMARY KEY DEFAULT gen_random_uuid(),
            mess_id         UUID        NOT NULL REFERENCES messes(id) ON DELETE CASCADE,
            cycle_id        UUID        NOT NULL REFERENCES mess_cycles(id) ON DELETE CASCADE,
            cost_type       VARCHAR(20) NOT NULL,
            description     VARCHAR(200),
            amount_cents    BIGINT      NOT NULL,
            created_by      UUID        NOT NULL REFERENCES mess_members(id),
            created_at      TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_fixed_amount_gt_0 CHECK (amount_cents > 0),
            CONSTRAINT ck_fixed_cost_type CHECK (
                cost_type IN (
                    'cook_salary', 'wifi', 'gas', 'electricity', 'water',
                    'rent', 'cleaning', 'maintenance', 'other'
                )
            )
        );
    """)
    op.execute(f"""
        CREATE TABLE individual_costs (
            id                  UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            mess_id             UUID            NOT NULL REFERENCES messes(id) ON DELETE CASCADE,
            cycle_id            UUID            NOT NULL REFERENCES mess_cycles(id) ON DELETE CASCADE,
            member_id           UUID            NOT NULL REFERENCES mess_members(id),
            description         VARCHAR(200)    NOT NULL,
            amount_cents        BIGINT          NOT NULL,
            {_APPROVAL_COLUMNS}
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_individual_amount_gt_0 CHECK (amount_cents > 0),
            CONSTRAINT ck_individual_approval {_APPROVAL_CHECK}
        );
    """)
    for table in ("bazaar_expenses", "transactions", "fixed_costs", "individual_costs"):
        op.execute(f"CREATE INDEX idx_{table}_cycle ON {table} (cycle_id, created_at DESC);")
        op.execute(f"""
            CREATE TRIGGER trg_{table}_updated_at
                BEFORE UPDATE ON {table}
                FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
        """)
    op.execute("CREATE INDEX idx_bazaar_items_expense ON bazaar_items (expense_id);")
    op.execute("COMMENT ON TABLE transactions IS 'Member cash deposits, amounts in minor units';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS individual_costs CASCADE;")
    op.execute("DROP TABLE IF EXISTS fixed_costs CASCADE;")
    op.execute("DROP TABLE IF EXISTS transactions CASCADE;")
    op.execute("DROP TABLE IF EXISTS bazaar_items CASCADE;")
    op.execute("DROP TABLE IF EXISTS bazaar_expenses CASCADE;")
