"""005: create balance_requests table

Revision ID: 005
Revises: 004
Create Date: 2026-09-14
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE balance_requests (
            id              BIGSERIAL       PRIMARY KEY,
            user_id         VARCHAR(64)     NOT NULL,
            amount          BIGINT          NOT NULL,
            receipt_ref     VARCHAR(2048)   NOT NULL,
            note            VARCHAR(1000),
            status          VARCHAR(16)     NOT NULL DEFAULT 'PENDING',
            reviewed_by     VARCHAR(64),
            reviewed_at     TIMESTAMPTZ,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_balance_requests_amount_gt_0 CHECK (amount > 0),
            CONSTRAINT ck_balance_requests_status CHECK (
                status IN ('PENDING', 'APPROVED', 'REJECTED')
            )
        );
    """)
    op.execute("CREATE INDEX idx_balance_requests_user ON balance_requests (user_id, id DESC);")
    op.execute("""
        CREATE INDEX idx_balance_requests_pending
        ON balance_requests (id DESC) WHERE status = 'PENDING';
    """)
    op.execute("""
        CREATE TRIGGER trg_balance_requests_updated_at
            BEFORE UPDATE ON balance_requests
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS balance_requests CASCADE;")
