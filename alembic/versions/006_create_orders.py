"""006: create orders table

Revision ID: 006
Revises: 005
Create Date: 2026-09-14
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # No FK to services: an order keeps its name/price snapshot after the
    # service or its category is deleted.
    op.execute("""
        CREATE TABLE orders (
            id              BIGSERIAL       PRIMARY KEY,
            user_id         VARCHAR(64)     NOT NULL,
            service_id      VARCHAR(64)     NOT NULL,
            service_name    VARCHAR(255)    NOT NULL,
            quantity        BIGINT          NOT NULL,
            unit_price      BIGINT          NOT NULL,
            total_price     BIGINT          NOT NULL,
            status          VARCHAR(16)     NOT NULL DEFAULT 'PENDING',
            note            VARCHAR(1000),
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_orders_quantity_gt_0 CHECK (quantity > 0),
            CONSTRAINT ck_orders_total_gt_0 CHECK (total_price > 0),
            CONSTRAINT ck_orders_status CHECK (
                status IN ('PENDING', 'PROCESSING', 'COMPLETED', 'CANCELLED')
            )
        );
    """)
    op.execute("CREATE INDEX idx_orders_user ON orders (user_id, id DESC);")
    op.execute("CREATE INDEX idx_orders_status ON orders (status, id DESC);")
    op.execute("""
        CREATE TRIGGER trg_orders_updated_at
            BEFORE UPDATE ON orders
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS orders CASCADE;")
