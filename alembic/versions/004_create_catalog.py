"""004: create categories and services tables

Revision ID: 004
Revises: 003
Create Date: 2026-09-14
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE categories (
            id          UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            name        VARCHAR(128)    NOT NULL,
            created_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_categories_name UNIQUE (name)
        );
    """)
    op.execute("""
        CREATE TABLE services (
            id                      UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            category_id             UUID            NOT NULL
                REFERENCES categories (id) ON DELETE CASCADE,
            name                    VARCHAR(200)    NOT NULL,
            price                   BIGINT          NOT NULL,
            processing_time_hours   INTEGER         NOT NULL DEFAULT 24,
            description             TEXT,
            image_url               VARCHAR(2048),
            created_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_services_category_name UNIQUE (category_id, name),
            CONSTRAINT ck_services_price_gt_0 CHECK (price > 0),
            CONSTRAINT ck_services_processing_gte_0 CHECK (processing_time_hours >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_services_category ON services (category_id);")
    op.execute("""
        CREATE TRIGGER trg_services_updated_at
            BEFORE UPDATE ON services
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON COLUMN services.price IS 'Cents per 1000 units';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS services CASCADE;")
    op.execute("DROP TABLE IF EXISTS categories CASCADE;")
