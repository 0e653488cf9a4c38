"""bridge recipients

Revision ID: 0001_bridge_recipients
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""

from __future__ import annotations

from alembic import op


revision = "0001_bridge_recipients"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute("CREATE SCHEMA IF NOT EXISTS app;")
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS app.bridge_recipients (
            recipient_contact_hash text NOT NULL,
            recipient_hint_hash text NOT NULL,
            bridge_customer_id text,
            bridge_external_account_id text,
            external_account_method text,
            onboarding_status text NOT NULL DEFAULT 'PENDING_ONBOARDING',
            last_onboarding_url text,
            last_kyc_url text,
            last_tos_url text,
            created_at timestamp with time zone DEFAULT now() NOT NULL,
            updated_at timestamp with time zone DEFAULT now() NOT NULL,
            CONSTRAINT bridge_recipients_pkey PRIMARY KEY (recipient_contact_hash, recipient_hint_hash),
            CONSTRAINT bridge_recipients_status_chk
                CHECK (onboarding_status IN ('READY', 'PENDING_ONBOARDING')),
            CONSTRAINT bridge_recipients_method_chk
                CHECK (external_account_method IS NULL OR external_account_method IN ('DEBIT', 'BANK'))
        );
        """
    )
    op.execute(
        """
        CREATE INDEX IF NOT EXISTS bridge_recipients_customer_idx
            ON app.bridge_recipients (bridge_customer_id)
            WHERE bridge_customer_id IS NOT NULL;
        """
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS app.bridge_recipients;")
