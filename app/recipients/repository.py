# app/recipients/repository.py
from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Any, Callable, Optional

from psycopg2.extras import RealDictCursor

from app.bridge.models import OnboardingStatus, RecipientRecord

TABLE = "app.bridge_recipients"


def _row_to_record(row: dict[str, Any]) -> RecipientRecord:
    return RecipientRecord(
        contact_hash=row["recipient_contact_hash"],
        hint_hash=row["recipient_hint_hash"],
        customer_id=row.get("bridge_customer_id"),
        external_account_id=row.get("bridge_external_account_id"),
        external_account_method=row.get("external_account_method"),
        onboarding_status=OnboardingStatus(row.get("onboarding_status") or "PENDING_ONBOARDING"),
        last_onboarding_url=row.get("last_onboarding_url"),
        last_kyc_url=row.get("last_kyc_url"),
        last_tos_url=row.get("last_tos_url"),
    )


def get_recipient_by_hashes(conn, *, contact_hash: str, hint_hash: str) -> Optional[RecipientRecord]:
    with conn.cursor(cursor_factory=RealDictCursor) as cur:
        cur.execute(
            f"""
            SELECT
              recipient_contact_hash,
              recipient_hint_hash,
              bridge_customer_id,
              bridge_external_account_id,
              external_account_method,
              onboarding_status,
              last_onboarding_url,
              last_kyc_url,
              last_tos_url
            FROM {TABLE}
            WHERE recipient_contact_hash = %s
              AND recipient_hint_hash = %s
            LIMIT 1
            """,
            (contact_hash, hint_hash),
        )
        row = cur.fetchone()
    return _row_to_record(dict(row)) if row else None


def upsert_recipient(conn, record: RecipientRecord) -> None:
    # URLs are only replaced when the new state carries one
    with conn.cursor() as cur:
        cur.execute(
            f"""
            INSERT INTO {TABLE} (
              recipient_contact_hash, recipient_hint_hash,
              bridge_customer_id, bridge_external_account_id, external_account_method,
              onboarding_status,
              last_onboarding_url, last_kyc_url, last_tos_url,
              created_at, updated_at
            )
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, now(), now())
            ON CONFLICT (recipient_contact_hash, recipient_hint_hash) DO UPDATE SET
              bridge_customer_id = EXCLUDED.bridge_customer_id,
              bridge_external_account_id = EXCLUDED.bridge_external_account_id,
              external_account_method = EXCLUDED.external_account_method,
              onboarding_status = EXCLUDED.onboarding_status,
              last_onboarding_url = COALESCE(EXCLUDED.last_onboarding_url, {TABLE}.last_onboarding_url),
              last_kyc_url = COALESCE(EXCLUDED.last_kyc_url, {TABLE}.last_kyc_url),
              last_tos_url = COALESCE(EXCLUDED.last_tos_url, {TABLE}.last_tos_url),
              updated_at = now()
            """,
            (
                record.contact_hash,
                record.hint_hash,
                record.customer_id,
                record.external_account_id,
                record.external_account_method,
                record.onboarding_status.value,
                record.last_onboarding_url,
                record.last_kyc_url,
                record.last_tos_url,
            ),
        )


class PostgresRecipientStore:
    """RecipientStore backed by app.bridge_recipients; one transaction per call."""

    def __init__(self, conn_factory: Optional[Callable[[], AbstractContextManager]] = None):
        if conn_factory is None:
            from db import get_conn

            conn_factory = get_conn
        self._conn_factory = conn_factory

    def get_recipient_by_hashes(self, contact_hash: str, hint_hash: str) -> Optional[RecipientRecord]:
        with self._conn_factory() as conn:
            return get_recipient_by_hashes(conn, contact_hash=contact_hash, hint_hash=hint_hash)

    def upsert_recipient(self, record: RecipientRecord) -> None:
        with self._conn_factory() as conn:
            upsert_recipient(conn, record)
