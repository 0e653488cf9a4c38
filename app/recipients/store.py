# app/recipients/store.py
from __future__ import annotations

from typing import Optional, Protocol

from app.bridge.models import RecipientRecord


class RecipientStore(Protocol):
    """
    Durable recipient state, keyed by the caller-supplied hash pair.

    Implementations own their consistency; read-after-write for a single
    key is assumed.
    """

    def get_recipient_by_hashes(self, contact_hash: str, hint_hash: str) -> Optional[RecipientRecord]: ...
    def upsert_recipient(self, record: RecipientRecord) -> None: ...
