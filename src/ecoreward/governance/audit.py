"""
Audit Log

Tamper-evident record of settlements and administrative actions. Each
entry carries the SHA-256 digest of its predecessor, so editing or
dropping any recorded entry breaks every digest after it.
"""

from __future__ import annotations

import hashlib
import json
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

AuditEvent = Literal[
    "reward_settled",
    "settlement_rejected",
    "settlement_unrecorded",
    "notification_failed",
    "notification_retried",
    "config_updated",
    "tiers_updated",
    "pause_changed",
    "service_repointed",
    "ownership_transferred",
]
AuditOutcome = Literal["success", "denied", "error"]


class AuditEntry(BaseModel):
    """One recorded event.

    ``subject`` names what the event is about: a submission id for
    settlement events, the collaborator role for repointing, otherwise
    empty.
    """

    sequence: int = Field(ge=0)
    entry_id: str = Field(default_factory=lambda: f"evt_{uuid.uuid4().hex[:12]}")
    recorded_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    event_type: AuditEvent
    actor: str
    action: str
    subject: Optional[str] = None
    details: dict[str, Any] = Field(default_factory=dict)
    outcome: AuditOutcome = "success"
    prev_digest: str = ""
    digest: str = ""

    def compute_digest(self) -> str:
        payload = self.model_dump(mode="json", exclude={"digest"})
        return hashlib.sha256(
            json.dumps(payload, sort_keys=True, separators=(",", ":")).encode()
        ).hexdigest()

    def seal(self, prev_digest: str) -> None:
        self.prev_digest = prev_digest
        self.digest = self.compute_digest()


class AuditLog:
    """Append-only, digest-chained event log held in memory."""

    def __init__(self) -> None:
        self._entries: list[AuditEntry] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def head_digest(self) -> Optional[str]:
        return self._entries[-1].digest if self._entries else None

    def record(
        self,
        event_type: AuditEvent,
        actor: str,
        action: str,
        subject: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        outcome: AuditOutcome = "success",
    ) -> AuditEntry:
        """Append an event and return the sealed entry."""
        with self._lock:
            entry = AuditEntry(
                sequence=len(self._entries),
                event_type=event_type,
                actor=actor,
                action=action,
                subject=subject,
                details=details or {},
                outcome=outcome,
            )
            entry.seal(self.head_digest or "")
            self._entries.append(entry)
        return entry

    def find(self, entry_id: str) -> Optional[AuditEntry]:
        return next((e for e in self._entries if e.entry_id == entry_id), None)

    def query(
        self,
        event_type: Optional[str] = None,
        actor: Optional[str] = None,
        subject: Optional[str] = None,
        outcome: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[AuditEntry]:
        """Entries matching every given filter, oldest first.

        With ``limit``, only the most recent ``limit`` matches are returned.
        """
        wanted = {
            "event_type": event_type,
            "actor": actor,
            "subject": subject,
            "outcome": outcome,
        }
        wanted = {k: v for k, v in wanted.items() if v is not None}
        matches = [
            e for e in self._entries
            if all(getattr(e, k) == v for k, v in wanted.items())
        ]
        return matches[-limit:] if limit else matches

    def verify_chain(self) -> tuple[bool, Optional[str]]:
        """Re-derive every digest.

        Returns:
            ``(True, None)`` for an intact chain, otherwise ``False`` and
            a description of the first bad entry.
        """
        expected_prev = ""
        for position, entry in enumerate(self._entries):
            if entry.sequence != position:
                return False, f"entry at position {position} has sequence {entry.sequence}"
            if entry.prev_digest != expected_prev:
                return False, f"entry {position} does not follow entry {position - 1}"
            if entry.digest != entry.compute_digest():
                return False, f"entry {position} was modified after it was recorded"
            expected_prev = entry.digest
        return True, None

    def export(self) -> dict[str, Any]:
        """Serializable dump of the log for offline verification."""
        return {
            "exported_at": datetime.now(timezone.utc).isoformat(),
            "head_digest": self.head_digest,
            "entries": [e.model_dump(mode="json") for e in self._entries],
        }
