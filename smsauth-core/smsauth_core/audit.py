"""
Audit Trail
===========
Append-only, tamper-evident record of SMS authorization decisions.

Entries carry message and operation identifiers and the digest salt. The
authorization code itself is never written to the trail.
"""

import hashlib
import json
import uuid
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import structlog

logger = structlog.get_logger(__name__)


class AuditEventType(str, Enum):
    """SMS authorization audit event types."""
    SMS_CREATED = "sms.created"
    SMS_MASKED = "sms.masked"
    SMS_VERIFIED = "sms.verified"
    SMS_VERIFY_FAILED = "sms.verify_failed"
    AUTH_COMBINED = "auth.combined"


@dataclass
class AuditEvent:
    """An audit entry linked to its predecessor by hash."""
    id: str
    timestamp: datetime
    service: str
    event_type: str
    user_id: Optional[str]
    message_id: Optional[str]
    outcome: str
    payload: Dict[str, Any]
    hash: str
    previous_hash: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["timestamp"] = self.timestamp.isoformat()
        return d


def compute_event_hash(
    previous_hash: Optional[str],
    timestamp: datetime,
    service: str,
    event_type: str,
    message_id: Optional[str],
    payload: Dict[str, Any],
) -> str:
    """
    Compute the chained SHA-256 hash of an audit event.

    Args:
        previous_hash: Hash of the previous event (None for the first event)
        timestamp: Event timestamp
        service: Service that recorded the event
        event_type: Type of event
        message_id: SMS message the event refers to
        payload: Event payload

    Returns:
        Hex encoded hash
    """
    hash_input = json.dumps({
        "previous_hash": previous_hash,
        "timestamp": timestamp.isoformat(),
        "service": service,
        "event_type": event_type,
        "message_id": message_id,
        "payload": payload,
    }, sort_keys=True, separators=(",", ":"), default=str)

    return hashlib.sha256(hash_input.encode()).hexdigest()


def verify_chain(events: List[AuditEvent]) -> Tuple[bool, Optional[int]]:
    """
    Verify hashes and linkage of events in chronological order.

    Returns:
        Tuple of (is_valid, index of the first broken event or None)
    """
    previous_hash: Optional[str] = None
    for i, event in enumerate(events):
        if event.previous_hash != previous_hash:
            logger.warning("Audit chain linkage broken", event_id=event.id, index=i)
            return False, i

        expected_hash = compute_event_hash(
            event.previous_hash,
            event.timestamp,
            event.service,
            event.event_type,
            event.message_id,
            event.payload,
        )
        if event.hash != expected_hash:
            logger.warning(
                "Audit chain integrity violation",
                event_id=event.id,
                index=i,
                expected_hash=expected_hash[:16],
                actual_hash=event.hash[:16],
            )
            return False, i

        previous_hash = event.hash

    return True, None


class AuditTrail:
    """
    In-process audit trail.

    Keeps the hash of the last event so each new entry extends the chain.
    Events are buffered until ``flush`` hands them to durable storage.
    """

    def __init__(self, service_name: str):
        self.service_name = service_name
        self._previous_hash: Optional[str] = None
        self._buffer: List[AuditEvent] = []

    def set_previous_hash(self, hash_value: Optional[str]) -> None:
        """Continue a chain persisted elsewhere."""
        self._previous_hash = hash_value

    def record(
        self,
        event_type: AuditEventType,
        outcome: str = "success",
        user_id: Optional[str] = None,
        message_id: Optional[str] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> AuditEvent:
        timestamp = datetime.now(timezone.utc)
        payload = payload or {}
        event_type_value = event_type.value if isinstance(event_type, AuditEventType) else event_type

        event_hash = compute_event_hash(
            self._previous_hash,
            timestamp,
            self.service_name,
            event_type_value,
            message_id,
            payload,
        )
        event = AuditEvent(
            id=str(uuid.uuid4()),
            timestamp=timestamp,
            service=self.service_name,
            event_type=event_type_value,
            user_id=user_id,
            message_id=message_id,
            outcome=outcome,
            payload=payload,
            hash=event_hash,
            previous_hash=self._previous_hash,
        )

        self._previous_hash = event_hash
        self._buffer.append(event)

        logger.info(
            "Audit event recorded",
            event_id=event.id,
            event_type=event_type_value,
            outcome=outcome,
        )
        return event

    @property
    def events(self) -> List[AuditEvent]:
        return list(self._buffer)

    def flush(self) -> List[AuditEvent]:
        """Return and clear buffered events."""
        events = self._buffer
        self._buffer = []
        return events
