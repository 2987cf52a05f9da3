"""Write domain events to the outbox and relay them after commit."""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List
from uuid import UUID

import structlog
from django.db import transaction

from modules.core.models import OutboxEvent
from shared.domain.events import DomainEvent
from shared.infrastructure.bus import event_bus

logger = structlog.get_logger(__name__)


def record_events(events: Iterable[DomainEvent], topic: str) -> List[OutboxEvent]:
    """Persist *events* in the current transaction; publish them on commit."""
    rows: List[OutboxEvent] = []
    for event in events:
        row = OutboxEvent.for_event(event, topic, serialize_event_payload(event))
        row.save()
        rows.append(row)
        transaction.on_commit(
            lambda event=event, row=row: _relay(event, row), robust=True
        )
    return rows


def _relay(event: DomainEvent, row: OutboxEvent) -> None:
    try:
        event_bus.publish(event)
    except Exception as exc:
        logger.exception(
            "outbox.relay_failed",
            event_type=event.event_name,
            aggregate_id=str(event.aggregate_id),
        )
        row.mark_as_failed(str(exc))
        return
    row.mark_as_published()


def serialize_event_payload(event: DomainEvent) -> Dict[str, Any]:
    data = asdict(event)
    normalized = _normalize_for_json(data)
    return json.loads(json.dumps(normalized))


def _normalize_for_json(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, list):
        return [_normalize_for_json(item) for item in value]
    if isinstance(value, dict):
        return {key: _normalize_for_json(val) for key, val in value.items()}
    return value
