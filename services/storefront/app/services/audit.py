from __future__ import annotations

from uuid import uuid4

from packages.shared.schemas.events import EntityTypeV1, EventTypeV1, EventV1
from services.storefront.app.db.models import EventLog, User
from sqlalchemy import select
from sqlalchemy.orm import Session


def ensure_user(db: Session, user_id: str) -> User:
    """Return the user row for an externally resolved id, creating it on first sight."""

    user = db.get(User, user_id)
    if user is None:
        user = User(id=user_id)
        db.add(user)
        db.flush()
    return user


def log_event(
    db: Session,
    *,
    user_id: str | None,
    entity_type: EntityTypeV1,
    entity_id: str,
    event_type: EventTypeV1,
    event_payload: dict,
) -> None:
    db.add(
        EventLog(
            id=uuid4().hex,
            user_id=user_id,
            entity_type=entity_type.value,
            entity_id=entity_id,
            event_type=event_type.value,
            event_payload_json=event_payload,
        )
    )


def list_events(db: Session, entity_type: EntityTypeV1, entity_id: str) -> list[EventV1]:
    rows = db.scalars(
        select(EventLog)
        .where(EventLog.entity_type == entity_type.value, EventLog.entity_id == entity_id)
        .order_by(EventLog.created_at, EventLog.id)
    ).all()

    return [
        EventV1(
            id=row.id,
            user_id=row.user_id,
            entity_type=EntityTypeV1(row.entity_type),
            entity_id=row.entity_id,
            event_type=EventTypeV1(row.event_type),
            payload=row.event_payload_json,
            created_at=row.created_at.isoformat(),
        )
        for row in rows
    ]
