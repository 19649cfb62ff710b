# services/portal-service/src/apps/core/events.py
"""
Portal Change Events

Row-level change notifications for the realtime change stream.
Every persisted portal entity publishes INSERT, UPDATE and DELETE.
"""

import uuid
import logging
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Dict, Optional

from django.db import models

from shared.common.events import (
    ChangeEvent,
    ChangeType,
    get_change_publisher,
    utc_timestamp,
)

logger = logging.getLogger(__name__)


def _to_json_value(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return value


def serialize_row(instance: models.Model) -> Dict[str, Any]:
    """Column name to JSON value for one model instance."""
    row = {}
    for model_field in instance._meta.concrete_fields:
        row[model_field.attname] = _to_json_value(getattr(instance, model_field.attname))
    return row


def publish_row_change(
    instance: models.Model,
    change_type: ChangeType,
    old_row: Optional[Dict[str, Any]] = None
) -> bool:
    """
    Publish one row change.

    Failures are logged and reported through the return value so that a
    broken change stream never fails the write that triggered it.
    """
    table = instance._meta.db_table
    new_row = {} if change_type == ChangeType.DELETE else serialize_row(instance)
    if change_type == ChangeType.DELETE and old_row is None:
        old_row = serialize_row(instance)

    event = ChangeEvent(
        type=change_type,
        table=table,
        record=new_row,
        old_record=old_row or {},
        commit_timestamp=utc_timestamp(),
    )

    try:
        published = get_change_publisher().publish(event)
    except Exception as e:
        logger.error(f"Failed to publish {change_type.value} on {table}: {e}")
        return False

    if not published:
        logger.warning(f"Change not published: {change_type.value} on {table}")
    return published
