# services/portal-service/src/apps/client/realtime.py
"""
Realtime Change Bridge

Turns the change stream into typed insert/update/delete callbacks with
scoped subscriptions. Each ``ChangeSubscription`` owns exactly one channel
at a time and always releases it when its scope exits.
"""

import uuid
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Set

from shared.common.events import (
    ChangeEvent,
    ChangeType,
    RealtimeChannel,
    RealtimeClient,
    build_realtime_client,
)
from shared.common.exceptions import MalformedPayloadError

logger = logging.getLogger(__name__)

RecordCallback = Callable[[Dict[str, Any]], Any]


class ChangeHandler:
    """
    Consumer of one table's changes. Override the hooks you need; the
    others ignore their events.
    """

    def on_insert(self, record: Dict[str, Any]) -> Optional[Awaitable[None]]:
        return None

    def on_update(self, record: Dict[str, Any], old_record: Dict[str, Any]) -> Optional[Awaitable[None]]:
        return None

    def on_delete(self, old_record: Dict[str, Any]) -> Optional[Awaitable[None]]:
        return None


class CallbackHandler(ChangeHandler):
    """ChangeHandler assembled from plain callables."""

    def __init__(
        self,
        on_insert: RecordCallback = None,
        on_update: Callable[[Dict[str, Any], Dict[str, Any]], Any] = None,
        on_delete: RecordCallback = None
    ):
        self._on_insert = on_insert
        self._on_update = on_update
        self._on_delete = on_delete

    def on_insert(self, record):
        if self._on_insert:
            return self._on_insert(record)

    def on_update(self, record, old_record):
        if self._on_update:
            return self._on_update(record, old_record)

    def on_delete(self, old_record):
        if self._on_delete:
            return self._on_delete(old_record)


DISPATCH: Dict[ChangeType, Callable[[ChangeHandler, ChangeEvent], Any]] = {
    ChangeType.INSERT: lambda handler, event: handler.on_insert(event.record),
    ChangeType.UPDATE: lambda handler, event: handler.on_update(event.record, event.old_record),
    ChangeType.DELETE: lambda handler, event: handler.on_delete(event.old_record),
}

_undispatched = set(ChangeType) - set(DISPATCH)
if _undispatched:
    raise RuntimeError(f"No change dispatch for {sorted(t.value for t in _undispatched)}")


def normalise_filter(change_filter: Optional[Dict[str, Any]]) -> Dict[str, str]:
    """Equality filter with string values so UUIDs and their text compare equal."""
    return {str(key): str(value) for key, value in (change_filter or {}).items()}


def matches_filter(event: ChangeEvent, change_filter: Dict[str, str]) -> bool:
    if not change_filter:
        return True
    row = event.old_record if event.type is ChangeType.DELETE else event.record
    return all(
        key in row and str(row[key]) == value
        for key, value in change_filter.items()
    )


class ChangeSubscription:
    """
    Scoped subscription to one table.

    Usage:
        async with bridge.subscribe('flights', handler, {'aircraft_id': aircraft_id}) as sub:
            ...
            await sub.set_filter({'aircraft_id': other_id})
    """

    def __init__(
        self,
        bridge: 'ChangeBridge',
        table: str,
        handler: ChangeHandler,
        change_filter: Dict[str, Any] = None
    ):
        self.bridge = bridge
        self.table = table
        self.handler = handler
        self.filter = normalise_filter(change_filter)
        self.channel: Optional[RealtimeChannel] = None

    @property
    def active(self) -> bool:
        return self.channel is not None and self.channel.subscribed

    async def __aenter__(self) -> 'ChangeSubscription':
        await self._open()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def _open(self):
        channel = self.bridge.client.channel(f"{self.table}_changes_{uuid.uuid4().hex[:12]}")
        channel.on_changes(self.table, self._handle_payload)
        self.channel = channel
        self.bridge._register(self)
        try:
            await channel.subscribe()
        except Exception as e:
            # The scope stays usable; it simply receives nothing
            logger.error(f"Subscribe handshake failed for {channel.name}: {e}")
            return
        except BaseException:
            # Cancelled mid-handshake: __aexit__ will not run for this scope
            await self.close()
            raise
        logger.info(f"Subscribed to {self.table} changes on {channel.name}")

    async def close(self):
        """Unsubscribe and release the channel; safe to call more than once."""
        channel, self.channel = self.channel, None
        if channel is None:
            return
        try:
            await asyncio.shield(self.bridge.client.remove_channel(channel))
        except Exception as e:
            logger.error(f"Failed to release channel {channel.name}: {e}")
        finally:
            self.bridge._unregister(self)
            logger.info(f"Released channel {channel.name}")

    async def set_filter(self, change_filter: Optional[Dict[str, Any]]):
        """Re-subscribe with a new filter; a structurally equal filter is a no-op."""
        new_filter = normalise_filter(change_filter)
        if new_filter == self.filter:
            return
        await self.close()
        self.filter = new_filter
        await self._open()

    async def _handle_payload(self, payload: Dict[str, Any]):
        try:
            event = ChangeEvent.from_payload(payload)
        except MalformedPayloadError as e:
            logger.warning(f"Dropping change on {self.table}: {e.message}")
            return

        if not matches_filter(event, self.filter):
            return

        try:
            result = DISPATCH[event.type](self.handler, event)
            if asyncio.iscoroutine(result):
                await result
        except Exception:
            logger.exception(f"Change handler failed for {event.type.value} on {self.table}")


class ChangeBridge:
    """Creates scoped change subscriptions over a realtime client."""

    def __init__(self, realtime_client: RealtimeClient):
        self.client = realtime_client
        self._subscriptions: Set[ChangeSubscription] = set()

    @classmethod
    def from_settings(cls) -> 'ChangeBridge':
        """Bridge over the backend named by ``PORTAL_REALTIME_BACKEND``."""
        return cls(build_realtime_client())

    def subscribe(
        self,
        table: str,
        handler: ChangeHandler,
        change_filter: Dict[str, Any] = None
    ) -> ChangeSubscription:
        return ChangeSubscription(self, table, handler, change_filter)

    @property
    def active_count(self) -> int:
        """Channels currently held by open subscriptions."""
        return len(self._subscriptions)

    def _register(self, subscription: ChangeSubscription):
        self._subscriptions.add(subscription)

    def _unregister(self, subscription: ChangeSubscription):
        self._subscriptions.discard(subscription)
