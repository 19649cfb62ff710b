# shared/common/events.py
"""
Realtime Change Stream

Row-level insert/update/delete notifications carried over NATS core
pub/sub. Delivery is at-most-once: nothing is persisted and nothing is
replayed after a disconnect, so consumers that need correctness refetch.
"""

import json
import asyncio
import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from django.conf import settings

from .exceptions import MalformedPayloadError

logger = logging.getLogger(__name__)

ChangeListener = Callable[[Dict[str, Any]], Union[None, Awaitable[None]]]


# =============================================================================
# CHANGE EVENTS
# =============================================================================

class ChangeType(str, Enum):
    """Row change discriminator."""

    INSERT = 'INSERT'
    UPDATE = 'UPDATE'
    DELETE = 'DELETE'


@dataclass
class ChangeEvent:
    """A single row change for one table."""

    type: ChangeType
    table: str
    record: Dict[str, Any] = field(default_factory=dict)
    old_record: Dict[str, Any] = field(default_factory=dict)
    schema: str = 'public'
    commit_timestamp: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return {
            'eventType': self.type.value,
            'table': self.table,
            'schema': self.schema,
            'new': self.record,
            'old': self.old_record,
            'commit_timestamp': self.commit_timestamp,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_payload(), default=str)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> 'ChangeEvent':
        """Parse a wire payload; raise MalformedPayloadError when the discriminator is unusable."""
        if not isinstance(payload, dict):
            raise MalformedPayloadError('Change payload is not an object')

        event_type = payload.get('eventType')
        if not event_type:
            raise MalformedPayloadError('Missing eventType in change payload')
        try:
            change_type = ChangeType(str(event_type).upper())
        except ValueError:
            raise MalformedPayloadError(f"Unknown eventType in change payload: {event_type}")

        return cls(
            type=change_type,
            table=payload.get('table') or '',
            record=payload.get('new') or {},
            old_record=payload.get('old') or {},
            schema=payload.get('schema') or 'public',
            commit_timestamp=payload.get('commit_timestamp'),
        )


def change_subject(table: str) -> str:
    """portal.changes.<table>"""
    prefix = getattr(settings, 'PORTAL_REALTIME_PREFIX', 'portal')
    return f"{prefix}.changes.{table}"


# =============================================================================
# NATS CONFIGURATION
# =============================================================================

class NATSConfig:
    """NATS connection configuration"""

    def __init__(self):
        self.servers = getattr(settings, 'NATS_SERVERS', ['nats://localhost:4222'])
        self.user = getattr(settings, 'NATS_USER', None)
        self.password = getattr(settings, 'NATS_PASSWORD', None)
        self.token = getattr(settings, 'NATS_TOKEN', None)
        self.connect_timeout = getattr(settings, 'NATS_CONNECT_TIMEOUT', 10)
        self.reconnect_time_wait = getattr(settings, 'NATS_RECONNECT_TIME_WAIT', 2)
        self.max_reconnect_attempts = getattr(settings, 'NATS_MAX_RECONNECT_ATTEMPTS', 60)

    def get_connect_options(self) -> Dict[str, Any]:
        """Get NATS connection options"""
        options = {
            'servers': self.servers,
            'connect_timeout': self.connect_timeout,
            'reconnect_time_wait': self.reconnect_time_wait,
            'max_reconnect_attempts': self.max_reconnect_attempts,
            'error_cb': self._error_callback,
            'disconnected_cb': self._disconnected_callback,
            'reconnected_cb': self._reconnected_callback,
            'closed_cb': self._closed_callback,
        }

        if self.user and self.password:
            options['user'] = self.user
            options['password'] = self.password
        elif self.token:
            options['token'] = self.token

        return options

    async def _error_callback(self, error):
        logger.error(f"NATS error: {error}")

    async def _disconnected_callback(self):
        # Events published while disconnected are lost
        logger.warning("Disconnected from NATS")

    async def _reconnected_callback(self):
        logger.info("Reconnected to NATS")

    async def _closed_callback(self):
        logger.info("NATS connection closed")


# =============================================================================
# REALTIME CLIENT (subscriber side)
# =============================================================================

class RealtimeChannel(ABC):
    """A named subscription to one table's change subject."""

    def __init__(self, name: str):
        self.name = name
        self.table: Optional[str] = None
        self._listener: Optional[ChangeListener] = None
        self.subscribed = False

    def on_changes(self, table: str, listener: ChangeListener) -> 'RealtimeChannel':
        """Register the change listener for ``table``."""
        self.table = table
        self._listener = listener
        return self

    async def _deliver(self, payload: Dict[str, Any]):
        if self._listener is None:
            return
        result = self._listener(payload)
        if asyncio.iscoroutine(result):
            await result

    @abstractmethod
    async def subscribe(self):
        """Complete the subscribe handshake."""

    @abstractmethod
    async def unsubscribe(self):
        """Stop receiving changes."""


class RealtimeClient(ABC):
    """Factory and owner of realtime channels."""

    def __init__(self):
        self._channels: List[RealtimeChannel] = []

    @property
    def channels(self) -> List[RealtimeChannel]:
        return list(self._channels)

    def channel(self, name: str) -> RealtimeChannel:
        channel = self._create_channel(name)
        self._channels.append(channel)
        return channel

    async def remove_channel(self, channel: RealtimeChannel):
        """Unsubscribe and forget a channel."""
        try:
            if channel.subscribed:
                await channel.unsubscribe()
        finally:
            if channel in self._channels:
                self._channels.remove(channel)

    @abstractmethod
    def _create_channel(self, name: str) -> RealtimeChannel:
        pass


class NatsRealtimeChannel(RealtimeChannel):
    """Channel backed by a NATS core subscription."""

    def __init__(self, name: str, client: 'NatsRealtimeClient'):
        super().__init__(name)
        self._client = client
        self._subscription = None

    async def _message_handler(self, msg):
        try:
            payload = json.loads(msg.data.decode('utf-8'))
        except (UnicodeDecodeError, ValueError) as e:
            logger.error(f"Dropping undecodable change message on {msg.subject}: {e}")
            return
        await self._deliver(payload)

    async def subscribe(self):
        nc = await self._client.connect()
        subject = change_subject(self.table)
        # One callback per subscription; nats-py awaits it per message in order
        self._subscription = await nc.subscribe(subject, cb=self._message_handler)
        self.subscribed = True
        logger.info(f"Channel {self.name} subscribed to {subject}")

    async def unsubscribe(self):
        if self._subscription is not None:
            await self._subscription.unsubscribe()
            self._subscription = None
        self.subscribed = False
        logger.info(f"Channel {self.name} unsubscribed")


class NatsRealtimeClient(RealtimeClient):
    """Realtime client over a single NATS connection."""

    def __init__(self, config: NATSConfig = None):
        super().__init__()
        self._config = config or NATSConfig()
        self._nc = None

    async def connect(self):
        import nats

        if self._nc is not None and self._nc.is_connected:
            return self._nc

        self._nc = await nats.connect(**self._config.get_connect_options())
        logger.info(f"Realtime client connected to NATS at {self._config.servers}")
        return self._nc

    def _create_channel(self, name: str) -> RealtimeChannel:
        return NatsRealtimeChannel(name, self)

    async def close(self):
        for channel in self.channels:
            await self.remove_channel(channel)
        if self._nc is not None:
            await self._nc.drain()
            self._nc = None
            logger.info("Realtime client connection closed")


class InMemoryRealtimeChannel(RealtimeChannel):
    """Channel fed directly by ``InMemoryRealtimeClient.deliver``."""

    def __init__(self, name: str, client: 'InMemoryRealtimeClient'):
        super().__init__(name)
        self._client = client

    async def subscribe(self):
        if self._client.fail_subscribe:
            raise ConnectionError(f"Subscribe handshake failed for {self.name}")
        self.subscribed = True

    async def unsubscribe(self):
        self.subscribed = False
        self._client.unsubscribe_calls += 1


class InMemoryRealtimeClient(RealtimeClient):
    """
    Process-local realtime client for development and tests
    (``PORTAL_REALTIME_BACKEND = 'memory'``).
    """

    def __init__(self):
        super().__init__()
        self.fail_subscribe = False
        self.unsubscribe_calls = 0

    def _create_channel(self, name: str) -> RealtimeChannel:
        return InMemoryRealtimeChannel(name, self)

    async def deliver(self, table: str, payload: Dict[str, Any]):
        """Push a payload to every subscribed channel on ``table``, in order."""
        for channel in self.channels:
            if channel.subscribed and channel.table == table:
                await channel._deliver(payload)


def build_realtime_client() -> RealtimeClient:
    """Construct the realtime client selected by settings."""
    backend = getattr(settings, 'PORTAL_REALTIME_BACKEND', 'nats')
    if backend == 'memory':
        return InMemoryRealtimeClient()
    return NatsRealtimeClient()


# =============================================================================
# CHANGE PUBLISHER (server side)
# =============================================================================

class ChangePublisher(ABC):
    """Publishes row changes to the change stream."""

    @abstractmethod
    def publish(self, event: ChangeEvent) -> bool:
        pass


class NatsChangePublisher(ChangePublisher):
    """
    Publisher using a NATS core connection from synchronous code.
    """

    def __init__(self, config: NATSConfig = None):
        self._config = config or NATSConfig()
        self._nc = None
        self._loop = None
        self._lock = threading.Lock()

    def _get_or_create_loop(self):
        """Get existing event loop or create a new one"""
        if self._loop is None or self._loop.is_closed():
            self._loop = asyncio.new_event_loop()
        return self._loop

    async def _connect_async(self) -> bool:
        try:
            import nats

            if self._nc is not None and self._nc.is_connected:
                return True

            self._nc = await nats.connect(**self._config.get_connect_options())
            logger.info(f"Change publisher connected to NATS at {self._config.servers}")
            return True

        except Exception as e:
            logger.error(f"Failed to connect to NATS: {e}")
            return False

    async def _publish_async(self, event: ChangeEvent) -> bool:
        if not await self._connect_async():
            logger.warning("Change stream not connected, skipping publish")
            return False

        subject = change_subject(event.table)
        await self._nc.publish(subject, event.to_json().encode('utf-8'))
        await self._nc.flush()

        logger.info(
            f"Change published: {event.type.value} {event.table}",
            extra={'subject': subject, 'event_type': event.type.value}
        )
        return True

    def publish(self, event: ChangeEvent) -> bool:
        """Publish a change (synchronous wrapper)"""
        with self._lock:
            loop = self._get_or_create_loop()
            try:
                return loop.run_until_complete(self._publish_async(event))
            except Exception as e:
                logger.error(f"Failed to publish change event: {e}")
                return False


class InMemoryChangePublisher(ChangePublisher):
    """Records published changes; used in development and tests."""

    def __init__(self):
        self.published: List[ChangeEvent] = []

    def publish(self, event: ChangeEvent) -> bool:
        self.published.append(event)
        logger.debug(f"Change recorded: {event.type.value} {event.table}")
        return True

    def clear(self):
        self.published.clear()


_publisher: Optional[ChangePublisher] = None
_publisher_lock = threading.Lock()


def get_change_publisher() -> ChangePublisher:
    """Return the process-wide publisher for the configured backend."""
    global _publisher
    if _publisher is None:
        with _publisher_lock:
            if _publisher is None:
                backend = getattr(settings, 'PORTAL_REALTIME_BACKEND', 'nats')
                if backend == 'memory':
                    _publisher = InMemoryChangePublisher()
                else:
                    _publisher = NatsChangePublisher()
    return _publisher


def reset_change_publisher():
    global _publisher
    _publisher = None


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()
