# shared/common/cache.py
"""
Local Key/Value Store

Thin wrapper over Django's cache used for client-side persisted state such
as the last known identity blob.
"""

import json
import logging
from typing import Any, Optional
from django.conf import settings
from django.core.cache import caches

logger = logging.getLogger(__name__)


class LocalStore:
    """
    String-valued key/value store backed by a Django cache alias.
    Values are stored as JSON text; reads never raise.
    """

    def __init__(self, alias: str = None, prefix: str = None, timeout: Optional[int] = None):
        self.alias = alias or getattr(settings, 'PORTAL_LOCAL_STORE_ALIAS', 'default')
        self.prefix = prefix if prefix is not None else getattr(settings, 'PORTAL_LOCAL_STORE_PREFIX', '')
        self.timeout = timeout

    @property
    def _backend(self):
        return caches[self.alias]

    def build_key(self, key: str) -> str:
        return f"{self.prefix}{key}" if self.prefix else key

    def get_raw(self, key: str) -> Optional[str]:
        """Get the stored text for ``key``"""
        try:
            return self._backend.get(self.build_key(key))
        except Exception as e:
            logger.error(f"Local store get error: {e}")
            return None

    def set_raw(self, key: str, value: str) -> bool:
        """Store text under ``key``"""
        try:
            self._backend.set(self.build_key(key), value, timeout=self.timeout)
            return True
        except Exception as e:
            logger.error(f"Local store set error: {e}")
            return False

    def get_json(self, key: str) -> Optional[Any]:
        """Get and decode a JSON value; undecodable text reads as None"""
        raw = self.get_raw(key)
        if raw is None:
            return None
        if not isinstance(raw, str):
            return raw
        try:
            return json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            logger.warning(f"Discarding undecodable value for key {key}")
            return None

    def set_json(self, key: str, value: Any) -> bool:
        return self.set_raw(key, json.dumps(value, default=str))

    def delete(self, key: str) -> bool:
        """Delete key from store"""
        try:
            self._backend.delete(self.build_key(key))
            return True
        except Exception as e:
            logger.error(f"Local store delete error: {e}")
            return False

    def exists(self, key: str) -> bool:
        try:
            return self._backend.has_key(self.build_key(key))
        except Exception as e:
            logger.error(f"Local store exists error: {e}")
            return False
