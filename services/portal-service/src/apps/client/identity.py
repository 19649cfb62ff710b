# services/portal-service/src/apps/client/identity.py
"""
Identity Resolution

Who is signed in, whether they are an admin, and the last known identity
kept in the local store for when resolution stalls.
"""

import jwt
import hashlib
import logging
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional, Tuple

from django.conf import settings

from shared.common.authentication import JWTTokenGenerator
from shared.common.cache import LocalStore

from .gateway import PortalGateway

logger = logging.getLogger(__name__)


@dataclass
class Identity:
    """A signed-in user as the portal sees them."""

    id: str
    email: Optional[str] = None
    name: Optional[str] = None
    is_admin: bool = False
    authenticated: bool = True

    @classmethod
    def from_blob(cls, blob: Any) -> Optional['Identity']:
        """Build from a stored blob; camelCase ``isAdmin`` is accepted."""
        if not isinstance(blob, dict) or not blob.get('id'):
            return None
        return cls(
            id=str(blob['id']),
            email=blob.get('email'),
            name=blob.get('name'),
            is_admin=bool(blob.get('is_admin', blob.get('isAdmin', False))),
            authenticated=bool(blob.get('authenticated', True)),
        )

    def to_blob(self) -> Dict[str, Any]:
        return asdict(self)


class IdentityCache:
    """
    The last resolved identity for one session, kept in the local store.

    Entries are keyed by a digest of the session credential (the access
    token the gate was built for), so one user's blob is never read back
    for another. Without a session nothing is stored or loaded.
    """

    def __init__(self, session: Optional[str], store: LocalStore = None, key: str = None):
        self.store = store or LocalStore()
        base_key = key or settings.PORTAL_AUTH.get('IDENTITY_CACHE_KEY', 'pilot_portal_user')
        self.key = session_key(base_key, session) if session else None

    def load(self) -> Optional[Identity]:
        if self.key is None:
            return None
        identity = Identity.from_blob(self.store.get_json(self.key))
        if identity is None and self.store.exists(self.key):
            logger.warning("Ignoring malformed cached identity")
        return identity

    def save(self, identity: Identity) -> bool:
        if self.key is None:
            return False
        return self.store.set_json(self.key, identity.to_blob())

    def clear(self) -> bool:
        if self.key is None:
            return False
        return self.store.delete(self.key)


def session_key(base_key: str, session: str) -> str:
    digest = hashlib.sha256(session.encode('utf-8')).hexdigest()
    return f"{base_key}:{digest}"


class IdentityProvider:
    """Resolves the current session; returns None when nobody is signed in."""

    async def current_identity(self) -> Optional[Identity]:
        raise NotImplementedError


class TokenIdentityProvider(IdentityProvider):
    """Session from a bearer access token."""

    def __init__(self, access_token: Optional[str]):
        self.access_token = access_token

    async def current_identity(self) -> Optional[Identity]:
        if not self.access_token:
            return None
        try:
            payload = JWTTokenGenerator.decode_token(self.access_token)
        except jwt.ExpiredSignatureError:
            logger.info("Access token expired")
            return None
        except jwt.InvalidTokenError as e:
            logger.warning(f"Invalid access token: {e}")
            return None
        return Identity(id=str(payload['sub']), email=payload.get('email'), name=payload.get('name'))


class RoleChecker:
    """Server-side admin check for an identity."""

    async def is_admin(self, identity: Identity) -> bool:
        raise NotImplementedError


class GatewayRoleChecker(RoleChecker):
    """Asks the portal's ``is_admin`` function on behalf of a token holder."""

    def __init__(self, gateway: PortalGateway, access_token: Optional[str]):
        self.gateway = gateway
        self.access_token = access_token

    async def is_admin(self, identity: Identity) -> bool:
        result = await self.gateway.check_is_admin(self.access_token)
        if not result.success:
            logger.warning(f"Role check failed for {identity.id}: {result.error}")
            return False
        return bool(result.data)


class Notifier:
    """Shows user-facing notices."""

    def notify(self, title: str, message: str, level: str = 'info'):
        logger.info(f"{title}: {message}", extra={'level': level})


class RecordingNotifier(Notifier):
    """Keeps every notice; used by headless front ends and tests."""

    def __init__(self):
        self.notices: List[Tuple[str, str, str]] = []

    def notify(self, title: str, message: str, level: str = 'info'):
        self.notices.append((title, message, level))
