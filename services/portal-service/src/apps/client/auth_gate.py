# services/portal-service/src/apps/client/auth_gate.py
"""
Auth/Authorization Gate

Decides what a protected view shows while the session resolves:
nothing, a loading state, the view itself, or a redirect. Admin views
trust only the server-side role check.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Set, Tuple

from django.conf import settings

from shared.common.exceptions import IdentityTimeoutError

from .identity import Identity, IdentityCache, IdentityProvider, Notifier, RoleChecker

logger = logging.getLogger(__name__)


class GateState(str, Enum):
    RESOLVING = 'resolving'
    AUTHENTICATED = 'authenticated'
    UNAUTHENTICATED = 'unauthenticated'
    TIMED_OUT = 'timed_out'


class GateDecision(str, Enum):
    RENDER = 'render'
    LOADING = 'loading'
    PENDING = 'pending'
    REDIRECT_LOGIN = 'redirect_login'
    REDIRECT_UNAUTHORIZED = 'redirect_unauthorized'


@dataclass
class GateConfig:
    require_admin: bool = False
    timeout: float = 5.0
    grace_window: float = 0.2
    # Cached privileges may be stale after a revocation
    allow_cached_fallback: bool = True

    @classmethod
    def from_settings(cls, require_admin: bool = False) -> 'GateConfig':
        auth = getattr(settings, 'PORTAL_AUTH', {})
        return cls(
            require_admin=require_admin,
            timeout=float(auth.get('TIMEOUT', cls.timeout)),
            grace_window=float(auth.get('GRACE_WINDOW', cls.grace_window)),
            allow_cached_fallback=bool(auth.get('ALLOW_CACHED_FALLBACK', cls.allow_cached_fallback)),
        )


class AuthGate:
    """
    One gate per protected view.

    Usage:
        async with AuthGate(provider, checker, cache, notifier, GateConfig.from_settings(True)) as gate:
            decision = await gate.resolve()
    """

    def __init__(
        self,
        identity_provider: IdentityProvider,
        role_checker: RoleChecker,
        identity_cache: IdentityCache,
        notifier: Notifier,
        config: GateConfig = None
    ):
        self.identity_provider = identity_provider
        self.role_checker = role_checker
        self.identity_cache = identity_cache
        self.notifier = notifier
        self.config = config or GateConfig()

        self.state = GateState.RESOLVING
        self.identity: Optional[Identity] = None
        self.is_admin = False
        self.used_cached_fallback = False

        self._grace_elapsed = False
        self._grace_task: Optional[asyncio.Task] = None
        self._noticed: Set[GateDecision] = set()

    async def __aenter__(self) -> 'AuthGate':
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    # ==========================================================================
    # Timers
    # ==========================================================================

    def start(self):
        """Start the grace window timer; needs a running event loop."""
        if self._grace_task is None and self.state is GateState.RESOLVING:
            self._grace_task = asyncio.ensure_future(self._grace_timer())

    async def _grace_timer(self):
        await asyncio.sleep(self.config.grace_window)
        self._grace_elapsed = True

    async def close(self):
        task, self._grace_task = self._grace_task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    # ==========================================================================
    # Resolution
    # ==========================================================================

    async def resolve(self) -> GateDecision:
        """Resolve the session within ``config.timeout`` and return the decision."""
        if self.state is not GateState.RESOLVING:
            return self.decision()

        self.start()
        try:
            identity, is_admin = await asyncio.wait_for(self._resolve_identity(), self.config.timeout)
        except asyncio.TimeoutError:
            self._on_timeout()
        else:
            self._on_resolved(identity, is_admin)
        finally:
            await self.close()

        return self.decision()

    async def _resolve_identity(self) -> Tuple[Optional[Identity], bool]:
        try:
            identity = await self.identity_provider.current_identity()
        except Exception as e:
            logger.error(f"Identity resolution failed: {e}")
            return None, False

        if identity is None or not self.config.require_admin:
            return identity, False

        try:
            is_admin = bool(await self.role_checker.is_admin(identity))
        except Exception as e:
            logger.error(f"Role check failed for {identity.id}: {e}")
            is_admin = False
        return identity, is_admin

    def _on_resolved(self, identity: Optional[Identity], is_admin: bool):
        if identity is None:
            self.state = GateState.UNAUTHENTICATED
            self.identity_cache.clear()
            logger.info("No active session")
            return

        if not self.config.require_admin:
            # Keep the last server-confirmed admin flag for this user
            cached = self.identity_cache.load()
            is_admin = bool(cached and cached.id == identity.id and cached.is_admin)

        self.state = GateState.AUTHENTICATED
        self.identity = identity
        self.is_admin = is_admin
        identity.is_admin = is_admin
        self.identity_cache.save(identity)
        logger.info(f"Session resolved for {identity.id}", extra={'is_admin': is_admin})

    def _on_timeout(self):
        self.state = GateState.TIMED_OUT
        logger.warning(
            f"{IdentityTimeoutError.default_message} (after {self.config.timeout}s)",
            extra={'require_admin': self.config.require_admin}
        )

        if not self.config.allow_cached_fallback:
            return

        cached = self.identity_cache.load()
        if cached is None or not cached.authenticated:
            return
        if self.config.require_admin and not cached.is_admin:
            return

        self.identity = cached
        self.is_admin = cached.is_admin
        self.used_cached_fallback = True
        logger.warning(f"Rendering from cached identity {cached.id}")

    # ==========================================================================
    # Decision
    # ==========================================================================

    def decision(self) -> GateDecision:
        """What the view should do now. Terminal notices are issued once."""
        if self.state is GateState.RESOLVING:
            return GateDecision.LOADING if self._grace_elapsed else GateDecision.PENDING

        if self.state is GateState.TIMED_OUT:
            if self.used_cached_fallback:
                return GateDecision.RENDER
            error = IdentityTimeoutError()
            return self._redirect(
                GateDecision.REDIRECT_LOGIN,
                'Authentication timeout',
                f"{error.message} Redirecting to login page.",
                'destructive'
            )

        if self.state is GateState.UNAUTHENTICATED:
            return self._redirect(
                GateDecision.REDIRECT_LOGIN,
                'Authentication Required',
                'Please sign in to continue.',
                'default'
            )

        if self.config.require_admin and not self.is_admin:
            return self._redirect(
                GateDecision.REDIRECT_UNAUTHORIZED,
                'Access Restricted',
                'You do not have administrator privileges to access this page.',
                'destructive'
            )

        return GateDecision.RENDER

    def _redirect(self, decision: GateDecision, title: str, message: str, level: str) -> GateDecision:
        if decision not in self._noticed:
            self._noticed.add(decision)
            self.notifier.notify(title, message, level)
        return decision
