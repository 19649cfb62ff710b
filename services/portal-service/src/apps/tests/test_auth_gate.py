# services/portal-service/src/apps/tests/test_auth_gate.py
"""
Auth Gate Tests

Gate decisions for regular and admin views, the timeout fallback and
the identity cache.
"""

import asyncio
from dataclasses import replace
from datetime import timedelta

import httpx
import pytest

from shared.common.cache import LocalStore
from shared.common.clients import FunctionsClient

from apps.client import (
    AuthGate,
    GateConfig,
    GateDecision,
    GateState,
    GatewayRoleChecker,
    Identity,
    IdentityCache,
    IdentityProvider,
    PortalGateway,
    RecordingNotifier,
    RoleChecker,
    TokenIdentityProvider,
)

PILOT = Identity(id='user-1', email='kari@example.com', name='Kari Nordmann')


class StaticProvider(IdentityProvider):
    def __init__(self, identity, delay=0):
        self.identity = identity
        self.delay = delay

    async def current_identity(self):
        if self.delay:
            await asyncio.sleep(self.delay)
        return replace(self.identity) if self.identity else None


class StaticChecker(RoleChecker):
    def __init__(self, is_admin=False, error=None):
        self.admin = is_admin
        self.error = error
        self.calls = 0

    async def is_admin(self, identity):
        self.calls += 1
        if self.error:
            raise self.error
        return self.admin


@pytest.fixture
def identity_cache():
    return IdentityCache('token-kari', LocalStore())


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def make_gate(identity_cache, notifier):
    def _make_gate(provider, checker=None, **config):
        config.setdefault('timeout', 1.0)
        return AuthGate(provider, checker or StaticChecker(), identity_cache, notifier, GateConfig(**config))
    return _make_gate


def resolve(gate):
    async def scenario():
        async with gate:
            return await gate.resolve()
    return asyncio.run(scenario())


class TestRegularView:
    """Tests for views that only need a signed-in user."""

    def test_signed_in_renders(self, make_gate, identity_cache, notifier):
        gate = make_gate(StaticProvider(PILOT))

        assert resolve(gate) is GateDecision.RENDER
        assert gate.state is GateState.AUTHENTICATED
        assert identity_cache.load().id == 'user-1'
        assert notifier.notices == []

    def test_signed_out_redirects_to_login(self, make_gate, identity_cache, notifier):
        identity_cache.save(PILOT)
        gate = make_gate(StaticProvider(None))

        assert resolve(gate) is GateDecision.REDIRECT_LOGIN
        assert identity_cache.load() is None
        assert notifier.notices == [('Authentication Required', 'Please sign in to continue.', 'default')]

    def test_regular_view_skips_role_check(self, make_gate):
        checker = StaticChecker(is_admin=True)
        gate = make_gate(StaticProvider(PILOT), checker)

        resolve(gate)

        assert checker.calls == 0
        assert gate.is_admin is False

    def test_keeps_cached_admin_flag_for_same_user(self, make_gate, identity_cache):
        identity_cache.save(Identity(id='user-1', is_admin=True))
        gate = make_gate(StaticProvider(Identity(id='user-1')))

        resolve(gate)

        assert identity_cache.load().is_admin is True

    def test_drops_cached_admin_flag_for_other_user(self, make_gate, identity_cache):
        identity_cache.save(Identity(id='someone-else', is_admin=True))
        gate = make_gate(StaticProvider(Identity(id='user-1')))

        resolve(gate)

        cached = identity_cache.load()
        assert cached.id == 'user-1'
        assert cached.is_admin is False

    def test_provider_error_is_signed_out(self, make_gate):
        class BrokenProvider(IdentityProvider):
            async def current_identity(self):
                raise ConnectionError('auth down')

        assert resolve(make_gate(BrokenProvider())) is GateDecision.REDIRECT_LOGIN


class TestAdminView:
    """Tests for admin-only views."""

    def test_admin_renders(self, make_gate, identity_cache):
        gate = make_gate(StaticProvider(PILOT), StaticChecker(is_admin=True), require_admin=True)

        assert resolve(gate) is GateDecision.RENDER
        assert identity_cache.load().is_admin is True

    def test_non_admin_redirected_once(self, make_gate, notifier):
        gate = make_gate(StaticProvider(PILOT), StaticChecker(is_admin=False), require_admin=True)

        assert resolve(gate) is GateDecision.REDIRECT_UNAUTHORIZED
        assert gate.decision() is GateDecision.REDIRECT_UNAUTHORIZED
        assert gate.decision() is GateDecision.REDIRECT_UNAUTHORIZED
        assert notifier.notices == [(
            'Access Restricted',
            'You do not have administrator privileges to access this page.',
            'destructive',
        )]

    def test_role_check_failure_is_not_admin(self, make_gate):
        checker = StaticChecker(error=ConnectionError('portal down'))
        gate = make_gate(StaticProvider(PILOT), checker, require_admin=True)

        assert resolve(gate) is GateDecision.REDIRECT_UNAUTHORIZED
        assert checker.calls == 1

    def test_cached_admin_flag_not_trusted(self, make_gate, identity_cache):
        identity_cache.save(Identity(id='user-1', is_admin=True))
        gate = make_gate(StaticProvider(PILOT), StaticChecker(is_admin=False), require_admin=True)

        assert resolve(gate) is GateDecision.REDIRECT_UNAUTHORIZED
        assert identity_cache.load().is_admin is False


class TestTiming:
    """Tests for the grace window and the resolution timeout."""

    def test_pending_then_loading(self, make_gate):
        class HeldProvider(IdentityProvider):
            def __init__(self):
                self.released = None

            async def current_identity(self):
                await self.released.wait()
                return PILOT

        provider = HeldProvider()
        gate = make_gate(provider, grace_window=0.01)

        async def scenario():
            provider.released = asyncio.Event()
            async with gate:
                task = asyncio.ensure_future(gate.resolve())
                await asyncio.sleep(0)
                first = gate.decision()
                await asyncio.sleep(0.05)
                second = gate.decision()
                provider.released.set()
                return first, second, await task

        assert asyncio.run(scenario()) == (GateDecision.PENDING, GateDecision.LOADING, GateDecision.RENDER)

    def test_timeout_without_cache_redirects(self, make_gate, notifier):
        gate = make_gate(StaticProvider(PILOT, delay=1), timeout=0.01)

        assert resolve(gate) is GateDecision.REDIRECT_LOGIN
        assert gate.state is GateState.TIMED_OUT
        assert gate.decision() is GateDecision.REDIRECT_LOGIN
        assert gate.decision() is GateDecision.REDIRECT_LOGIN
        assert notifier.notices == [(
            'Authentication timeout',
            'Authentication is taking longer than expected. Redirecting to login page.',
            'destructive',
        )]

    def test_timeout_uses_cached_identity(self, make_gate, identity_cache, notifier):
        identity_cache.save(PILOT)
        gate = make_gate(StaticProvider(PILOT, delay=1), timeout=0.01)

        assert resolve(gate) is GateDecision.RENDER
        assert gate.used_cached_fallback is True
        assert gate.identity.id == 'user-1'
        assert notifier.notices == []

    def test_timeout_fallback_can_be_disabled(self, make_gate, identity_cache):
        identity_cache.save(PILOT)
        gate = make_gate(StaticProvider(PILOT, delay=1), timeout=0.01, allow_cached_fallback=False)

        assert resolve(gate) is GateDecision.REDIRECT_LOGIN

    def test_admin_timeout_needs_cached_admin(self, make_gate, identity_cache):
        identity_cache.save(PILOT)
        gate = make_gate(StaticProvider(PILOT, delay=1), timeout=0.01, require_admin=True)

        assert resolve(gate) is GateDecision.REDIRECT_LOGIN

    def test_admin_timeout_with_cached_admin(self, make_gate, identity_cache):
        identity_cache.save(Identity(id='user-1', is_admin=True))
        gate = make_gate(StaticProvider(PILOT, delay=1), timeout=0.01, require_admin=True)

        assert resolve(gate) is GateDecision.RENDER
        assert gate.is_admin is True

    def test_other_sessions_admin_blob_not_used(self, notifier):
        IdentityCache('token-admin', LocalStore()).save(Identity(id='admin-1', is_admin=True))
        gate = AuthGate(
            StaticProvider(PILOT, delay=1),
            StaticChecker(is_admin=False),
            IdentityCache('token-kari', LocalStore()),
            notifier,
            GateConfig(require_admin=True, timeout=0.01),
        )

        assert resolve(gate) is GateDecision.REDIRECT_LOGIN
        assert gate.used_cached_fallback is False
        assert gate.identity is None

    def test_grace_timer_cancelled_on_exit(self, make_gate):
        gate = make_gate(StaticProvider(PILOT), grace_window=60)

        resolve(gate)

        assert gate._grace_task is None

    def test_config_from_settings(self, settings):
        settings.PORTAL_AUTH = {'TIMEOUT': 2, 'GRACE_WINDOW': 0.5, 'ALLOW_CACHED_FALLBACK': False}

        config = GateConfig.from_settings(require_admin=True)

        assert config == GateConfig(require_admin=True, timeout=2.0, grace_window=0.5, allow_cached_fallback=False)


class TestIdentityCache:
    """Tests for the stored identity blob."""

    def test_round_trip(self, identity_cache):
        identity_cache.save(Identity(id='user-1', email='kari@example.com', is_admin=True))

        assert identity_cache.load() == Identity(id='user-1', email='kari@example.com', is_admin=True)

    def test_camel_case_admin_flag(self, identity_cache):
        identity_cache.store.set_json(identity_cache.key, {'id': 'user-1', 'isAdmin': True})

        assert identity_cache.load().is_admin is True

    @pytest.mark.parametrize('raw', ['{not json', '["user-1"]', '{"email": "no-id@example.com"}'])
    def test_malformed_blob_is_none(self, identity_cache, raw):
        identity_cache.store.set_raw(identity_cache.key, raw)

        assert identity_cache.load() is None

    def test_sessions_do_not_share_entries(self, identity_cache):
        identity_cache.save(PILOT)

        assert IdentityCache('token-other', LocalStore()).load() is None

    def test_no_session_stores_nothing(self):
        cache = IdentityCache(None, LocalStore())

        assert cache.save(PILOT) is False
        assert cache.load() is None

    def test_key_does_not_expose_token(self, identity_cache):
        assert identity_cache.key.startswith('pilot_portal_user:')
        assert 'token-kari' not in identity_cache.key

    def test_clear(self, identity_cache):
        identity_cache.save(PILOT)
        identity_cache.clear()

        assert identity_cache.load() is None


class TestTokenIdentityProvider:
    """Tests for bearer token sessions."""

    def test_valid_token(self, make_token):
        token = make_token('user-1', email='kari@example.com', name='Kari Nordmann')

        identity = asyncio.run(TokenIdentityProvider(token).current_identity())

        assert identity == PILOT

    def test_expired_token(self, settings, make_token):
        settings.JWT_SETTINGS = {**settings.JWT_SETTINGS, 'ACCESS_TOKEN_LIFETIME': timedelta(seconds=-1)}
        token = make_token('user-1')

        assert asyncio.run(TokenIdentityProvider(token).current_identity()) is None

    @pytest.mark.parametrize('token', [None, '', 'not-a-jwt'])
    def test_missing_or_garbage_token(self, token):
        assert asyncio.run(TokenIdentityProvider(token).current_identity()) is None


class TestGatewayRoleChecker:
    """Tests for the server-side role check."""

    def make_checker(self, handler):
        client = FunctionsClient(
            base_url='http://portal.test',
            api_key='test-anon-key',
            transport=httpx.MockTransport(handler),
        )
        return GatewayRoleChecker(PortalGateway(client), 'token-123')

    def test_admin(self):
        def handler(request):
            assert request.headers['Authorization'] == 'Bearer token-123'
            return httpx.Response(200, json={'success': True, 'data': {'isAdmin': True}})

        assert asyncio.run(self.make_checker(handler).is_admin(PILOT)) is True

    def test_failed_call_is_not_admin(self):
        def handler(request):
            return httpx.Response(500, json={'success': False, 'error': 'boom'})

        assert asyncio.run(self.make_checker(handler).is_admin(PILOT)) is False
