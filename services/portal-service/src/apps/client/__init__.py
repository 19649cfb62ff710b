# services/portal-service/src/apps/client/__init__.py
"""
Portal Client

Data gateway, change bridge and auth gate used by portal front ends.
"""

from .types import (
    Pilot,
    Aircraft,
    Flight,
    AdminReview,
    SafetyReport,
    RouteTargetTime,
    GatewayResult,
)
from .gateway import PortalGateway
from .realtime import ChangeHandler, CallbackHandler, ChangeSubscription, ChangeBridge
from .identity import (
    Identity,
    IdentityCache,
    IdentityProvider,
    TokenIdentityProvider,
    RoleChecker,
    GatewayRoleChecker,
    Notifier,
    RecordingNotifier,
)
from .auth_gate import GateState, GateDecision, GateConfig, AuthGate

__all__ = [
    'Pilot',
    'Aircraft',
    'Flight',
    'AdminReview',
    'SafetyReport',
    'RouteTargetTime',
    'GatewayResult',
    'PortalGateway',
    'ChangeHandler',
    'CallbackHandler',
    'ChangeSubscription',
    'ChangeBridge',
    'Identity',
    'IdentityCache',
    'IdentityProvider',
    'TokenIdentityProvider',
    'RoleChecker',
    'GatewayRoleChecker',
    'Notifier',
    'RecordingNotifier',
    'GateState',
    'GateDecision',
    'GateConfig',
    'AuthGate',
]
