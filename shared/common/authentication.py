# shared/common/authentication.py
"""
JWT Authentication and Service Key Authentication
"""

import hmac
import jwt
import logging
from datetime import datetime, timezone
from typing import Optional, Dict, Any, Tuple
from django.conf import settings
from rest_framework import authentication, exceptions
from rest_framework.request import Request

logger = logging.getLogger(__name__)


class JWTAuthentication(authentication.BaseAuthentication):
    """
    Bearer token authentication for portal functions.
    Tokens are signed with the key pair configured in JWT_SETTINGS.
    """

    keyword = 'Bearer'

    def authenticate(self, request: Request) -> Optional[Tuple[Any, Dict]]:
        auth_header = authentication.get_authorization_header(request)

        if not auth_header:
            return None

        try:
            auth_parts = auth_header.decode('utf-8').split()
        except UnicodeDecodeError:
            raise exceptions.AuthenticationFailed('Invalid token header encoding')

        if len(auth_parts) != 2:
            raise exceptions.AuthenticationFailed('Invalid token header format')

        if auth_parts[0].lower() != self.keyword.lower():
            return None

        token = auth_parts[1]
        return self.authenticate_token(token)

    def authenticate_token(self, token: str) -> Tuple[Any, Dict]:
        """Validate and decode JWT token"""
        try:
            payload = JWTTokenGenerator.decode_token(token)
        except jwt.ExpiredSignatureError:
            raise exceptions.AuthenticationFailed('Token has expired')
        except jwt.InvalidTokenError as e:
            logger.warning(f"Invalid token: {e}")
            raise exceptions.AuthenticationFailed('Invalid token')

        return (TokenUser(payload), payload)

    def authenticate_header(self, request: Request) -> str:
        return self.keyword


class ServiceKeyAuthentication(authentication.BaseAuthentication):
    """
    Privileged caller authentication through the ``apikey`` header.

    Browsers send the public anon key in the same header, so a key that
    does not match the service key is ignored rather than rejected.
    """

    header = 'apikey'

    def authenticate(self, request: Request) -> Optional[Tuple[Any, Dict]]:
        api_key = request.headers.get(self.header)
        service_key = getattr(settings, 'PORTAL_SERVICE_KEY', '')

        if not api_key or not service_key:
            return None

        if not hmac.compare_digest(api_key, service_key):
            return None

        client_info = request.headers.get('X-Client-Info', 'unknown')
        return (ServiceUser(client_info), {'service': client_info})

    def authenticate_header(self, request: Request) -> str:
        # Keeps rejected bearer tokens at 401
        return JWTAuthentication.keyword


class TokenUser:
    """
    User object created from JWT token payload.
    """

    def __init__(self, payload: Dict):
        self.payload = payload
        self.id = payload.get('sub')
        self.user_id = payload.get('sub')
        self.email = payload.get('email')
        self.name = payload.get('name') or payload.get('username')
        self.is_service = False
        self.is_active = True
        self.is_authenticated = True
        self.is_anonymous = False

    def __str__(self) -> str:
        return f"TokenUser({self.email})"


class ServiceUser:
    """
    User object for callers holding the service key.
    """

    def __init__(self, client_info: str):
        self.client_info = client_info
        self.id = f"service:{client_info}"
        self.email = None
        self.is_service = True
        self.is_active = True
        self.is_authenticated = True
        self.is_anonymous = False

    def __str__(self) -> str:
        return f"ServiceUser({self.client_info})"


class JWTTokenGenerator:
    """
    Generate and decode portal access tokens.
    """

    @staticmethod
    def generate_access_token(
        user_id: str,
        email: str,
        name: str = None,
        extra_claims: Dict = None
    ) -> str:
        """Generate an access token"""
        now = datetime.now(timezone.utc)

        payload = {
            'sub': user_id,
            'email': email,
            'name': name,
            'iat': now,
            'exp': now + settings.JWT_SETTINGS['ACCESS_TOKEN_LIFETIME'],
            'iss': settings.JWT_SETTINGS['ISSUER'],
            'type': 'access',
        }

        if extra_claims:
            payload.update(extra_claims)

        return jwt.encode(
            payload,
            settings.JWT_SETTINGS['SIGNING_KEY'],
            algorithm=settings.JWT_SETTINGS['ALGORITHM']
        )

    @staticmethod
    def decode_token(token: str, verify_exp: bool = True) -> Dict:
        """Decode and verify a token"""
        return jwt.decode(
            token,
            settings.JWT_SETTINGS['VERIFYING_KEY'],
            algorithms=[settings.JWT_SETTINGS['ALGORITHM']],
            issuer=settings.JWT_SETTINGS['ISSUER'],
            options={
                'require': ['exp', 'iat', 'sub'],
                'verify_exp': verify_exp,
            }
        )
