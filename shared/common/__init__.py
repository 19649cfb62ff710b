# Shared Common Library for the Pilot Portal
# This package contains the error taxonomy, the functions client, the
# realtime change stream, authentication and permissions used by the
# portal service and the portal client.

__version__ = "1.0.0"

from .exceptions import (
    PortalError,
    RemoteCallError,
    MissingFieldError,
    AuthenticationRequiredError,
    AuthorizationError,
    NotFoundError,
    IdentityTimeoutError,
    MalformedPayloadError,
    ConfigurationError,
)

__all__ = [
    # Version
    '__version__',

    # Exceptions
    'PortalError',
    'RemoteCallError',
    'MissingFieldError',
    'AuthenticationRequiredError',
    'AuthorizationError',
    'NotFoundError',
    'IdentityTimeoutError',
    'MalformedPayloadError',
    'ConfigurationError',
]
